from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..report.layout import PageLayout

"""Config loader.

Responsibilities:
- Load YAML config (default config/workorder.yml)
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults for every optional key
- Apply the WORKORDER_PDF_RUNTIME environment override
"""

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "ConfigError",
    "PdfConfig",
    "AppConfig",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/workorder.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
RUNTIME_ENV = "WORKORDER_PDF_RUNTIME"

DEFAULT_LABEL = "작업지시서"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class PdfConfig:
    enabled: bool = True
    runtime: str = "auto"  # auto | local | serverless
    timeout_seconds: float = 60.0
    executable_path: str | None = None
    layout: PageLayout = field(default_factory=PageLayout)


@dataclass(frozen=True)
class AppConfig:
    source_directory: str
    output_directory: str = "./output"
    output_label: str = DEFAULT_LABEL
    strict_quantities: bool = False
    pdf: PdfConfig = field(default_factory=PdfConfig)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _pdf_config(raw: dict[str, Any]) -> PdfConfig:
    defaults = PageLayout()
    margin = raw.get("margin", {})
    layout = PageLayout(
        format=raw.get("format", defaults.format),
        landscape=raw.get("landscape", defaults.landscape),
        margin_top=margin.get("top", defaults.margin_top),
        margin_right=margin.get("right", defaults.margin_right),
        margin_bottom=margin.get("bottom", defaults.margin_bottom),
        margin_left=margin.get("left", defaults.margin_left),
    )
    runtime = os.getenv(RUNTIME_ENV) or raw.get("runtime", "auto")
    if runtime not in ("auto", "local", "serverless"):
        raise ConfigError(f"{RUNTIME_ENV} must be auto, local or serverless (got {runtime!r})")
    return PdfConfig(
        enabled=raw.get("enabled", True),
        runtime=runtime,
        timeout_seconds=float(raw.get("timeout_seconds", 60.0)),
        executable_path=raw.get("executable_path"),
        layout=layout,
    )


def load_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")

    _validate_config_schema(data)

    return AppConfig(
        source_directory=data["source_directory"],
        output_directory=data.get("output_directory", "./output"),
        output_label=data.get("output_label", DEFAULT_LABEL),
        strict_quantities=data.get("strict_quantities", False),
        pdf=_pdf_config(data.get("pdf", {})),
    )
