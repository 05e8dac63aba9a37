from __future__ import annotations

import json

import jsonschema
import pytest
import yaml
from jsonschema.exceptions import ValidationError

from workorder_docs.config.loader import SCHEMA_PATH

"""Config schema contract test (bundled config_schema.json)."""


@pytest.fixture()
def schema() -> dict:
    return json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))


def test_config_schema_valid_example(schema):
    config = {
        "source_directory": "./data",
        "output_directory": "./output",
        "output_label": "작업지시서",
        "strict_quantities": True,
        "pdf": {
            "enabled": True,
            "runtime": "serverless",
            "timeout_seconds": 45.5,
            "executable_path": "/usr/bin/chromium",
            "format": "A4",
            "landscape": True,
            "margin": {"top": "10mm", "right": "8mm", "bottom": "10mm", "left": "8mm"},
        },
    }
    jsonschema.validate(config, schema)


def test_config_schema_minimal_valid_config(schema):
    jsonschema.validate({"source_directory": "./data"}, schema)


def test_config_schema_missing_required_key(schema):
    with pytest.raises(ValidationError):
        jsonschema.validate({"output_directory": "./output"}, schema)


@pytest.mark.parametrize(
    "config",
    [
        {"source_directory": "./data", "extra_field": "not allowed"},
        {"source_directory": "./data", "pdf": {"dpi": 300}},
        {"source_directory": "./data", "pdf": {"margin": {"gutter": "1mm"}}},
    ],
)
def test_config_schema_rejects_extra_key(schema, config):
    with pytest.raises(ValidationError):
        jsonschema.validate(config, schema)


def test_config_schema_validates_from_sample_yaml(schema, sample_config_yaml: str):
    """The sample config from conftest.py validates against the schema."""
    jsonschema.validate(yaml.safe_load(sample_config_yaml), schema)
