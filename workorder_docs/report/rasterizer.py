from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Sequence
from typing import Any, Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from ..errors import RenderError
from ..models.work_order_row import WorkOrderRow
from .layout import PageLayout
from .renderer import render_work_order_html

"""Rasterizer boundary: HTML markup -> paginated PDF bytes.

The core only depends on the ``Rasterizer`` protocol. PlaywrightRasterizer is
the bundled implementation; it launches a private headless Chromium for every
call and closes it on every exit path (success, engine error, timeout,
cancellation). A pooled or queued engine can be swapped in behind the same
``render(markup, layout)`` call. Nothing here retries.
"""

__all__ = [
    "RUNTIMES",
    "SERVERLESS_ARGS",
    "Rasterizer",
    "PlaywrightRasterizer",
    "resolve_runtime",
    "render_pdf",
]

logger = logging.getLogger(__name__)

RUNTIMES = ("auto", "local", "serverless")
DEFAULT_TIMEOUT_SECONDS = 60.0

LOCAL_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
]
# constrained sandbox (serverless functions): single process, no /dev/shm
SERVERLESS_ARGS = [
    "--disable-gpu",
    "--single-process",
    "--no-zygote",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
]


class Rasterizer(Protocol):
    async def render(self, markup: str, layout: PageLayout) -> bytes:
        ...


def resolve_runtime(runtime: str) -> str:
    """Map ``auto`` to ``serverless`` when running on Vercel, else ``local``."""
    if runtime not in RUNTIMES:
        raise ValueError(f"unknown runtime: {runtime!r} (expected one of {RUNTIMES})")
    if runtime == "auto":
        return "serverless" if os.getenv("VERCEL") else "local"
    return runtime


class PlaywrightRasterizer:
    """Headless Chromium rasterizer, one browser per ``render`` call."""

    def __init__(
        self,
        *,
        runtime: str = "auto",
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        executable_path: str | None = None,
    ) -> None:
        self.runtime = resolve_runtime(runtime)
        self.timeout_seconds = timeout_seconds
        self.executable_path = executable_path

    def launch_options(self) -> dict[str, Any]:
        args = SERVERLESS_ARGS if self.runtime == "serverless" else LOCAL_ARGS
        options: dict[str, Any] = {"headless": True, "args": list(args)}
        if self.executable_path:
            options["executable_path"] = self.executable_path
        return options

    async def render(self, markup: str, layout: PageLayout) -> bytes:
        """Rasterize markup to PDF within ``timeout_seconds``.

        Raises:
            RenderError: engine failure or timeout
        """
        try:
            return await asyncio.wait_for(self._render(markup, layout), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            raise RenderError(f"rasterization timed out after {self.timeout_seconds:g}s") from e
        except PlaywrightError as e:
            raise RenderError("rasterization failed", engine_message=e.message) from e
        except OSError as e:
            raise RenderError("rasterization failed", engine_message=str(e)) from e

    async def _render(self, markup: str, layout: PageLayout) -> bytes:
        async with async_playwright() as p:
            browser = await p.chromium.launch(**self.launch_options())
            logger.debug(f"browser launched (runtime={self.runtime})")
            try:
                page = await browser.new_page()
                await page.set_content(markup, wait_until=layout.wait_until)
                return await page.pdf(**layout.pdf_options())
            finally:
                await browser.close()
                logger.debug("browser closed")


async def render_pdf(
    rows: Sequence[WorkOrderRow],
    rasterizer: Rasterizer,
    layout: PageLayout | None = None,
) -> bytes:
    """Render a batch to markup and rasterize it."""
    layout = layout or PageLayout()
    markup = render_work_order_html(rows, layout=layout)
    return await rasterizer.render(markup, layout)
