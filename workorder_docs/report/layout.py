from __future__ import annotations

from dataclasses import dataclass

"""Page layout intent handed from the renderer to the rasterizer."""

__all__ = [
    "PageLayout",
]


@dataclass(frozen=True)
class PageLayout:
    """Physical page settings for the printable work order.

    The renderer writes them into the document (@page rule) and the
    rasterizer passes them to the browser's PDF call.
    """
    format: str = "A4"
    landscape: bool = True
    margin_top: str = "10mm"
    margin_right: str = "8mm"
    margin_bottom: str = "10mm"
    margin_left: str = "8mm"
    print_background: bool = True
    prefer_css_page_size: bool = True
    # wait condition for page.set_content ("layout settled")
    wait_until: str = "domcontentloaded"

    @property
    def css_page_size(self) -> str:
        orientation = "landscape" if self.landscape else "portrait"
        return f"{self.format} {orientation}"

    @property
    def css_margin(self) -> str:
        return f"{self.margin_top} {self.margin_right} {self.margin_bottom} {self.margin_left}"

    def pdf_options(self) -> dict[str, object]:
        """Keyword arguments for playwright's ``page.pdf``."""
        return {
            "format": self.format,
            "landscape": self.landscape,
            "print_background": self.print_background,
            "prefer_css_page_size": self.prefer_css_page_size,
            "display_header_footer": False,
            "margin": {
                "top": self.margin_top,
                "right": self.margin_right,
                "bottom": self.margin_bottom,
                "left": self.margin_left,
            },
        }
