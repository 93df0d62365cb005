"""
PDF engines.

An engine turns a sequence of complete HTML documents into one PDF whose
pages follow the document order. Engines declare the layout features they
support in ``features``; ``PdfDocument`` refuses engines that cannot place
running headers and footers in the page margins.
"""

import io
from typing import Any, Callable, Optional, Sequence

from ..conf import get_pdf_settings
from ..exceptions import RenderingFailure

# Optional WeasyPrint import
try:
    import pydyf
    from weasyprint import HTML

    WEASYPRINT_AVAILABLE = True
except (ImportError, OSError):
    HTML = None
    pydyf = None
    WEASYPRINT_AVAILABLE = False


class PdfRenderer:
    """
    Interface of PDF engines.

    ``render`` receives one HTML document per page group (or a single
    document when grouping is off). An empty sequence must produce a PDF
    without pages.
    """

    name = "base"
    features: dict[str, bool] = {}

    def supports(self, feature: str) -> bool:
        return bool(self.features.get(feature, False))

    def render(
        self,
        documents: Sequence[str],
        *,
        base_url: Optional[str],
        url_fetcher: Optional[Callable],
        config: dict[str, Any],
    ) -> bytes:
        raise NotImplementedError


class WeasyPrintRenderer(PdfRenderer):
    """PDF engine backed by WeasyPrint's CSS paged media layout."""

    name = "weasyprint"
    features = {
        "url_fetcher": True,
        "page_groups": True,
        "running_elements": True,
    }

    def render(
        self,
        documents: Sequence[str],
        *,
        base_url: Optional[str],
        url_fetcher: Optional[Callable],
        config: dict[str, Any],
    ) -> bytes:
        if not WEASYPRINT_AVAILABLE or not HTML:
            raise RuntimeError("WeasyPrint is not installed")
        if not documents:
            return self._empty_pdf()

        options: dict[str, Any] = {"base_url": base_url}
        if url_fetcher:
            options["url_fetcher"] = url_fetcher
        rendered = [HTML(string=document, **options).render() for document in documents]
        # Each group is laid out on its own so page counters restart per group.
        pages = [page for document in rendered for page in document.pages]
        return rendered[0].copy(pages).write_pdf()

    def _empty_pdf(self) -> bytes:
        output = io.BytesIO()
        pydyf.PDF().write(output)
        return output.getvalue()


# ---------------------------------------------------------------------------
# Engine registry
# ---------------------------------------------------------------------------

_ENGINES: dict[str, PdfRenderer] = {}


def register_pdf_renderer(name: str, renderer: PdfRenderer) -> None:
    """Make ``renderer`` selectable through the ``renderer`` setting as ``name``."""
    _ENGINES[name.lower()] = renderer


def get_pdf_renderer(name: Optional[str] = None) -> PdfRenderer:
    """
    Look up an engine by name.

    Args:
        name: Registered engine name; the configured ``renderer`` when None.

    Raises:
        RenderingFailure: No engine is registered under that name, e.g.
            WeasyPrint is configured but could not be imported.
    """
    engine_name = (name or get_pdf_settings().renderer).lower()
    try:
        return _ENGINES[engine_name]
    except KeyError:
        raise RenderingFailure(f"PDF engine '{engine_name}' is not available") from None


if WEASYPRINT_AVAILABLE:
    register_pdf_renderer("weasyprint", WeasyPrintRenderer())
