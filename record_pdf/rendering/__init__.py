"""
Rendering subpackage for PDF printing.

This package provides the page-flow document, the HTML composition of its
sections and the pluggable PDF engines.
"""

from .document import FontSpec, PageSection, PdfDocument

from .html import (
    build_document_html,
    build_section_css,
    build_section_html,
    page_size_css,
    replace_page_placeholders,
)

from .renderers import (
    PdfRenderer,
    WeasyPrintRenderer,
    register_pdf_renderer,
    get_pdf_renderer,
    WEASYPRINT_AVAILABLE,
)

__all__ = [
    "FontSpec",
    "PageSection",
    "PdfDocument",
    "build_document_html",
    "build_section_css",
    "build_section_html",
    "page_size_css",
    "replace_page_placeholders",
    "PdfRenderer",
    "WeasyPrintRenderer",
    "register_pdf_renderer",
    "get_pdf_renderer",
    "WEASYPRINT_AVAILABLE",
]
