"""
Page-flow PDF document.

``PdfDocument`` exposes the writer-style API the composer drives (fonts,
margins, header/footer, pages, HTML flow, page groups) and records every page
start as a ``PageSection``. Serialization composes the sections to HTML and
hands them to the configured PDF engine.
"""

import itertools
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NamedTuple, Optional, Sequence, Union

from django.http import HttpResponse

from ..conf import resolve_url_fetcher
from ..exceptions import RenderingFailure
from .html import build_document_html
from .renderers import get_pdf_renderer

logger = logging.getLogger(__name__)

PageFormat = Union[str, Sequence[float]]


class FontSpec(NamedTuple):
    family: str
    style: str = ""
    size: float = 12


@dataclass
class PageSection:
    """Pages started by one ``add_page`` call and the content flowing over them."""

    index: int
    orientation: str
    page_format: PageFormat
    margins: tuple[float, float, float, float]
    font: FontSpec
    auto_page_break: bool = True
    header_html: Optional[str] = None
    header_font: Optional[FontSpec] = None
    header_position: float = 0
    footer_html: Optional[str] = None
    footer_font: Optional[FontSpec] = None
    footer_position: float = 0
    group: int = 0
    starts_group: bool = False
    content: list[str] = field(default_factory=list)


class PdfDocument:
    """
    Writer-style PDF document.

    Geometry, font and header/footer settings are captured by the next
    ``add_page``. Disabling the header also strips it from the open section, so
    a header can be turned off for a page that was just started.
    """

    def __init__(
        self,
        *,
        renderer: Optional[str] = None,
        base_url: Optional[str] = None,
        config: Optional[dict[str, Any]] = None,
    ) -> None:
        self.renderer_name = renderer
        self.base_url = base_url
        self.config = dict(config or {})
        self._font = FontSpec("freesans", "", 12)
        self._margins = (10.0, 10.0, 10.0, 20.0)
        self._auto_page_break = True
        self._print_header = True
        self._print_footer = True
        self._header_html = ""
        self._header_font: Optional[FontSpec] = None
        self._header_position = 0.0
        self._footer_html = ""
        self._footer_font: Optional[FontSpec] = None
        self._footer_position = 0.0
        self._use_group_numbers = False
        self._group_count = 0
        self._pending_group = False
        self._sections: list[PageSection] = []

    # ------------------------------------------------------------------
    # Fonts and geometry
    # ------------------------------------------------------------------

    def set_font(self, family: str, style: str = "", size: float = 12) -> None:
        self._font = FontSpec(family, style, size)

    def set_auto_page_break(self, auto: bool, margin: float = 0) -> None:
        left, top, right, _ = self._margins
        self._auto_page_break = bool(auto)
        self._margins = (left, top, right, float(margin or 0))

    def set_margins(self, left: float, top: float, right: Optional[float] = None) -> None:
        right = left if right is None else right
        self._margins = (float(left or 0), float(top or 0), float(right or 0), self._margins[3])

    # ------------------------------------------------------------------
    # Header and footer
    # ------------------------------------------------------------------

    def set_header_font(self, font: Sequence[Any]) -> None:
        self._header_font = FontSpec(*font)

    def set_header_position(self, position: float) -> None:
        self._header_position = float(position or 0)

    def set_header_html(self, html_content: str) -> None:
        self._header_html = html_content or ""

    def set_print_header(self, value: bool = True) -> None:
        self._print_header = bool(value)
        if not self._print_header and self._sections:
            self._sections[-1].header_html = None

    def set_footer_font(self, font: Sequence[Any]) -> None:
        self._footer_font = FontSpec(*font)

    def set_footer_position(self, position: float) -> None:
        self._footer_position = float(position or 0)

    def set_footer_html(self, html_content: str) -> None:
        self._footer_html = html_content or ""

    def set_print_footer(self, value: bool = True) -> None:
        self._print_footer = bool(value)

    # ------------------------------------------------------------------
    # Pages and content
    # ------------------------------------------------------------------

    def set_use_group_numbers(self, value: bool = True) -> None:
        self._use_group_numbers = bool(value)

    def start_page_group(self) -> None:
        """Make the next page the first page of a new page group."""
        self._pending_group = True

    def add_page(self, orientation: str = "P", page_format: PageFormat = "A4") -> PageSection:
        starts_group = self._pending_group
        if starts_group:
            self._group_count += 1
            self._pending_group = False

        section = PageSection(
            index=len(self._sections) + 1,
            orientation="L" if str(orientation).upper().startswith("L") else "P",
            page_format=page_format,
            margins=self._margins,
            font=self._font,
            auto_page_break=self._auto_page_break,
            header_html=self._header_html if self._print_header else None,
            header_font=self._header_font,
            header_position=self._header_position,
            footer_html=self._footer_html if self._print_footer else None,
            footer_font=self._footer_font,
            footer_position=self._footer_position,
            group=self._group_count,
            starts_group=starts_group,
        )
        self._sections.append(section)
        return section

    def write_html(self, html_content: str) -> None:
        if not self._sections:
            self.add_page()
        self._sections[-1].content.append(html_content or "")

    @property
    def sections(self) -> tuple[PageSection, ...]:
        return tuple(self._sections)

    @property
    def page_group_count(self) -> int:
        return self._group_count

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def build_documents(self) -> list[str]:
        """HTML documents handed to the engine, one per page group when grouping is on."""
        if not self._sections:
            return []
        if not self._use_group_numbers:
            return [build_document_html(self._sections, config=self.config)]
        return [
            build_document_html(list(group), config=self.config)
            for _, group in itertools.groupby(self._sections, key=lambda s: s.group)
        ]

    def render(self) -> bytes:
        renderer = get_pdf_renderer(self.renderer_name)
        if not renderer.supports("running_elements"):
            raise RenderingFailure(
                f"PDF engine '{renderer.name}' cannot repeat page headers and footers"
            )
        documents = self.build_documents()
        if len(documents) > 1 and not renderer.supports("page_groups"):
            documents = [build_document_html(self._sections, config=self.config)]
        logger.debug(
            "Rendering %s section(s) in %s document(s) with %s",
            len(self._sections),
            len(documents),
            renderer.name,
        )
        return renderer.render(
            documents,
            base_url=self.base_url,
            url_fetcher=resolve_url_fetcher(self.base_url),
            config=self.config,
        )

    def output(self, name: str = "document.pdf", dest: str = "S") -> Union[bytes, HttpResponse, None]:
        """
        Serialize the document.

        Args:
            name: File name of the target (path for ``F``).
            dest: ``S`` returns bytes, ``I`` an inline response, ``D`` a
                download response and ``F`` writes to the file ``name``.
        """
        dest = (dest or "S").upper()
        if dest not in ("S", "I", "D", "F"):
            raise ValueError(f"Unsupported output destination '{dest}'")

        pdf_bytes = self.render()
        if dest == "S":
            return pdf_bytes
        if dest == "F":
            Path(name).write_bytes(pdf_bytes)
            return None

        disposition = "inline" if dest == "I" else "attachment"
        response = HttpResponse(pdf_bytes, content_type="application/pdf")
        response["Content-Disposition"] = f'{disposition}; filename="{name}"'
        return response
