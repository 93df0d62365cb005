"""
HTML composition of page sections.

Every section opened by ``PdfDocument.add_page`` becomes a ``<section>`` bound
to its own named CSS page. The named page carries the section's size,
orientation and margins, and installs the section's header and footer as
running elements in the top and bottom page-margin boxes, so they repeat on
every page the section flows over.
"""

from typing import TYPE_CHECKING, Any, Iterable, Optional

if TYPE_CHECKING:
    from .document import FontSpec, PageSection

PAGE_NUMBER_PLACEHOLDER = "{pageNumber}"
PAGE_COUNT_PLACEHOLDER = "{pageCount}"

BASE_CSS = (
    ".pdf-section + .pdf-section { break-before: page; }\n"
    ".pdf-header, .pdf-footer { width: 100%; }\n"
    ".pdf-page-number::before { content: counter(page); }\n"
    ".pdf-page-count::before { content: counter(pages); }"
)


def _css_escape(value: str) -> str:
    """
    Escape a string for safe inclusion in a quoted CSS value.
    """
    result = []
    for char in value:
        if char == "\\":
            result.append("\\\\")
        elif char == '"':
            result.append('\\"')
        elif char == "'":
            result.append("\\'")
        elif char in "{}<>;":
            result.append(f"\\{ord(char):X} ")
        elif ord(char) < 32 or ord(char) == 127:
            result.append(f"\\{ord(char):X} ")
        else:
            result.append(char)
    return "".join(result)


def _mm(value: Any) -> str:
    return f"{float(value or 0):g}mm"


def _font_css(font: Optional["FontSpec"]) -> str:
    if font is None:
        return ""
    chunks = [
        f'font-family: "{_css_escape(font.family)}", sans-serif;',
        f"font-size: {float(font.size):g}pt;",
    ]
    style = (font.style or "").upper()
    if "B" in style:
        chunks.append("font-weight: bold;")
    if "I" in style:
        chunks.append("font-style: italic;")
    if "U" in style:
        chunks.append("text-decoration: underline;")
    return " ".join(chunks)


def page_size_css(section: "PageSection") -> str:
    """CSS ``size`` value for a section's page format and orientation."""
    page_format = section.page_format
    if isinstance(page_format, (list, tuple)):
        width, height = float(page_format[0]), float(page_format[1])
        landscape = section.orientation == "L"
        if (landscape and width < height) or (not landscape and width > height):
            width, height = height, width
        return f"{_mm(width)} {_mm(height)}"
    orientation = "landscape" if section.orientation == "L" else "portrait"
    return f"{page_format} {orientation}"


def replace_page_placeholders(html_content: str) -> str:
    return html_content.replace(
        PAGE_NUMBER_PLACEHOLDER, "<span class='pdf-page-number'></span>"
    ).replace(PAGE_COUNT_PLACEHOLDER, "<span class='pdf-page-count'></span>")


def build_section_css(section: "PageSection") -> str:
    name = f"section-{section.index}"
    left, top, right, bottom = section.margins
    page_rules = [
        f"size: {page_size_css(section)};",
        f"margin: {_mm(top)} {_mm(right)} {_mm(bottom)} {_mm(left)};",
    ]
    if section.header_html is not None:
        page_rules.append(
            f"@top-center {{ content: element(header-{section.index});"
            f" vertical-align: top; padding-top: {_mm(section.header_position)}; }}"
        )
    if section.footer_html is not None:
        page_rules.append(
            f"@bottom-center {{ content: element(footer-{section.index});"
            f" vertical-align: bottom; padding-bottom: {_mm(section.footer_position)}; }}"
        )

    css_chunks = [
        f"@page {name} {{ {' '.join(page_rules)} }}",
        f"#{name} {{ page: {name}; {_font_css(section.font)} }}",
    ]
    if section.header_html is not None:
        css_chunks.append(
            f"#{name} > .pdf-header {{ position: running(header-{section.index});"
            f" {_font_css(section.header_font)} }}"
        )
    if section.footer_html is not None:
        css_chunks.append(
            f"#{name} > .pdf-footer {{ position: running(footer-{section.index});"
            f" {_font_css(section.footer_font)} }}"
        )
    return "\n".join(css_chunks)


def build_section_html(section: "PageSection") -> str:
    parts = [
        f"<section id='section-{section.index}' class='pdf-section'"
        f" data-page-group='{section.group}'>"
    ]
    if section.header_html is not None:
        parts.append(
            f"<div class='pdf-header'>{replace_page_placeholders(section.header_html)}</div>"
        )
    if section.footer_html is not None:
        parts.append(
            f"<div class='pdf-footer'>{replace_page_placeholders(section.footer_html)}</div>"
        )
    parts.append(f"<div class='pdf-content'>{''.join(section.content)}</div>")
    parts.append("</section>")
    return "".join(parts)


def build_document_html(
    sections: Iterable["PageSection"], *, config: Optional[dict[str, Any]] = None
) -> str:
    """
    Compose a complete HTML document from page sections.

    Args:
        sections: Sections in output order.
        config: Optional engine configuration; ``extra_css`` is appended.

    Returns:
        Complete HTML document string.
    """
    sections = list(sections)
    css_chunks = [BASE_CSS]
    css_chunks.extend(build_section_css(section) for section in sections)
    extra_css = (config or {}).get("extra_css")
    if extra_css:
        css_chunks.append(str(extra_css))
    style_block = "\n".join(css_chunks)
    body = "".join(build_section_html(section) for section in sections)
    return (
        "<!DOCTYPE html><html><head><meta charset='utf-8'><style>"
        f"{style_block}"
        "</style></head><body>"
        f"{body}"
        "</body></html>"
    )
