"""
Single-record composition of a template into a PDF document.
"""

import logging
from typing import Any, Optional, Union

from django.db import models

from .conf import PdfSettings
from .merge import Htmlizer
from .models import PageFormat, PageOrientation, PdfTemplate
from .rendering import PdfDocument

logger = logging.getLogger(__name__)

DEFAULT_FONT_FACE = "freesans"


def resolve_orientation_code(template: PdfTemplate) -> str:
    orientation = template.page_orientation or PageOrientation.PORTRAIT
    return "L" if orientation == PageOrientation.LANDSCAPE else "P"


def resolve_page_format(template: PdfTemplate) -> Union[str, list]:
    page_format = template.page_format or PageFormat.A4
    if page_format == PageFormat.CUSTOM:
        return [template.page_width, template.page_height]
    return str(page_format)


class DocumentComposer:
    """Append one record, laid out by one template, to a ``PdfDocument``."""

    def __init__(self, settings: Optional[PdfSettings] = None):
        self.settings = settings or PdfSettings()

    def resolve_font_face(self, template: PdfTemplate) -> str:
        return template.font_face or self.settings.default_font_face or DEFAULT_FONT_FACE

    def compose(
        self,
        record: models.Model,
        template: PdfTemplate,
        htmlizer: Htmlizer,
        pdf: PdfDocument,
        additional_data: Optional[dict[str, Any]] = None,
    ) -> None:
        font_face = self.resolve_font_face(template)
        font_size = self.settings.font_size
        pdf.set_font(font_face, "", font_size)

        pdf.set_auto_page_break(True, template.bottom_margin)
        pdf.set_margins(template.left_margin, template.top_margin, template.right_margin)

        if template.print_footer:
            footer_html = htmlizer.render(record, template.footer or "", additional_data)
            pdf.set_footer_font((font_face, "", font_size))
            pdf.set_footer_position(template.footer_position)
            pdf.set_footer_html(footer_html)
            pdf.set_print_footer(True)
        else:
            pdf.set_print_footer(False)

        orientation_code = resolve_orientation_code(template)
        page_format = resolve_page_format(template)

        header_html = htmlizer.render(record, template.header or "", additional_data)
        if template.print_header:
            pdf.set_header_font((font_face, "", font_size))
            pdf.set_header_position(template.header_position)
            pdf.set_header_html(header_html)
            pdf.set_print_header(True)
            pdf.add_page(orientation_code, page_format)
        else:
            # Written once into the flow instead of repeating on every page.
            pdf.add_page(orientation_code, page_format)
            pdf.set_print_header(False)
            pdf.write_html(header_html)

        body_html = htmlizer.render(record, template.body or "", additional_data)
        pdf.write_html(body_html)
        logger.debug("Composed %s %s with template %s", record._meta.label, record.pk, template.pk)
