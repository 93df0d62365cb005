"""
Exceptions raised by the PDF printing pipeline.

Every error carries an HTTP ``status_code`` and a human readable ``detail`` so
views can turn it into a JSON response. ``Forbidden`` and ``NotFound`` also
derive from Django's ``PermissionDenied`` and ``Http404`` so plain Django
request handling maps them to 403/404 as well.
"""

from typing import Optional

from django.core.exceptions import PermissionDenied
from django.http import Http404


class PdfError(Exception):
    """Base class for PDF printing errors."""

    status_code = 500
    default_detail = "PDF generation failed."

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class Forbidden(PdfError, PermissionDenied):
    """Raised when the acting user may not read a template, scope or record."""

    status_code = 403
    default_detail = "Access denied."


class ValidationMismatch(Forbidden):
    """Raised when a template is used for records of another entity type."""

    default_detail = "Template entity type does not match the record."


class NotFound(PdfError, Http404):
    """Raised when a template, entity type or record cannot be found."""

    status_code = 404
    default_detail = "Not found."


class VolumeLimitExceeded(PdfError):
    """Raised when a mass print request exceeds the configured record count."""

    status_code = 400
    default_detail = "Mass print to PDF max count exceeded."


class RenderingFailure(PdfError):
    """Raised when markup merging or the PDF engine fails mid-batch."""

    status_code = 500
    default_detail = "PDF rendering failed."
