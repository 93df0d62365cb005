"""
Django app configuration for record_pdf.
"""

import logging

from django.apps import AppConfig

logger = logging.getLogger(__name__)


class RecordPdfConfig(AppConfig):
    """Django app configuration for PDF printing of records."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "record_pdf"
    verbose_name = "Record PDF"
    label = "record_pdf"

    def ready(self):
        """Register the scheduled job handlers."""
        from . import printing  # noqa: F401

        logger.debug("record_pdf job handlers registered")
