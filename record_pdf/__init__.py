"""
PDF printing of records through stored HTML templates.

A ``PdfTemplate`` binds header, body and footer markup (Django template
syntax) and page geometry to one entity type. ``record_pdf.printing.PdfService``
prints:

- a single record, inline or as bytes (``build_from_template``)
- a list of records into a durable "Mail Merge" attachment
  (``generate_mail_merge``)
- an ACL-filtered id list into a "Mass Pdf" attachment that a scheduled job
  removes after the retention period (``mass_generate``)

Usage:
    INSTALLED_APPS = [..., "record_pdf"]

    RECORD_PDF = {
        "default_font_face": "dejavusans",
        "mass_render_max_count": 500,
    }

    urlpatterns = [path("api/pdf/", include("record_pdf.urls"))]

Due cleanup jobs run with ``python manage.py run_pdf_jobs``.
"""

__version__ = "0.1.0"
