"""
URL patterns for PDF printing endpoints.

Include them under any prefix:
    path("api/pdf/", include("record_pdf.urls"))
"""

from django.urls import path

from .views import MassPdfView, RecordPdfView

app_name = "record_pdf"

urlpatterns = [
    path("mass/", MassPdfView.as_view(), name="mass_pdf"),
    path("<int:template_id>/<str:pk>/", RecordPdfView.as_view(), name="record_pdf"),
]
