"""
PDF printing views.

This module provides Django views for printing a single record with a stored
template and for starting a mass print of many records.
"""

import json
import logging
from typing import Any

from django.core.exceptions import ValidationError
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from .exceptions import NotFound, PdfError
from .models import PdfTemplate
from .printing import PdfService
from .utils import get_entity_model

logger = logging.getLogger(__name__)


def _error_response(exc: PdfError) -> JsonResponse:
    return JsonResponse(
        {"error": exc.__class__.__name__, "detail": exc.detail},
        status=exc.status_code,
    )


def _unauthenticated_response() -> JsonResponse:
    return JsonResponse(
        {"error": "Unauthenticated", "detail": "Authentication required."}, status=401
    )


def _is_authenticated(request: HttpRequest) -> bool:
    user = getattr(request, "user", None)
    return bool(user and getattr(user, "is_authenticated", False))


class RecordPdfView(View):
    """Serve one record printed with a stored template, inline."""

    http_method_names = ["get"]

    def get(
        self,
        request: HttpRequest,
        template_id: int,
        pk: str,
        *args: Any,
        **kwargs: Any,
    ) -> HttpResponse:
        if not _is_authenticated(request):
            return _unauthenticated_response()

        try:
            template = PdfTemplate.objects.filter(pk=template_id).first()
            if template is None:
                raise NotFound(f"Template '{template_id}' not found.")

            model = get_entity_model(template.entity_type)
            try:
                record = model.objects.filter(pk=pk).first()
            except (ValidationError, ValueError, TypeError):
                record = None
            if record is None:
                raise NotFound(f"{template.entity_type} '{pk}' not found.")

            return PdfService(user=request.user).build_from_template(
                record, template, display_inline=True
            )
        except PdfError as exc:
            logger.info(
                "PDF print of template %s for %s failed: %s", template_id, pk, exc.detail
            )
            return _error_response(exc)


@method_decorator(csrf_exempt, name="dispatch")
class MassPdfView(View):
    """Start a mass print and return the id of the resulting attachment."""

    http_method_names = ["post"]

    def post(self, request: HttpRequest, *args: Any, **kwargs: Any) -> JsonResponse:
        if not _is_authenticated(request):
            return _unauthenticated_response()

        try:
            payload = json.loads(request.body or b"{}")
        except (json.JSONDecodeError, UnicodeDecodeError):
            return JsonResponse(
                {"error": "Invalid JSON", "detail": "Request body must be JSON."}, status=400
            )

        entity_type = payload.get("entity_type") if isinstance(payload, dict) else None
        ids = payload.get("ids") if isinstance(payload, dict) else None
        template_id = payload.get("template_id") if isinstance(payload, dict) else None
        if not entity_type or not isinstance(ids, list) or template_id in (None, ""):
            return JsonResponse(
                {
                    "error": "Invalid request",
                    "detail": "entity_type, ids and template_id are required.",
                },
                status=400,
            )

        try:
            attachment_id = PdfService(user=request.user).mass_generate(
                entity_type, ids, template_id, check_acl=True
            )
        except PdfError as exc:
            logger.info("Mass PDF print of %s failed: %s", entity_type, exc.detail)
            return _error_response(exc)

        return JsonResponse({"id": attachment_id})
