"""
Per entity-type enrichment services.

Before a record is printed, the service registered for its entity type may
load additional (computed or related) fields onto it. Services that also
subclass ``PdfEnrichable`` get a second, print-specific hook.

Usage:
    from record_pdf.services import PdfEnrichable, RecordService, record_service

    @record_service("crm.Contact")
    class ContactService(RecordService, PdfEnrichable):
        def load_additional_fields_for_pdf(self, record):
            record.open_orders = record.orders.filter(status="open")
"""

import abc
import logging
from typing import Any, Callable, Optional

from django.db import models
from django.utils.module_loading import import_string

from .conf import get_pdf_settings

logger = logging.getLogger(__name__)


class RecordService:
    """Generic service used when an entity type registers none."""

    def __init__(self, user: Optional[Any] = None):
        self.user = user

    def load_additional_fields(self, record: models.Model) -> None:
        return None


class PdfEnrichable(abc.ABC):
    """Capability of services that load extra fields only needed for printing."""

    @abc.abstractmethod
    def load_additional_fields_for_pdf(self, record: models.Model) -> None:
        raise NotImplementedError


def load_record_fields(service: RecordService, record: models.Model) -> None:
    service.load_additional_fields(record)
    if isinstance(service, PdfEnrichable):
        service.load_additional_fields_for_pdf(record)


class RecordServiceRegistry:
    """Maps entity types to enrichment service classes."""

    def __init__(self, default: type[RecordService] = RecordService) -> None:
        self.default = default
        self._services: dict[str, type[RecordService]] = {}

    def register(self, entity_type: str, service_class: type[RecordService]) -> None:
        self._services[entity_type] = service_class
        logger.debug("Registered record service %s for %s", service_class.__name__, entity_type)

    def unregister(self, entity_type: str) -> None:
        self._services.pop(entity_type, None)

    def get(self, entity_type: str) -> Optional[type[RecordService]]:
        service_class = self._services.get(entity_type)
        if service_class:
            return service_class
        dotted_path = get_pdf_settings().services.get(entity_type)
        if dotted_path:
            return import_string(dotted_path)
        return None

    def resolve(self, entity_type: str, *, user: Optional[Any] = None) -> RecordService:
        """Instantiate the service for ``entity_type``, falling back to the default."""
        service_class = self.get(entity_type) or self.default
        return service_class(user=user)


# Global registry instance
record_services = RecordServiceRegistry()


def record_service(entity_type: str) -> Callable:
    """Class decorator registering an enrichment service for ``entity_type``."""

    def decorator(cls: type[RecordService]) -> type[RecordService]:
        record_services.register(entity_type, cls)
        return cls

    return decorator
