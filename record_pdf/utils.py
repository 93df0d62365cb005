"""
Helpers for entity types, record names and file names.
"""

import re
from typing import Any

from django.apps import apps
from django.conf import settings
from django.db import models
from django.utils import translation

from .exceptions import NotFound

# ASCII characters allowed in generated file names
FILENAME_UNSAFE_PATTERN = re.compile(r"[^\w \-~,;:\[\]().]", re.ASCII)


def sanitize_file_name(name: Any, *, default: str = "document") -> str:
    """
    Replace characters that are unsafe in file names with underscores.

    Examples:
        >>> sanitize_file_name("Q3 / Offers")
        "Q3 _ Offers"
    """
    if name is None:
        return default
    cleaned = FILENAME_UNSAFE_PATTERN.sub("_", str(name)).strip()
    cleaned = cleaned.strip(".")
    return cleaned[:200] or default


def get_entity_type(record: models.Model) -> str:
    """Return the entity-type tag of a record (its model label)."""
    return record._meta.label


def get_entity_model(entity_type: str) -> type[models.Model]:
    try:
        return apps.get_model(entity_type)
    except (LookupError, ValueError) as exc:
        raise NotFound(f"Unknown entity type '{entity_type}'.") from exc


def get_record_name(record: models.Model) -> str:
    name = getattr(record, "name", None)
    if name:
        return str(name)
    return str(record)


def translate_entity_type_plural(entity_type: str) -> str:
    """Plural label of an entity type in the site's default language."""
    try:
        model = apps.get_model(entity_type)
    except (LookupError, ValueError):
        return entity_type
    with translation.override(settings.LANGUAGE_CODE):
        return str(model._meta.verbose_name_plural)
