"""
Merge engine substituting record values into template markup.
"""

from typing import Any, Optional

from django.db import models
from django.template import Context, Engine


class Htmlizer:
    """Render template markup with Django's template language against a record."""

    def __init__(self, engine: Optional[Engine] = None):
        self.engine = engine or Engine.get_default()

    def build_context(
        self, record: models.Model, additional_data: Optional[dict[str, Any]] = None
    ) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for field in record._meta.concrete_fields:
            data[field.attname] = getattr(record, field.attname)
        data["record"] = record
        if additional_data:
            data.update(additional_data)
        return data

    def render(
        self,
        record: models.Model,
        markup: Optional[str],
        additional_data: Optional[dict[str, Any]] = None,
    ) -> str:
        if not markup:
            return ""
        template = self.engine.from_string(markup)
        return template.render(Context(self.build_context(record, additional_data)))
