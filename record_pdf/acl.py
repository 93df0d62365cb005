"""
Access checks for templates, scopes and records based on Django permissions.
"""

import logging
from typing import Any, Optional

from django.apps import apps
from django.db import models

logger = logging.getLogger(__name__)

ACTION_CODENAMES = {
    "read": "view",
    "edit": "change",
    "create": "add",
    "delete": "delete",
}


def _permission_name(model: type[models.Model], action: str) -> str:
    codename = ACTION_CODENAMES.get(action, action)
    return f"{model._meta.app_label}.{codename}_{model._meta.model_name}"


class Acl:
    """
    Answer access questions for one user.

    A record is readable when the user holds the model-level ``view``
    permission or an object-level permission granted by an authentication
    backend (e.g. django-guardian). Superusers can access everything,
    anonymous users nothing.
    """

    def __init__(self, user: Optional[Any]):
        self.user = user

    def _is_authenticated(self) -> bool:
        return bool(self.user and getattr(self.user, "is_authenticated", False))

    def _is_superuser(self) -> bool:
        return bool(getattr(self.user, "is_superuser", False))

    def check(self, entity: models.Model, action: str = "read") -> bool:
        if not self._is_authenticated():
            return False
        if self._is_superuser():
            return True
        permission = _permission_name(type(entity), action)
        return self.user.has_perm(permission) or self.user.has_perm(permission, entity)

    def check_scope(self, entity_type: str, action: str = "read") -> bool:
        if not self._is_authenticated():
            return False
        if self._is_superuser():
            return True
        try:
            model = apps.get_model(entity_type)
        except (LookupError, ValueError):
            logger.debug("Scope check for unknown entity type %s", entity_type)
            return False
        return self.user.has_perm(_permission_name(model, action))


class SystemAcl(Acl):
    """Unrestricted access for internal callers such as management commands."""

    def __init__(self, user: Optional[Any] = None):
        super().__init__(user)

    def check(self, entity: models.Model, action: str = "read") -> bool:
        return True

    def check_scope(self, entity_type: str, action: str = "read") -> bool:
        return True
