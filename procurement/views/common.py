"""Helpers shared by the console views."""

from typing import Optional

from django.conf import settings

from ..services import user_service


def actor_id(request) -> Optional[str]:
    """Marketplace ``users.id`` recorded as the acting admin, if one resolves."""
    user = getattr(request, "user", None)
    return user_service.resolve_admin_user_id(getattr(user, "email", "") or "")


def default_currency() -> str:
    return getattr(settings, "DEFAULT_CURRENCY", "SAR")


def is_htmx(request) -> bool:
    return request.headers.get("HX-Request") == "true"
