"""Lookups against the marketplace ``users`` table."""

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional

from django.conf import settings

from .supabase_client import BACKEND_ERRORS, get_supabase_client

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown client"
INELIGIBLE_SUPPLIER_STATUSES = {"REJECTED", "DEACTIVATED"}


def get_users(role: Optional[str] = None) -> List[Dict[str, Any]]:
    """Return users, optionally restricted to ``role``.

    An empty list is returned when the backend is unavailable.
    """
    client = get_supabase_client()
    if client is None:
        return []
    try:
        query = client.table("users").select("*")
        if role:
            query = query.eq("role", role)
        resp = query.order("company_name").execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch users")
        return []
    return list(resp.data or [])


def get_suppliers() -> List[Dict[str, Any]]:
    return get_users(role="SUPPLIER")


def get_user(user_id: str) -> Optional[Dict[str, Any]]:
    client = get_supabase_client()
    if client is None or not user_id:
        return None
    try:
        resp = client.table("users").select("*").eq("id", user_id).limit(1).execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch user %s", user_id)
        return None
    rows = resp.data or []
    return rows[0] if rows else None


def display_name(user: Optional[Dict[str, Any]], default: str = UNKNOWN_CLIENT) -> str:
    """Return the company name, falling back to the person's name."""
    if not user:
        return default
    return user.get("company_name") or user.get("name") or default


def name_lookup(users: Iterable[Dict[str, Any]]) -> Dict[str, str]:
    return {user["id"]: display_name(user) for user in users if user.get("id")}


def is_eligible_supplier(user: Optional[Dict[str, Any]]) -> bool:
    """Return ``True`` when ``user`` may receive custom request assignments."""
    if not user or user.get("role") != "SUPPLIER":
        return False
    return str(user.get("status") or "").upper() not in INELIGIBLE_SUPPLIER_STATUSES


def is_uuid(value: Any) -> bool:
    try:
        uuid.UUID(str(value))
    except (TypeError, ValueError):
        return False
    return True


def resolve_admin_user_id(email: str = "") -> Optional[str]:
    """Return the marketplace ``users.id`` acting for the console operator.

    ``CONSOLE_ADMIN_USER_ID`` wins when it holds a UUID. Otherwise the ADMIN
    user whose email matches ``email`` is used. ``None`` means no marketplace
    admin could be resolved and actor columns are left empty.
    """
    configured = str(getattr(settings, "CONSOLE_ADMIN_USER_ID", "") or "").strip()
    if configured:
        if is_uuid(configured):
            return configured
        logger.warning("CONSOLE_ADMIN_USER_ID %r is not a UUID, ignoring it", configured)
    email = (email or "").strip()
    if not email:
        return None
    client = get_supabase_client()
    if client is None:
        return None
    try:
        resp = (
            client.table("users")
            .select("id,email,role")
            .eq("role", "ADMIN")
            .ilike("email", email)
            .limit(1)
            .execute()
        )
    except BACKEND_ERRORS:
        logger.exception("Failed to resolve marketplace admin for %s", email)
        return None
    rows = resp.data or []
    if not rows or not is_uuid(rows[0].get("id")):
        logger.warning("No marketplace admin user matches %s", email)
        return None
    return str(rows[0]["id"])
