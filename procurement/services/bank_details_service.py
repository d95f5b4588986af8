"""Bank accounts shown to clients paying by bank transfer.

At most one account is active at a time. Activating an account deactivates
the current one first.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from django.utils import timezone

from .supabase_cache import get_cached
from .supabase_client import BACKEND_ERRORS, get_supabase_client
from .supabase_errors import user_facing_error

logger = logging.getLogger(__name__)

TABLE = "bank_details"
_CACHE_TTL = 60  # seconds

FIELDS = (
    "bank_name",
    "account_name",
    "account_number",
    "iban",
    "swift_code",
    "branch_name",
    "branch_code",
    "currency",
    "notes",
    "is_active",
)
REQUIRED_FIELDS = ("bank_name", "account_name", "account_number")


def _clean(details: Dict[str, Any]) -> Dict[str, Any]:
    cleaned: Dict[str, Any] = {}
    for name in FIELDS:
        if name not in details:
            continue
        value = details[name]
        if isinstance(value, str):
            value = value.strip() or None
        cleaned[name] = value
    return cleaned


def get_active_bank_details() -> Optional[Dict[str, Any]]:
    client = get_supabase_client()
    if client is None:
        return None
    try:
        resp = (
            client.table(TABLE)
            .select("*")
            .eq("is_active", True)
            .limit(1)
            .execute()
        )
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch active bank details")
        return None
    rows = resp.data or []
    return rows[0] if rows else None


def _load_active() -> Dict[str, Any]:
    return get_active_bank_details() or {}


cached_active_bank_details = get_cached(_load_active, _CACHE_TTL)


def get_all_bank_details() -> List[Dict[str, Any]]:
    client = get_supabase_client()
    if client is None:
        return []
    try:
        resp = client.table(TABLE).select("*").order("created_at", desc=True).execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch bank details")
        return []
    return list(resp.data or [])


def get_bank_details(details_id: str) -> Optional[Dict[str, Any]]:
    client = get_supabase_client()
    if client is None:
        return None
    try:
        resp = client.table(TABLE).select("*").eq("id", details_id).limit(1).execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch bank details %s", details_id)
        return None
    rows = resp.data or []
    return rows[0] if rows else None


def _deactivate_active(client) -> None:
    client.table(TABLE).update({"is_active": False}).eq("is_active", True).execute()


def create_bank_details(
    details: Dict[str, Any]
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """Add an account. The first account ever added becomes active."""
    payload = _clean(details)
    missing = [name for name in REQUIRED_FIELDS if not payload.get(name)]
    if missing:
        return False, f"Missing required fields: {', '.join(missing)}.", None
    payload["currency"] = (payload.get("currency") or "SAR").upper()
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured.", None
    try:
        if not get_all_bank_details():
            payload["is_active"] = True
        payload["is_active"] = bool(payload.get("is_active"))
        if payload["is_active"]:
            _deactivate_active(client)
        resp = client.table(TABLE).insert(payload).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Error creating bank details: %s", exc)
        return False, user_facing_error(exc, "Failed to save bank details."), None
    cached_active_bank_details.invalidate()
    return True, "Bank account added.", (resp.data or [None])[0]


def update_bank_details(details_id: str, updates: Dict[str, Any]) -> Tuple[bool, str]:
    payload = _clean(updates)
    for name in REQUIRED_FIELDS:
        if name in payload and not payload[name]:
            return False, f"{name.replace('_', ' ').capitalize()} cannot be empty."
    if not payload:
        return False, "No valid fields provided for update."
    if payload.get("currency"):
        payload["currency"] = payload["currency"].upper()
    payload["updated_at"] = timezone.now().isoformat()
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        if payload.get("is_active"):
            _deactivate_active(client)
        resp = client.table(TABLE).update(payload).eq("id", details_id).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Error updating bank details %s: %s", details_id, exc)
        return False, user_facing_error(exc, "Failed to update bank details.")
    cached_active_bank_details.invalidate()
    if not resp.data:
        return False, f"Bank account {details_id} not found."
    return True, "Bank account updated."


def set_active_bank_details(details_id: str) -> Tuple[bool, str]:
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        found = client.table(TABLE).select("id").eq("id", details_id).limit(1).execute()
        if not found.data:
            return False, f"Bank account {details_id} not found."
        _deactivate_active(client)
        resp = (
            client.table(TABLE)
            .update({"is_active": True, "updated_at": timezone.now().isoformat()})
            .eq("id", details_id)
            .execute()
        )
    except BACKEND_ERRORS as exc:
        logger.error("Error activating bank details %s: %s", details_id, exc)
        return False, user_facing_error(exc, "Failed to activate the bank account.")
    cached_active_bank_details.invalidate()
    if not resp.data:
        return False, f"Bank account {details_id} not found."
    return True, "Bank account is now active."


def delete_bank_details(details_id: str) -> Tuple[bool, str]:
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        client.table(TABLE).delete().eq("id", details_id).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Error deleting bank details %s: %s", details_id, exc)
        return False, user_facing_error(exc, "Failed to delete the bank account.")
    cached_active_bank_details.invalidate()
    return True, "Bank account deleted."
