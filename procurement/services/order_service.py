"""Order reads and status updates used by the admin screens."""

import logging
from typing import Any, Dict, List, Optional, Tuple

from .supabase_client import BACKEND_ERRORS, get_supabase_client
from .supabase_errors import user_facing_error

logger = logging.getLogger(__name__)

PENDING_PO_STATUSES = ("PENDING_ADMIN_CONFIRMATION", "PENDING_PO")


def get_orders(statuses: Optional[List[str]] = None) -> List[Dict[str, Any]]:
    """Return orders newest first, optionally limited to ``statuses``."""
    client = get_supabase_client()
    if client is None:
        return []
    try:
        query = client.table("orders").select("*")
        if statuses:
            query = query.in_("status", list(statuses))
        resp = query.order("created_at", desc=True).execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch orders")
        return []
    return list(resp.data or [])


def get_pending_po_orders() -> List[Dict[str, Any]]:
    """Return orders waiting for an admin to confirm the client PO.

    Statuses are matched case-insensitively; older rows may hold lower-case
    values.
    """
    client = get_supabase_client()
    if client is None:
        return []
    status_filter = ",".join(f"status.ilike.{status}" for status in PENDING_PO_STATUSES)
    try:
        resp = (
            client.table("orders")
            .select("*")
            .or_(status_filter)
            .order("created_at", desc=True)
            .execute()
        )
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch pending PO orders")
        return []
    orders = list(resp.data or [])
    return [
        order
        for order in orders
        if str(order.get("status") or "").upper() in PENDING_PO_STATUSES
    ]


def get_order(order_id: str) -> Optional[Dict[str, Any]]:
    client = get_supabase_client()
    if client is None:
        return None
    try:
        resp = client.table("orders").select("*").eq("id", order_id).limit(1).execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch order %s", order_id)
        return None
    rows = resp.data or []
    return rows[0] if rows else None


def update_order_status(order_id: str, status: str) -> Tuple[bool, str]:
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        resp = (
            client.table("orders")
            .update({"status": status})
            .eq("id", order_id)
            .execute()
        )
    except BACKEND_ERRORS as exc:
        logger.error("Error updating order %s to %s: %s", order_id, status, exc)
        return False, user_facing_error(exc, "Failed to update the order.")
    if not resp.data:
        return False, f"Order {order_id} not found."
    return True, f"Order {order_id} moved to {status}."
