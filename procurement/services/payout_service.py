"""Supplier payouts recorded by admins after client payments clear."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional, Tuple

from django.utils import timezone

from .supabase_client import BACKEND_ERRORS, get_supabase_client
from .supabase_errors import (
    extract_error_message,
    is_schema_compatibility_error,
    user_facing_error,
)

logger = logging.getLogger(__name__)

TABLE = "supplier_payouts"

PENDING = "PENDING"
PROCESSING = "PROCESSING"
PAID = "PAID"
FAILED = "FAILED"
STATUSES = (PENDING, PROCESSING, PAID, FAILED)


def get_payouts(
    status: Optional[str] = None, supplier_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    """Return payouts newest first.

    Deployments without the payouts table yield an empty list.
    """
    client = get_supabase_client()
    if client is None:
        return []
    try:
        query = client.table(TABLE).select("*")
        if status and status != "ALL":
            query = query.eq("status", status)
        if supplier_id:
            query = query.eq("supplier_id", supplier_id)
        resp = query.order("created_at", desc=True).execute()
    except BACKEND_ERRORS as exc:
        if is_schema_compatibility_error(exc):
            logger.warning("Payouts table unavailable: %s", extract_error_message(exc))
        else:
            logger.exception("Failed to fetch payouts")
        return []
    return list(resp.data or [])


def get_payout(payout_id: str) -> Optional[Dict[str, Any]]:
    client = get_supabase_client()
    if client is None:
        return None
    try:
        resp = client.table(TABLE).select("*").eq("id", payout_id).limit(1).execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch payout %s", payout_id)
        return None
    rows = resp.data or []
    return rows[0] if rows else None


def update_payout_status(
    payout_id: str, status: str, notes: Optional[str] = None
) -> Tuple[bool, str]:
    if status not in STATUSES:
        return False, f"Unknown payout status '{status}'."
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        client.rpc(
            "admin_update_payout_status",
            {"p_payout_id": payout_id, "p_status": status, "p_notes": notes},
        ).execute()
        return True, f"Payout marked {status.lower()}."
    except BACKEND_ERRORS as exc:
        logger.warning(
            "Payout status RPC failed for %s, falling back to direct update: %s",
            payout_id,
            extract_error_message(exc),
        )

    updates: Dict[str, Any] = {"status": status}
    if notes is not None:
        updates["notes"] = notes
    if status == PAID:
        updates["paid_at"] = timezone.now().isoformat()
    try:
        resp = client.table(TABLE).update(updates).eq("id", payout_id).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Failed to update payout %s: %s", payout_id, exc)
        return False, user_facing_error(exc, "Failed to update the payout.")
    if not resp.data:
        logger.error("Failed to update payout status: payout %s not found", payout_id)
        return False, f"Payout {payout_id} not found."
    return True, f"Payout marked {status.lower()}."


def _rpc_payout_id(data: Any) -> Optional[str]:
    if isinstance(data, list):
        data = data[0] if data else None
    if isinstance(data, dict):
        return data.get("payout_id")
    return data if isinstance(data, str) else None


def record_payout(
    supplier_id: str,
    order_id: str,
    amount: Any,
    payment_method: str = "BANK_TRANSFER",
    reference_number: Optional[str] = None,
    notes: Optional[str] = None,
    admin_id: Optional[str] = None,
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """Record a payout owed to ``supplier_id`` for ``order_id``."""
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        return False, "Amount must be a number.", None
    if value <= 0:
        return False, "Amount must be greater than zero.", None
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured.", None

    try:
        resp = client.rpc(
            "admin_record_supplier_payout",
            {
                "p_supplier_id": supplier_id,
                "p_order_id": order_id,
                "p_amount": float(value),
                "p_payment_method": payment_method,
                "p_reference_number": reference_number,
                "p_notes": notes,
            },
        ).execute()
        payout_id = _rpc_payout_id(resp.data)
        if payout_id:
            return True, "Payout recorded.", get_payout(payout_id)
    except BACKEND_ERRORS as exc:
        logger.warning(
            "Record payout RPC failed, falling back to direct insert: %s",
            extract_error_message(exc),
        )

    payload = {
        "supplier_id": supplier_id,
        "order_id": order_id,
        "amount": float(value),
        "currency": "SAR",
        "status": PENDING,
        "payment_method": payment_method,
        "reference_number": reference_number,
        "notes": notes,
        "created_by": admin_id,
    }
    try:
        resp = client.table(TABLE).insert(payload).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Failed to record payout for order %s: %s", order_id, exc)
        return False, user_facing_error(exc, "Failed to record the payout."), None
    return True, "Payout recorded.", (resp.data or [None])[0]


def summarize_payouts(payouts: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Return ``{status: {"count": n, "amount": Decimal}}`` for every status."""
    summary = {status: {"count": 0, "amount": Decimal("0")} for status in STATUSES}
    for payout in payouts:
        bucket = summary.get(str(payout.get("status") or "").upper())
        if bucket is None:
            continue
        bucket["count"] += 1
        try:
            bucket["amount"] += Decimal(str(payout.get("amount") or 0))
        except InvalidOperation:
            logger.warning("Ignoring invalid payout amount on %s", payout.get("id"))
    return summary


def pending_count() -> int:
    return len(get_payouts(status=PENDING))
