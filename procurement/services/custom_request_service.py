"""Custom item requests raised by clients for products outside the catalog.

Admins triage the queue: review, assign a supplier who will quote, reject
with a reason, or keep notes. Rows are mapped to :class:`CustomItemRequest`
so views and the API work with attributes instead of raw column names.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple

from django.utils import timezone

from . import user_service
from .supabase_client import (
    BACKEND_ERRORS,
    get_supabase_client,
    insert_pruning_missing_columns,
)
from .supabase_errors import extract_error_message, user_facing_error

logger = logging.getLogger(__name__)

TABLE = "custom_item_requests"

PENDING = "PENDING"
UNDER_REVIEW = "UNDER_REVIEW"
ASSIGNED = "ASSIGNED"
QUOTED = "QUOTED"
APPROVED = "APPROVED"
REJECTED = "REJECTED"
CANCELLED = "CANCELLED"

STATUSES = (PENDING, UNDER_REVIEW, ASSIGNED, QUOTED, APPROVED, REJECTED, CANCELLED)
OPEN_STATUSES = (PENDING, UNDER_REVIEW)
PRIORITIES = ("LOW", "MEDIUM", "HIGH", "URGENT")
_PRIORITY_RANK = {name: rank for rank, name in enumerate(PRIORITIES)}


@dataclass
class CustomItemRequest:
    id: str
    client_id: str
    item_name: str
    description: str = ""
    specifications: Optional[str] = None
    category: Optional[str] = None
    quantity: int = 1
    target_price: Optional[float] = None
    currency: str = "SAR"
    deadline: Optional[str] = None
    priority: str = "MEDIUM"
    reference_images: List[str] = field(default_factory=list)
    attachment_urls: List[str] = field(default_factory=list)
    status: str = PENDING
    admin_notes: Optional[str] = None
    assigned_to: Optional[str] = None
    assigned_at: Optional[str] = None
    assigned_by: Optional[str] = None
    supplier_quote_id: Optional[str] = None
    responded_at: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "CustomItemRequest":
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in row.items() if key in known}
        values["reference_images"] = list(row.get("reference_images") or [])
        values["attachment_urls"] = list(row.get("attachment_urls") or [])
        values["description"] = row.get("description") or ""
        values["quantity"] = int(row.get("quantity") or 1)
        values["priority"] = row.get("priority") or "MEDIUM"
        values["status"] = row.get("status") or PENDING
        values["currency"] = row.get("currency") or "SAR"
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def is_open(self) -> bool:
        return self.status in OPEN_STATUSES


def _rows_to_requests(rows: Optional[List[Dict[str, Any]]]) -> List[CustomItemRequest]:
    return [CustomItemRequest.from_row(row) for row in rows or []]


def create_request(details: Dict[str, Any]) -> Tuple[bool, str, Optional[CustomItemRequest]]:
    """Insert a new request in ``PENDING`` status."""
    if not (details.get("item_name") or "").strip():
        return False, "Item name is required.", None
    if not details.get("client_id"):
        return False, "Client is required.", None
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured.", None
    payload = {
        "client_id": details["client_id"],
        "item_name": details["item_name"].strip(),
        "description": details.get("description") or "",
        "specifications": details.get("specifications"),
        "category": details.get("category"),
        "quantity": int(details.get("quantity") or 1),
        "target_price": details.get("target_price"),
        "currency": details.get("currency") or "SAR",
        "deadline": details.get("deadline"),
        "priority": details.get("priority") or "MEDIUM",
        "reference_images": details.get("reference_images") or [],
        "attachment_urls": details.get("attachment_urls") or [],
        "status": PENDING,
    }
    try:
        row = insert_pruning_missing_columns(client, TABLE, payload)
    except BACKEND_ERRORS as exc:
        logger.error("Error creating custom request: %s", exc)
        return False, user_facing_error(exc, "Failed to create the request."), None
    return True, "Request submitted.", CustomItemRequest.from_row(row)


def get_request(request_id: str) -> Optional[CustomItemRequest]:
    client = get_supabase_client()
    if client is None:
        return None
    try:
        resp = client.table(TABLE).select("*").eq("id", request_id).limit(1).execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch custom request %s", request_id)
        return None
    rows = _rows_to_requests(resp.data)
    return rows[0] if rows else None


def get_all_requests(status: Optional[str] = None) -> List[CustomItemRequest]:
    """Return every request newest first, optionally of one ``status``."""
    client = get_supabase_client()
    if client is None:
        return []
    try:
        query = client.table(TABLE).select("*")
        if status and status != "ALL":
            query = query.eq("status", status)
        resp = query.order("created_at", desc=True).execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch custom requests")
        return []
    return _rows_to_requests(resp.data)


def get_pending_requests() -> List[CustomItemRequest]:
    """Return open requests, most urgent first and oldest first within a priority."""
    client = get_supabase_client()
    if client is None:
        return []
    try:
        resp = (
            client.table(TABLE)
            .select("*")
            .in_("status", list(OPEN_STATUSES))
            .order("created_at")
            .execute()
        )
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch pending custom requests")
        return []
    requests = _rows_to_requests(resp.data)
    requests.sort(key=lambda r: _PRIORITY_RANK.get(str(r.priority).upper(), 0), reverse=True)
    return requests


def get_client_requests(client_id: str) -> List[CustomItemRequest]:
    client = get_supabase_client()
    if client is None:
        return []
    try:
        resp = (
            client.table(TABLE)
            .select("*")
            .eq("client_id", client_id)
            .order("created_at", desc=True)
            .execute()
        )
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch custom requests of client %s", client_id)
        return []
    return _rows_to_requests(resp.data)


def get_supplier_requests(supplier_id: str) -> List[CustomItemRequest]:
    client = get_supabase_client()
    if client is None:
        return []
    try:
        resp = (
            client.table(TABLE)
            .select("*")
            .eq("assigned_to", supplier_id)
            .order("assigned_at", desc=True)
            .execute()
        )
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch custom requests assigned to %s", supplier_id)
        return []
    return _rows_to_requests(resp.data)


def _update(request_id: str, updates: Dict[str, Any], failure: str) -> Tuple[bool, str]:
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        resp = client.table(TABLE).update(updates).eq("id", request_id).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Error updating custom request %s: %s", request_id, exc)
        return False, user_facing_error(exc, failure)
    if not resp.data:
        return False, f"Request {request_id} not found."
    return True, ""


def update_status(
    request_id: str, status: str, extra: Optional[Dict[str, Any]] = None
) -> Tuple[bool, str]:
    """Move a request to ``status``, writing any ``extra`` columns alongside."""
    if status not in STATUSES:
        return False, f"Unknown status '{status}'."
    updates = {"status": status, "updated_at": timezone.now().isoformat()}
    for key in ("admin_notes", "assigned_to", "supplier_quote_id", "rejection_reason"):
        if extra and extra.get(key) is not None:
            updates[key] = extra[key]
    if status == QUOTED:
        updates["responded_at"] = updates["updated_at"]
    ok, msg = _update(request_id, updates, "Failed to update the request status.")
    return ok, msg or f"Request moved to {status.replace('_', ' ').title()}."


def update_admin_notes(request_id: str, notes: str) -> Tuple[bool, str]:
    ok, msg = _update(request_id, {"admin_notes": notes}, "Failed to save notes.")
    return ok, msg or "Notes saved."


def reject_request(request_id: str, reason: str) -> Tuple[bool, str]:
    if not (reason or "").strip():
        return False, "A rejection reason is required."
    ok, msg = _update(
        request_id,
        {
            "status": REJECTED,
            "rejection_reason": reason.strip(),
            "responded_at": timezone.now().isoformat(),
        },
        "Failed to reject the request.",
    )
    return ok, msg or "Request rejected."


def cancel_request(request_id: str, client_id: str) -> Tuple[bool, str]:
    """Cancel a request on behalf of its client while it is still open."""
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        resp = (
            client.table(TABLE)
            .update({"status": CANCELLED})
            .eq("id", request_id)
            .eq("client_id", client_id)
            .in_("status", list(OPEN_STATUSES))
            .execute()
        )
    except BACKEND_ERRORS as exc:
        logger.error("Error cancelling custom request %s: %s", request_id, exc)
        return False, user_facing_error(exc, "Failed to cancel the request.")
    if not resp.data:
        return False, "Only pending requests of this client can be cancelled."
    return True, "Request cancelled."


def assign_to_supplier(
    request_id: str, supplier_id: str, admin_id: Optional[str], notes: Optional[str] = None
) -> Tuple[bool, str]:
    """Assign a request to a supplier for quoting.

    The ``assign_custom_request`` RPC is tried with its current signature,
    then with the older one taking ``p_admin_id``; deployments without the
    function get a direct update.
    """
    supplier = user_service.get_user(supplier_id)
    if not user_service.is_eligible_supplier(supplier):
        return False, "Selected supplier is not eligible for assignment."
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."

    params = {"p_request_id": request_id, "p_supplier_id": supplier_id, "p_notes": notes}
    attempts = (params, {**params, "p_admin_id": admin_id})
    last_error: Any = None
    for attempt in attempts:
        try:
            client.rpc("assign_custom_request", attempt).execute()
        except BACKEND_ERRORS as exc:
            last_error = exc
            logger.warning(
                "assign_custom_request RPC failed for %s: %s",
                request_id,
                extract_error_message(exc),
            )
            continue
        return True, f"Request assigned to {user_service.display_name(supplier)}."

    updates = {
        "assigned_to": supplier_id,
        "assigned_by": admin_id,
        "assigned_at": timezone.now().isoformat(),
        "status": ASSIGNED,
    }
    if notes:
        updates["admin_notes"] = notes
    try:
        resp = client.table(TABLE).update(updates).eq("id", request_id).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Error assigning custom request %s: %s (rpc: %s)", request_id, exc, last_error)
        return False, user_facing_error(exc, "Failed to assign the request.")
    if not resp.data:
        return False, f"Request {request_id} not found."
    return True, f"Request assigned to {user_service.display_name(supplier)}."


def get_request_stats() -> Dict[str, Any]:
    """Return totals by status and by priority."""
    stats: Dict[str, Any] = {
        "total": 0,
        "by_status": {status: 0 for status in STATUSES},
        "by_priority": {priority: 0 for priority in PRIORITIES},
    }
    client = get_supabase_client()
    if client is None:
        return stats
    try:
        resp = client.table(TABLE).select("status, priority").execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch custom request stats")
        return stats
    for row in resp.data or []:
        stats["total"] += 1
        status = row.get("status")
        if status in stats["by_status"]:
            stats["by_status"][status] += 1
        priority = row.get("priority")
        if priority in stats["by_priority"]:
            stats["by_priority"][priority] += 1
    return stats


def pending_count() -> int:
    stats = get_request_stats()
    return sum(stats["by_status"][status] for status in OPEN_STATUSES)
