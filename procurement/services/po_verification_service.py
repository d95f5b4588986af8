"""PO verification queue.

The queue lists orders waiting for an admin to confirm the client's purchase
order. Orders are returned straight away; each row then loads its documents
separately so one slow or failing order does not hold up the others. Every
document fetch is bounded by ``PO_DOCUMENT_FETCH_TIMEOUT`` seconds and each
row carries its own state:

``loading``
    documents not requested yet
``ready``
    a client PO was found
``missing``
    the order has no client PO (documentless verification is offered)
``error``
    the backend failed; the row can be retried
``timeout``
    the fetch did not finish in time; the row can be retried
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from django.conf import settings

from . import order_document_service, order_service, user_service
from .supabase_client import BACKEND_ERRORS
from .supabase_errors import user_facing_error

logger = logging.getLogger(__name__)

LOADING = "loading"
READY = "ready"
MISSING = "missing"
ERROR = "error"
TIMEOUT = "timeout"

RETRYABLE_STATES = {ERROR, TIMEOUT}

_executor: ThreadPoolExecutor | None = None
_executor_lock = threading.Lock()


@dataclass
class RowDocuments:
    """Outcome of loading one order's documents."""

    state: str
    document: Optional[Dict[str, Any]] = None
    documents: List[Dict[str, Any]] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def retryable(self) -> bool:
        return self.state in RETRYABLE_STATES


@dataclass
class QueueRow:
    """One order in the verification queue."""

    order: Dict[str, Any]
    client_name: str
    documents: RowDocuments = field(default_factory=lambda: RowDocuments(LOADING))

    @property
    def order_id(self) -> str:
        return self.order["id"]


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    with _executor_lock:
        if _executor is None:
            _executor = ThreadPoolExecutor(
                max_workers=max(1, settings.PO_DOCUMENT_WORKERS),
                thread_name_prefix="po-documents",
            )
        return _executor


def _timeout(timeout: Optional[float]) -> float:
    return float(settings.PO_DOCUMENT_FETCH_TIMEOUT if timeout is None else timeout)


def load_queue() -> List[QueueRow]:
    """Return pending-PO orders with client names and no documents yet."""
    orders = order_service.get_pending_po_orders()
    if not orders:
        return []
    names = user_service.name_lookup(user_service.get_users())
    return [
        QueueRow(
            order=order,
            client_name=names.get(order.get("client_id"), user_service.UNKNOWN_CLIENT),
        )
        for order in orders
    ]


def _documents_outcome(documents: List[Dict[str, Any]]) -> RowDocuments:
    document = order_document_service.pick_client_po(documents)
    return RowDocuments(
        state=READY if document else MISSING, document=document, documents=documents
    )


def _resolve(order_id: str, future: Future, timeout: float) -> RowDocuments:
    try:
        documents = future.result(timeout=timeout)
    except FutureTimeoutError:
        future.cancel()
        logger.warning("Timed out loading documents for order %s", order_id)
        return RowDocuments(
            state=TIMEOUT, error="Loading documents timed out. Please retry."
        )
    except BACKEND_ERRORS as exc:
        logger.error("Error loading documents for order %s: %s", order_id, exc)
        return RowDocuments(
            state=ERROR, error=user_facing_error(exc, "Failed to load documents.")
        )
    return _documents_outcome(documents)


def fetch_row_documents(order_id: str, timeout: Optional[float] = None) -> RowDocuments:
    """Load the documents of a single order, bounded by ``timeout`` seconds."""
    future = _get_executor().submit(order_document_service.get_order_documents, order_id)
    return _resolve(order_id, future, _timeout(timeout))


def hydrate_queue(
    rows: Iterable[QueueRow], timeout: Optional[float] = None
) -> List[QueueRow]:
    """Load documents for every row concurrently.

    All fetches share one deadline; rows still running at the deadline are
    marked ``timeout`` and the remaining rows keep their own outcome.
    """
    rows = list(rows)
    if not rows:
        return rows
    limit = _timeout(timeout)
    pool = ThreadPoolExecutor(
        max_workers=max(1, min(settings.PO_DOCUMENT_WORKERS, len(rows))),
        thread_name_prefix="po-queue",
    )
    try:
        futures: List[Tuple[QueueRow, Future]] = [
            (row, pool.submit(order_document_service.get_order_documents, row.order_id))
            for row in rows
        ]
        deadline = time.monotonic() + limit
        for row, future in futures:
            remaining = max(0.0, deadline - time.monotonic())
            row.documents = _resolve(row.order_id, future, remaining)
    finally:
        pool.shutdown(wait=False, cancel_futures=True)
    return rows


def find_pending_document(order_id: str) -> Tuple[Optional[Dict[str, Any]], Optional[Dict[str, Any]]]:
    """Return ``(order, client_po)`` for a queue action."""
    order = order_service.get_order(order_id)
    if order is None:
        return None, None
    try:
        documents = order_document_service.get_order_documents_metadata(order_id)
    except BACKEND_ERRORS:
        logger.exception("Error loading documents for order %s", order_id)
        documents = []
    return order, order_document_service.pick_client_po(documents)


def _audit_metadata(order: Dict[str, Any]) -> Dict[str, Any]:
    return {"clientId": order.get("client_id"), "orderAmount": order.get("amount")}


def verify(
    document_id: str, admin_id: Optional[str], order_id: Optional[str] = None
) -> Tuple[bool, str]:
    """Confirm the client PO ``document_id`` and record the audit entry.

    When ``order_id`` is given the document must belong to that order.
    """
    document = order_document_service.get_document(document_id)
    if document is None:
        return False, "Pending PO not found."
    if order_id is not None and document.get("order_id") != order_id:
        logger.warning("Document %s does not belong to order %s", document_id, order_id)
        return False, "Document does not belong to this order."
    order_id = document.get("order_id")
    ok, msg = order_document_service.verify_client_po(document_id, admin_id)
    if not ok:
        return ok, msg
    order = order_service.get_order(order_id) or {"id": order_id}
    order_document_service.log_po_audit(
        order_id,
        admin_id,
        order_document_service.PO_VERIFIED,
        document_id=document_id,
        metadata=_audit_metadata(order),
    )
    return ok, msg


def verify_without_document(order_id: str, admin_id: Optional[str]) -> Tuple[bool, str]:
    ok, msg = order_document_service.verify_order_po(order_id, admin_id)
    if ok:
        order = order_service.get_order(order_id) or {"id": order_id}
        order_document_service.log_po_audit(
            order_id,
            admin_id,
            order_document_service.PO_VERIFIED,
            metadata={**_audit_metadata(order), "documentless": True},
        )
    return ok, msg


def reject(order_id: str, admin_id: Optional[str], reason: str = "") -> Tuple[bool, str]:
    """Cancel the order behind a rejected PO and record the audit entry."""
    order, document = find_pending_document(order_id)
    if order is None:
        return False, "Pending PO not found."
    ok, msg = order_service.update_order_status(order_id, "CANCELLED")
    if not ok:
        return False, msg
    order_document_service.log_po_audit(
        order_id,
        admin_id,
        order_document_service.PO_REJECTED,
        document_id=(document or {}).get("id"),
        metadata=_audit_metadata(order),
        notes=reason or None,
    )
    return True, "PO rejected and order cancelled."


def pending_count() -> int:
    return len(order_service.get_pending_po_orders())
