import httpx
import pytest
from postgrest.exceptions import APIError

from procurement.services import po_verification_service as queue

ADMIN_ID = "0b7e3c1a-9d42-4f8e-a5c6-7e1d2b3f4a58"


@pytest.fixture
def pending_orders(fake_supabase):
    fake_supabase.seed(
        "users",
        [
            {"id": "c1", "role": "CLIENT", "company_name": "Acme Trading"},
            {"id": "c2", "role": "CLIENT", "name": "Sara Ali"},
        ],
    )
    fake_supabase.seed(
        "orders",
        [
            {"id": "o1", "client_id": "c1", "status": "PENDING_ADMIN_CONFIRMATION", "amount": 900, "created_at": "2026-02-01"},
            {"id": "o2", "client_id": "c2", "status": "PENDING_PO", "amount": 150, "created_at": "2026-02-03"},
            {"id": "o3", "client_id": "c9", "status": "PENDING_PO", "amount": 70, "created_at": "2026-02-02"},
            {"id": "o4", "client_id": "c1", "status": "PENDING_PAYMENT", "amount": 10, "created_at": "2026-02-04"},
        ],
    )
    fake_supabase.seed(
        "order_documents",
        [
            {
                "id": "d1",
                "order_id": "o1",
                "document_type": "CLIENT_PO",
                "file_url": "storage://order-documents/o1/po.pdf",
                "created_at": "2026-02-01",
            },
            {
                "id": "d2",
                "order_id": "o2",
                "document_type": "SYSTEM_PO",
                "file_url": "/api/generate-po/o2",
                "created_at": "2026-02-03",
            },
        ],
    )
    return fake_supabase


def test_load_queue_lists_pending_orders_without_documents(pending_orders):
    rows = queue.load_queue()
    assert [row.order_id for row in rows] == ["o2", "o3", "o1"]
    assert [row.client_name for row in rows] == ["Sara Ali", "Unknown client", "Acme Trading"]
    assert all(row.documents.state == queue.LOADING for row in rows)


def test_load_queue_empty_without_backend(no_supabase):
    assert queue.load_queue() == []


def test_fetch_row_documents_ready(pending_orders):
    result = queue.fetch_row_documents("o1")
    assert result.state == queue.READY
    assert result.document["id"] == "d1"
    assert result.document["file_url"].startswith("https://project.supabase.co/storage/v1/object/sign/")
    assert not result.retryable


def test_fetch_row_documents_missing_client_po(pending_orders):
    result = queue.fetch_row_documents("o2")
    assert result.state == queue.MISSING
    assert result.document is None
    assert [d["id"] for d in result.documents] == ["d2"]


def test_fetch_row_documents_error_is_retryable(pending_orders):
    pending_orders.errors[("order_documents", "select")] = APIError({"message": "boom"})
    result = queue.fetch_row_documents("o1")
    assert result.state == queue.ERROR
    assert result.error == "Failed to load documents."
    assert result.retryable


def test_fetch_row_documents_timeout(pending_orders, blocker):
    pending_orders.delays["order_documents"] = blocker
    result = queue.fetch_row_documents("o1", timeout=0.05)
    assert result.state == queue.TIMEOUT
    assert result.error == "Loading documents timed out. Please retry."
    assert result.retryable


def test_hydrate_queue_resolves_each_row(pending_orders):
    rows = queue.hydrate_queue(queue.load_queue())
    states = {row.order_id: row.documents.state for row in rows}
    assert states == {"o1": queue.READY, "o2": queue.MISSING, "o3": queue.MISSING}


def test_hydrate_queue_isolates_transport_errors(pending_orders, monkeypatch):
    original = queue.order_document_service.get_order_documents

    def flaky(order_id):
        if order_id == "o2":
            raise httpx.ReadTimeout("read timed out")
        return original(order_id)

    monkeypatch.setattr(queue.order_document_service, "get_order_documents", flaky)
    rows = queue.hydrate_queue(queue.load_queue())
    states = {row.order_id: row.documents.state for row in rows}
    assert states == {"o1": queue.READY, "o2": queue.ERROR, "o3": queue.MISSING}
    failed = next(row for row in rows if row.order_id == "o2")
    assert failed.documents.retryable


def test_hydrate_queue_marks_slow_rows_timeout(pending_orders, blocker):
    rows = queue.load_queue()
    pending_orders.delays["order_documents"] = blocker
    rows = queue.hydrate_queue(rows, timeout=0.05)
    assert {row.documents.state for row in rows} == {queue.TIMEOUT}


def test_hydrate_queue_empty():
    assert queue.hydrate_queue([]) == []


def test_verify_records_audit(pending_orders):
    ok, msg = queue.verify("d1", ADMIN_ID)
    assert ok, msg
    order = next(o for o in pending_orders.rows("orders") if o["id"] == "o1")
    assert order["status"] == "PENDING_PAYMENT"
    (audit,) = pending_orders.rows("po_audit_logs")
    assert audit["action"] == "PO_VERIFIED"
    assert audit["actor_user_id"] == ADMIN_ID
    assert audit["document_id"] == "d1"
    assert audit["metadata"] == {"clientId": "c1", "orderAmount": 900}


def test_verify_unknown_document(pending_orders):
    assert queue.verify("nope", ADMIN_ID) == (False, "Pending PO not found.")


def test_verify_without_document(pending_orders):
    ok, _ = queue.verify_without_document("o3", ADMIN_ID)
    assert ok
    order = next(o for o in pending_orders.rows("orders") if o["id"] == "o3")
    assert order["status"] == "PENDING_PAYMENT"
    (audit,) = pending_orders.rows("po_audit_logs")
    assert audit["metadata"]["documentless"] is True
    assert audit["document_id"] is None


def test_reject_cancels_order(pending_orders):
    ok, msg = queue.reject("o1", ADMIN_ID, "Totals do not match the quote")
    assert ok
    assert msg == "PO rejected and order cancelled."
    order = next(o for o in pending_orders.rows("orders") if o["id"] == "o1")
    assert order["status"] == "CANCELLED"
    (audit,) = pending_orders.rows("po_audit_logs")
    assert audit["action"] == "PO_REJECTED"
    assert audit["document_id"] == "d1"
    assert audit["notes"] == "Totals do not match the quote"


def test_reject_unknown_order(pending_orders):
    assert queue.reject("missing", ADMIN_ID) == (False, "Pending PO not found.")


def test_pending_count(pending_orders):
    assert queue.pending_count() == 3


def test_pending_orders_match_status_case_insensitively(pending_orders):
    pending_orders.seed(
        "orders",
        [{"id": "o5", "client_id": "c1", "status": "pending_admin_confirmation", "amount": 5, "created_at": "2026-02-05"}],
    )
    assert [row.order_id for row in queue.load_queue()] == ["o5", "o2", "o3", "o1"]
    assert queue.pending_count() == 4


def test_verify_requires_document_of_the_order(pending_orders):
    assert queue.verify("d1", ADMIN_ID, order_id="o2") == (
        False,
        "Document does not belong to this order.",
    )
    order = next(o for o in pending_orders.rows("orders") if o["id"] == "o1")
    assert order["status"] == "PENDING_ADMIN_CONFIRMATION"
