from decimal import Decimal

import pytest
from postgrest.exceptions import APIError

from procurement.services import payout_service as payouts

ADMIN_ID = "0b7e3c1a-9d42-4f8e-a5c6-7e1d2b3f4a58"


@pytest.fixture
def payout_rows(fake_supabase):
    fake_supabase.seed(
        "supplier_payouts",
        [
            {"id": "p1", "supplier_id": "s1", "order_id": "o1", "amount": 1200.5, "status": "PENDING", "created_at": "2026-01-01"},
            {"id": "p2", "supplier_id": "s2", "order_id": "o2", "amount": 300, "status": "PAID", "created_at": "2026-01-03"},
            {"id": "p3", "supplier_id": "s1", "order_id": "o3", "amount": "99.50", "status": "PENDING", "created_at": "2026-01-02"},
        ],
    )
    return fake_supabase


def test_get_payouts_filters(payout_rows):
    assert [p["id"] for p in payouts.get_payouts()] == ["p2", "p3", "p1"]
    assert [p["id"] for p in payouts.get_payouts(status="PENDING")] == ["p3", "p1"]
    assert [p["id"] for p in payouts.get_payouts(status="ALL", supplier_id="s2")] == ["p2"]


def test_get_payouts_missing_table(fake_supabase, caplog):
    fake_supabase.errors[("supplier_payouts", "select")] = APIError(
        {"message": 'relation "public.supplier_payouts" does not exist', "code": "42P01"}
    )
    with caplog.at_level("WARNING"):
        assert payouts.get_payouts() == []
    assert "Payouts table unavailable" in caplog.text


def test_update_payout_status_via_rpc(payout_rows):
    payout_rows.rpc_handlers["admin_update_payout_status"] = lambda params: None
    assert payouts.update_payout_status("p1", "PROCESSING", "Batch 12") == (
        True,
        "Payout marked processing.",
    )
    assert payout_rows.rpc_calls == [
        ("admin_update_payout_status", {"p_payout_id": "p1", "p_status": "PROCESSING", "p_notes": "Batch 12"})
    ]


def test_update_payout_status_direct_fallback_sets_paid_at(payout_rows):
    ok, msg = payouts.update_payout_status("p1", "PAID")
    assert ok
    assert msg == "Payout marked paid."
    row = payouts.get_payout("p1")
    assert row["status"] == "PAID"
    assert row["paid_at"]


def test_update_payout_status_errors(payout_rows):
    assert payouts.update_payout_status("p1", "LOST") == (False, "Unknown payout status 'LOST'.")
    assert payouts.update_payout_status("nope", "FAILED") == (False, "Payout nope not found.")


def test_record_payout_validates_amount(payout_rows):
    assert payouts.record_payout("s1", "o9", "abc")[1] == "Amount must be a number."
    assert payouts.record_payout("s1", "o9", 0)[1] == "Amount must be greater than zero."


def test_record_payout_via_rpc(payout_rows):
    def record(params):
        payout_rows.seed(
            "supplier_payouts",
            [{"id": "p9", "supplier_id": params["p_supplier_id"], "amount": params["p_amount"], "status": "PENDING"}],
        )
        return [{"payout_id": "p9"}]

    payout_rows.rpc_handlers["admin_record_supplier_payout"] = record
    ok, msg, row = payouts.record_payout("s3", "o9", Decimal("450.00"), reference_number="TRX-1")
    assert ok
    assert msg == "Payout recorded."
    assert row["id"] == "p9"
    params = payout_rows.rpc_calls[0][1]
    assert params["p_amount"] == 450.0
    assert params["p_reference_number"] == "TRX-1"


def test_record_payout_direct_insert_fallback(payout_rows):
    ok, _, row = payouts.record_payout("s3", "o9", "75.25", payment_method="CHEQUE", admin_id=ADMIN_ID)
    assert ok
    assert row["status"] == "PENDING"
    assert row["currency"] == "SAR"
    assert row["amount"] == 75.25
    assert row["payment_method"] == "CHEQUE"
    assert row["created_by"] == ADMIN_ID


def test_rpc_payout_id_shapes():
    assert payouts._rpc_payout_id([{"payout_id": "a"}]) == "a"
    assert payouts._rpc_payout_id({"payout_id": "b"}) == "b"
    assert payouts._rpc_payout_id("c") == "c"
    assert payouts._rpc_payout_id([]) is None
    assert payouts._rpc_payout_id(None) is None


def test_summarize_payouts(payout_rows):
    summary = payouts.summarize_payouts(payouts.get_payouts() + [{"id": "x", "status": "PENDING", "amount": "n/a"}])
    assert summary["PENDING"]["count"] == 3
    assert summary["PENDING"]["amount"] == Decimal("1300.0")
    assert summary["PAID"] == {"count": 1, "amount": Decimal("300")}
    assert summary["FAILED"] == {"count": 0, "amount": Decimal("0")}


def test_pending_count(payout_rows):
    assert payouts.pending_count() == 2
