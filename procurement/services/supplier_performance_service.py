"""Supplier performance report.

Quotes, orders and products are loaded once and aggregated per supplier with
pandas. Filters follow the report screen: a date range applied to quotes and
orders, a minimum rating, and a category the supplier must sell.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
from django.utils import timezone

from . import order_service, user_service
from .supabase_client import BACKEND_ERRORS, get_supabase_client

logger = logging.getLogger(__name__)

ALL = "ALL"
DATE_RANGES = {
    "ALL": "All time",
    "LAST_30_DAYS": "Last 30 days",
    "LAST_90_DAYS": "Last 90 days",
    "THIS_YEAR": "This year",
}

REPORT_COLUMNS = [
    "supplier_id",
    "company_name",
    "quotes_submitted",
    "quotes_accepted",
    "win_rate",
    "avg_rating",
    "total_orders",
]


@dataclass
class ReportFilters:
    date_range: str = ALL
    min_rating: float = 0.0
    category: str = ALL


def _parse_date(value: Any) -> Optional[datetime]:
    if not value:
        return None
    parsed = pd.to_datetime(value, errors="coerce", utc=True)
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def matches_date_range(value: Any, date_range: str, now: Optional[datetime] = None) -> bool:
    """Return ``True`` when ``value`` falls in ``date_range``.

    Records without a usable date only match ``ALL``.
    """
    if date_range == ALL or date_range not in DATE_RANGES:
        return True
    date = _parse_date(value)
    if date is None:
        return False
    now = now or timezone.now()
    if date_range == "THIS_YEAR":
        return date.year == now.year
    days = 30 if date_range == "LAST_30_DAYS" else 90
    return date >= now - timedelta(days=days)


def _order_date(order: Dict[str, Any]) -> Any:
    return order.get("created_at") or order.get("updated_at") or order.get("date")


def _fetch(table: str, columns: str = "*") -> List[Dict[str, Any]]:
    client = get_supabase_client()
    if client is None:
        return []
    try:
        resp = client.table(table).select(columns).execute()
    except BACKEND_ERRORS:
        logger.exception("Failed to fetch %s for supplier performance", table)
        return []
    return list(resp.data or [])


def load_inputs() -> Dict[str, List[Dict[str, Any]]]:
    return {
        "suppliers": user_service.get_suppliers(),
        "quotes": _fetch("quotes", "id,supplier_id,status,created_at"),
        "orders": order_service.get_orders(),
        "products": _fetch("products", "id,supplier_id,category"),
    }


def categories(products: Iterable[Dict[str, Any]]) -> List[str]:
    return sorted({p["category"] for p in products if p.get("category")})


def build_report(
    suppliers: List[Dict[str, Any]],
    quotes: List[Dict[str, Any]],
    orders: List[Dict[str, Any]],
    products: List[Dict[str, Any]],
    filters: Optional[ReportFilters] = None,
    now: Optional[datetime] = None,
) -> pd.DataFrame:
    """Return one row per supplier sorted by win rate, best first."""
    filters = filters or ReportFilters()
    supplier_df = pd.DataFrame(
        [
            {
                "supplier_id": s.get("id"),
                "company_name": user_service.display_name(s, default=s.get("email") or ""),
                "avg_rating": float(s.get("rating") or 0),
            }
            for s in suppliers
            if s.get("role", "SUPPLIER") == "SUPPLIER"
        ],
        columns=["supplier_id", "company_name", "avg_rating"],
    )
    if supplier_df.empty:
        return pd.DataFrame(columns=REPORT_COLUMNS)

    quote_df = pd.DataFrame(
        [
            {
                "supplier_id": q.get("supplier_id"),
                "accepted": str(q.get("status") or "").upper() == "ACCEPTED",
            }
            for q in quotes
            if matches_date_range(q.get("created_at") or q.get("createdAt"), filters.date_range, now)
        ],
        columns=["supplier_id", "accepted"],
    )
    quote_stats = quote_df.groupby("supplier_id").agg(
        quotes_submitted=("accepted", "size"), quotes_accepted=("accepted", "sum")
    )

    order_df = pd.DataFrame(
        [
            {"supplier_id": o.get("supplier_id")}
            for o in orders
            if matches_date_range(_order_date(o), filters.date_range, now)
        ],
        columns=["supplier_id"],
    )
    order_stats = order_df.groupby("supplier_id").size().rename("total_orders")

    report = (
        supplier_df.set_index("supplier_id")
        .join(quote_stats)
        .join(order_stats)
        .fillna({"quotes_submitted": 0, "quotes_accepted": 0, "total_orders": 0})
        .reset_index()
    )
    for column in ("quotes_submitted", "quotes_accepted", "total_orders"):
        report[column] = report[column].astype(int)
    report["win_rate"] = (
        (report["quotes_accepted"] / report["quotes_submitted"].where(report["quotes_submitted"] > 0))
        .fillna(0.0)
        .mul(100.0)
    )

    report = report[report["avg_rating"] >= float(filters.min_rating or 0)]
    if filters.category and filters.category != ALL:
        sellers = {
            p.get("supplier_id") for p in products if p.get("category") == filters.category
        }
        report = report[report["supplier_id"].isin(sellers)]

    report = report.sort_values("win_rate", ascending=False, kind="stable")
    return report[REPORT_COLUMNS].reset_index(drop=True)


def summarize(report: pd.DataFrame) -> Dict[str, float]:
    """Return supplier count and average win rate/rating for ``report``."""
    if report.empty:
        return {"supplier_count": 0, "avg_win_rate": 0.0, "avg_rating": 0.0}
    return {
        "supplier_count": int(len(report)),
        "avg_win_rate": float(report["win_rate"].mean()),
        "avg_rating": float(report["avg_rating"].mean()),
    }


def performance_report(filters: Optional[ReportFilters] = None) -> Dict[str, Any]:
    """Load inputs from the backend and return rows, summary and categories."""
    inputs = load_inputs()
    report = build_report(
        inputs["suppliers"], inputs["quotes"], inputs["orders"], inputs["products"], filters
    )
    return {
        "rows": report.to_dict("records"),
        "summary": summarize(report),
        "categories": categories(inputs["products"]),
    }
