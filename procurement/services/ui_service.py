"""Presentation helpers shared by templates, template tags and views.

Nothing here talks to the backend. The functions turn raw statuses, page
counts and amounts into what the admin screens display.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Dict, List, Union

__all__ = [
    "BADGE_TONES",
    "normalize_status",
    "status_badge",
    "page_numbers",
    "format_currency",
    "toast_tone",
    "ELLIPSIS",
]

ELLIPSIS = "..."

BADGE_TONES: Dict[str, str] = {
    "yellow": "bg-yellow-50 border-yellow-200 text-yellow-700",
    "green": "bg-green-50 border-green-200 text-green-700",
    "red": "bg-red-50 border-red-200 text-red-700",
    "blue": "bg-blue-50 border-blue-200 text-blue-700",
    "purple": "bg-purple-50 border-purple-200 text-purple-700",
    "indigo": "bg-indigo-100 border-indigo-200 text-indigo-800",
    "orange": "bg-orange-100 border-orange-200 text-orange-800",
    "amber": "bg-amber-50 border-amber-200 text-amber-700",
    "gray": "bg-gray-50 border-gray-200 text-gray-600",
}

# normalized status -> (tone, label)
_STATUS_CONFIG: Dict[str, tuple[str, str]] = {
    "pending": ("yellow", "Pending"),
    "approved": ("green", "Approved"),
    "confirmed": ("green", "Approved"),
    "rejected": ("red", "Rejected"),
    "open": ("blue", "Open"),
    "quoted": ("purple", "Quoted"),
    "closed": ("gray", "Closed"),
    "processing": ("blue", "Processing"),
    "ready_for_pickup": ("indigo", "Ready for Pickup"),
    "pickup_scheduled": ("purple", "Pickup Scheduled"),
    "picked_up": ("indigo", "Picked Up"),
    "shipped": ("orange", "In Transit"),
    "in_transit": ("orange", "In Transit"),
    "out_for_delivery": ("orange", "In Transit"),
    "delivered": ("green", "Delivered"),
    "completed": ("green", "Completed"),
    "cancelled": ("gray", "Cancelled"),
    "draft": ("gray", "Draft"),
    "submitted": ("blue", "Submitted"),
    "under_review": ("amber", "Under Review"),
    "in_review": ("amber", "Under Review"),
    "pending_payment": ("amber", "Pending Payment"),
    "awaiting_confirmation": ("amber", "Awaiting Confirmation"),
    "pending_admin_confirmation": ("amber", "Pending Admin Confirmation"),
    "pending_admin": ("amber", "Pending Admin Confirmation"),
    "pending_po": ("amber", "Pending PO"),
    "sent_to_client": ("blue", "Sent to Client"),
    "payment_confirmed": ("green", "Payment Confirmed"),
    "accepted": ("green", "Accepted"),
    "active": ("green", "Active"),
    "verified": ("green", "Verified"),
    "deactivated": ("gray", "Deactivated"),
    "incomplete": ("yellow", "Incomplete"),
    "requires_attention": ("red", "Requires Attention"),
    "assigned": ("indigo", "Assigned"),
    "paid": ("green", "Paid"),
    "failed": ("red", "Failed"),
    "disputed": ("red", "Disputed"),
    "refunded": ("purple", "Refunded"),
    "urgent": ("red", "Urgent"),
    "high": ("orange", "High"),
    "medium": ("blue", "Medium"),
    "low": ("gray", "Low"),
}


def normalize_status(status: Any) -> str:
    """Lower-case ``status`` and collapse whitespace/underscore runs to ``_``."""
    text = str(status or "").strip().lower()
    parts = text.replace("_", " ").split()
    return "_".join(parts)


def status_badge(status: Any) -> Dict[str, str]:
    """Return ``{"status", "label", "classes"}`` for a status badge.

    Unknown statuses are shown in a neutral tone with a title-cased label.
    """

    key = normalize_status(status)
    tone, label = _STATUS_CONFIG.get(key, ("gray", key.replace("_", " ").title()))
    return {"status": key, "label": label, "classes": BADGE_TONES[tone]}


def page_numbers(current: int, total: int) -> List[Union[int, str]]:
    """Return the page links to show, with ``"..."`` marking gaps.

    Up to seven pages are listed in full. Beyond that the first and last
    pages are always shown along with the neighbours of ``current``.
    """

    if total <= 1:
        return []
    current = min(max(int(current), 1), total)
    show_pages = 5
    if total <= show_pages + 2:
        return list(range(1, total + 1))

    pages: List[Union[int, str]] = [1]
    if current > 3:
        pages.append(ELLIPSIS)
    start = max(2, current - 1)
    end = min(total - 1, current + 1)
    pages.extend(range(start, end + 1))
    if current < total - 2:
        pages.append(ELLIPSIS)
    pages.append(total)
    return pages


def format_currency(amount: Any, currency: str = "SAR", compact: bool = False) -> str:
    """Format ``amount`` as ``"SAR 1,234.50"`` (``"SAR 1,235"`` when compact)."""
    try:
        value = Decimal(str(amount if amount not in (None, "") else 0))
    except (InvalidOperation, ValueError):
        value = Decimal("0")
    if compact:
        value = value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return f"{currency} {value:,.0f}"
    return f"{currency} {value:,.2f}"


_TOAST_TONES = {
    "success": "success",
    "error": "error",
    "warning": "warning",
    "info": "info",
    "debug": "info",
}


def toast_tone(level_tag: str) -> str:
    """Map a Django message level tag to a toast tone."""
    for tag in (level_tag or "").split():
        if tag in _TOAST_TONES:
            return _TOAST_TONES[tag]
    return "info"
