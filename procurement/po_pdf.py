from __future__ import annotations
from typing import Any, Iterable, Mapping, Optional

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from .services.ui_service import format_currency

UNICODE_FAMILY = "POUnicode"


def _line_items(order: Mapping[str, Any]) -> Iterable[Mapping[str, Any]]:
    items = order.get("items") or []
    if isinstance(items, Mapping):
        items = [items]
    return [item for item in items if isinstance(item, Mapping)]


def _latin1(value: Any) -> str:
    """Replace characters the core PDF fonts cannot encode with ``?``."""
    return str(value).encode("latin-1", "replace").decode("latin-1")


def generate_po_pdf(
    order: Mapping[str, Any],
    client_name: str = "",
    currency: str = "SAR",
    font_path: Optional[str] = None,
) -> bytes:
    """Generate the system purchase order PDF for an order.

    Parameters
    ----------
    order: order row with ``id``, ``date``, ``amount`` and ``items``
    client_name: display name of the buying company
    currency: currency code used for amounts
    font_path: TrueType font with Unicode coverage; without one, text the
        core Helvetica font cannot encode is replaced with ``?``

    Returns
    -------
    bytes: PDF content
    """
    pdf = FPDF()
    if font_path:
        pdf.add_font(UNICODE_FAMILY, fname=font_path)
        family, text = UNICODE_FAMILY, str
    else:
        family, text = "Helvetica", _latin1
    pdf.add_page()
    pdf.set_font(family, size=14)
    pdf.cell(0, 10, text(f"Purchase Order {order.get('id', '')}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_font(family, size=11)
    if client_name:
        pdf.cell(0, 8, text(f"Client: {client_name}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    if order.get("date"):
        pdf.cell(0, 8, f"Date: {str(order['date'])[:10]}", new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(4)
    # Table header
    pdf.set_font(family, size=10)
    pdf.cell(100, 8, "Item", border=1)
    pdf.cell(30, 8, "Qty", border=1)
    pdf.cell(50, 8, "Unit Price", border=1, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    for line in _line_items(order):
        name = line.get("name") or line.get("productName") or line.get("product_id") or ""
        qty = line.get("quantity", "")
        price = line.get("unit_price", line.get("unitPrice"))
        pdf.cell(100, 8, text(str(name)[:60]), border=1)
        pdf.cell(30, 8, text(qty), border=1)
        pdf.cell(
            50,
            8,
            text(format_currency(price, currency)) if price is not None else "",
            border=1,
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )
    pdf.ln(4)
    pdf.set_font(family, size=11)
    pdf.cell(0, 8, text(f"Total: {format_currency(order.get('amount'), currency)}"), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    return bytes(pdf.output())
