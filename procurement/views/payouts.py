from django.contrib import messages
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST

from ..forms import PayoutStatusForm, RecordPayoutForm
from ..services import list_utils, payout_service, user_service
from .common import actor_id, default_currency


def payouts_list(request):
    """Payouts with per-status totals and status/supplier filters."""
    status = (request.GET.get("status") or "ALL").strip().upper()
    supplier = (request.GET.get("supplier") or "").strip()
    payouts = payout_service.get_payouts(status=status, supplier_id=supplier or None)
    suppliers = user_service.get_suppliers()
    names = user_service.name_lookup(suppliers)
    for payout in payouts:
        payout["supplier_name"] = names.get(payout.get("supplier_id"), "Unknown supplier")
    page_obj, per_page = list_utils.paginate(request, payouts)
    ctx = {
        "page_obj": page_obj,
        "page_size": per_page,
        "status": status,
        "supplier": supplier,
        "statuses": payout_service.STATUSES,
        "suppliers": suppliers,
        "summary": payout_service.summarize_payouts(payouts),
        "record_form": RecordPayoutForm(suppliers=suppliers),
        "currency": default_currency(),
    }
    return render(request, "procurement/payouts.html", ctx)


@require_POST
def payout_record(request):
    form = RecordPayoutForm(request.POST, suppliers=user_service.get_suppliers())
    if not form.is_valid():
        messages.error(request, f"Payout not recorded: {form.errors.as_text()}")
        return redirect("payouts")
    data = form.cleaned_data
    ok, msg, _ = payout_service.record_payout(
        data["supplier_id"],
        data["order_id"],
        data["amount"],
        payment_method=data["payment_method"],
        reference_number=data.get("reference_number") or None,
        notes=data.get("notes") or None,
        admin_id=actor_id(request),
    )
    (messages.success if ok else messages.error)(request, msg)
    return redirect("payouts")


@require_POST
def payout_update_status(request, pk: str):
    form = PayoutStatusForm(request.POST)
    if form.is_valid():
        ok, msg = payout_service.update_payout_status(
            pk, form.cleaned_data["status"], form.cleaned_data.get("notes") or None
        )
        (messages.success if ok else messages.error)(request, msg)
    else:
        messages.error(request, "Choose a valid payout status.")
    return redirect("payouts")
