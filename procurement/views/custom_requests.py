import logging

from django.contrib import messages
from django.http import Http404
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST

from ..forms import AdminNotesForm, AssignRequestForm, RejectRequestForm, RequestStatusForm
from ..services import custom_request_service, list_utils, user_service
from .common import actor_id

logger = logging.getLogger(__name__)


def _report(request, ok: bool, msg: str) -> None:
    (messages.success if ok else messages.error)(request, msg)


def custom_requests_list(request):
    """Request queue with stats cards and a status filter.

    GET params:
        status: ``OPEN`` (default, pending and under review), ``ALL`` or a
        single status; ``q`` searches item names.
    """
    status = (request.GET.get("status") or "OPEN").strip().upper()
    if status == "OPEN":
        requests_ = custom_request_service.get_pending_requests()
    else:
        requests_ = custom_request_service.get_all_requests(status)
    rows = [r.to_dict() for r in requests_]
    q = (request.GET.get("q") or "").strip().lower()
    if q:
        rows = [r for r in rows if q in (r.get("item_name") or "").lower()]
    clients = user_service.name_lookup(user_service.get_users())
    for row in rows:
        row["client_name"] = clients.get(row["client_id"], user_service.UNKNOWN_CLIENT)
    page_obj, per_page = list_utils.paginate(request, rows)
    ctx = {
        "page_obj": page_obj,
        "page_size": per_page,
        "status": status,
        "q": q,
        "statuses": custom_request_service.STATUSES,
        "stats": custom_request_service.get_request_stats(),
    }
    return render(request, "procurement/custom_requests.html", ctx)


def _get_request_or_404(pk: str):
    item = custom_request_service.get_request(pk)
    if item is None:
        raise Http404("Custom request not found")
    return item


def custom_request_detail(request, pk: str):
    item = _get_request_or_404(pk)
    suppliers = [s for s in user_service.get_suppliers() if user_service.is_eligible_supplier(s)]
    client = user_service.get_user(item.client_id)
    assigned = user_service.get_user(item.assigned_to) if item.assigned_to else None
    ctx = {
        "item": item,
        "client_name": user_service.display_name(client),
        "assigned_name": user_service.display_name(assigned, default="") if assigned else "",
        "assign_form": AssignRequestForm(suppliers=suppliers),
        "reject_form": RejectRequestForm(),
        "notes_form": AdminNotesForm(initial={"admin_notes": item.admin_notes}),
        "status_form": RequestStatusForm(initial={"status": item.status}),
    }
    return render(request, "procurement/custom_request_detail.html", ctx)


@require_POST
def custom_request_assign(request, pk: str):
    suppliers = user_service.get_suppliers()
    form = AssignRequestForm(request.POST, suppliers=suppliers)
    if form.is_valid():
        ok, msg = custom_request_service.assign_to_supplier(
            pk,
            form.cleaned_data["supplier_id"],
            actor_id(request),
            form.cleaned_data.get("notes") or None,
        )
        _report(request, ok, msg)
    else:
        messages.error(request, "Select a supplier to assign.")
    return redirect("custom_request_detail", pk=pk)


@require_POST
def custom_request_reject(request, pk: str):
    form = RejectRequestForm(request.POST)
    if form.is_valid():
        ok, msg = custom_request_service.reject_request(pk, form.cleaned_data["reason"])
        _report(request, ok, msg)
    else:
        messages.error(request, "A rejection reason is required.")
    return redirect("custom_request_detail", pk=pk)


@require_POST
def custom_request_notes(request, pk: str):
    form = AdminNotesForm(request.POST)
    if form.is_valid():
        ok, msg = custom_request_service.update_admin_notes(pk, form.cleaned_data["admin_notes"])
        _report(request, ok, msg)
    return redirect("custom_request_detail", pk=pk)


@require_POST
def custom_request_status(request, pk: str):
    form = RequestStatusForm(request.POST)
    if form.is_valid():
        ok, msg = custom_request_service.update_status(pk, form.cleaned_data["status"])
        _report(request, ok, msg)
    else:
        messages.error(request, "Choose a valid status.")
    return redirect("custom_request_detail", pk=pk)
