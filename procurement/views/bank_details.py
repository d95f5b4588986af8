import logging

from django.contrib import messages
from django.http import Http404
from django.shortcuts import redirect, render
from django.views.decorators.http import require_POST

from ..forms import BankDetailsForm
from ..services import bank_details_service

logger = logging.getLogger(__name__)

TEMPLATE = "procurement/bank_details.html"


def _report(request, ok: bool, msg: str) -> None:
    (messages.success if ok else messages.error)(request, msg)


def bank_details_list(request):
    """List bank accounts and add a new one."""
    form = BankDetailsForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        ok, msg, _ = bank_details_service.create_bank_details(form.cleaned_data)
        _report(request, ok, msg)
        if ok:
            return redirect("bank_details")
    ctx = {
        "accounts": bank_details_service.get_all_bank_details(),
        "form": form,
    }
    return render(request, TEMPLATE, ctx)


def bank_details_edit(request, pk: str):
    account = bank_details_service.get_bank_details(pk)
    if account is None:
        raise Http404("Bank account not found")
    if request.method == "POST":
        form = BankDetailsForm(request.POST)
        if form.is_valid():
            ok, msg = bank_details_service.update_bank_details(pk, form.cleaned_data)
            _report(request, ok, msg)
            if ok:
                return redirect("bank_details")
    else:
        form = BankDetailsForm(initial=account)
    return render(
        request, "procurement/bank_details_form.html", {"form": form, "account": account}
    )


@require_POST
def bank_details_activate(request, pk: str):
    ok, msg = bank_details_service.set_active_bank_details(pk)
    _report(request, ok, msg)
    return redirect("bank_details")


@require_POST
def bank_details_delete(request, pk: str):
    ok, msg = bank_details_service.delete_bank_details(pk)
    _report(request, ok, msg)
    return redirect("bank_details")
