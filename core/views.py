import logging

from django.contrib.auth import login, logout
from django.contrib.auth.forms import AuthenticationForm
from django.core.exceptions import ValidationError
from django.http import HttpResponse
from django.shortcuts import redirect, render
from django.utils.http import url_has_allowed_host_and_scheme
from django.views.decorators.http import require_POST

from procurement.services import (
    bank_details_service,
    custom_request_service,
    master_product_service,
    payout_service,
    po_verification_service,
)

logger = logging.getLogger(__name__)


class ConsoleAuthenticationForm(AuthenticationForm):
    """Sign-in form that only admits staff accounts."""

    error_messages = {
        **AuthenticationForm.error_messages,
        "invalid_login": "Invalid username or password.",
        "not_staff": "This account does not have console access.",
    }

    def confirm_login_allowed(self, user):
        super().confirm_login_allowed(user)
        if not user.is_staff:
            raise ValidationError(self.error_messages["not_staff"], code="not_staff")


def _overview():
    return {
        "pending_po_count": po_verification_service.pending_count(),
        "pending_request_count": custom_request_service.pending_count(),
        "product_count": master_product_service.product_count(),
        "pending_payout_count": payout_service.pending_count(),
        "active_bank_account": bank_details_service.cached_active_bank_details() or None,
    }


def _safe_next(request):
    target = request.POST.get("next") or request.GET.get("next") or ""
    if target and url_has_allowed_host_and_scheme(
        target, allowed_hosts={request.get_host()}, require_https=request.is_secure()
    ):
        return target
    return None


def root_view(request):
    """Render the overview or the login form depending on authentication."""
    if request.user.is_authenticated and request.user.is_staff:
        if request.path != "/":
            return redirect("root")
        return render(request, "core/home.html", _overview())

    form = ConsoleAuthenticationForm(request, data=request.POST or None)
    if request.method == "POST" and form.is_valid():
        user = form.get_user()
        login(request, user)
        logger.info("Console user %s signed in", user.get_username())
        return redirect(_safe_next(request) or "root")

    return render(request, "core/home.html", {"form": form, "next": _safe_next(request) or ""})


@require_POST
def logout_view(request):
    logout(request)
    return redirect("login")


def health_check(request):
    return HttpResponse("ok")
