"""PO verification queue screens.

The queue page renders every pending order at once. Each row then asks
``po_row_documents`` for its documents through htmx, so rows fill in
independently and a failed or slow row can be retried on its own.
"""

import logging
import mimetypes

from django.contrib import messages
from django.http import HttpResponse
from django.shortcuts import redirect, render
from django.views.decorators.http import require_GET, require_POST

from ..forms import ClientPOUploadForm, RejectPOForm
from ..services import order_document_service, order_service, po_verification_service, user_service
from ..services.supabase_client import BACKEND_ERRORS
from ..services.supabase_errors import user_facing_error
from .common import actor_id, default_currency

logger = logging.getLogger(__name__)


def _report(request, ok: bool, msg: str) -> None:
    if ok:
        messages.success(request, msg)
    else:
        messages.error(request, msg)


@require_GET
def po_queue(request):
    """List orders awaiting PO confirmation without their documents."""
    rows = po_verification_service.load_queue()
    ctx = {
        "rows": rows,
        "upload_form": ClientPOUploadForm(),
        "reject_form": RejectPOForm(),
        "currency": default_currency(),
    }
    return render(request, "procurement/po_queue.html", ctx)


@require_GET
def po_row_documents(request, order_id: str):
    """Return the document cell of one queue row.

    Used both for the initial load triggered by the row and for retries.
    """
    result = po_verification_service.fetch_row_documents(order_id)
    ctx = {"order_id": order_id, "result": result}
    return render(request, "procurement/partials/_po_row_documents.html", ctx)


@require_POST
def po_verify(request, order_id: str):
    document_id = (request.POST.get("document_id") or "").strip()
    admin = actor_id(request)
    try:
        if document_id:
            ok, msg = po_verification_service.verify(document_id, admin, order_id)
        else:
            ok, msg = po_verification_service.verify_without_document(order_id, admin)
    except BACKEND_ERRORS as exc:
        logger.error("PO verification for order %s rejected by backend: %s", order_id, exc)
        ok, msg = False, user_facing_error(exc, "Failed to verify the PO.")
    _report(request, ok, msg)
    return redirect("po_queue")


@require_POST
def po_reject(request, order_id: str):
    form = RejectPOForm(request.POST)
    reason = form.cleaned_data["reason"] if form.is_valid() else ""
    ok, msg = po_verification_service.reject(order_id, actor_id(request), reason)
    _report(request, ok, msg)
    return redirect("po_queue")


@require_POST
def po_upload(request, order_id: str):
    """Attach a client PO the admin received by other means."""
    form = ClientPOUploadForm(request.POST, request.FILES)
    if not form.is_valid():
        for error in form.errors.get("file", []):
            messages.error(request, error)
        return redirect("po_queue")
    upload = form.cleaned_data["file"]
    content_type = upload.content_type or mimetypes.guess_type(upload.name)[0] or "application/pdf"
    ok, msg, _ = order_document_service.upload_client_po_by_admin(
        order_id, upload.name, upload.read(), actor_id(request), content_type
    )
    _report(request, ok, msg)
    return redirect("po_queue")


@require_POST
def po_generate(request, order_id: str):
    order = order_service.get_order(order_id)
    if order is None:
        messages.error(request, f"Order {order_id} not found.")
        return redirect("po_queue")
    client_name = user_service.display_name(user_service.get_user(order.get("client_id")))
    ok, msg, _ = order_document_service.generate_system_po(order, actor_id(request), client_name)
    _report(request, ok, msg)
    return redirect("po_queue")


@require_GET
def po_document_download(request, document_id: str):
    document = order_document_service.get_document(document_id)
    if document is None:
        messages.error(request, "Document not found.")
        return redirect("po_queue")
    try:
        content = order_document_service.download_document(document.get("file_url") or "")
    except BACKEND_ERRORS as exc:
        logger.error("Error downloading document %s: %s", document_id, exc)
        messages.error(request, user_facing_error(exc, "Failed to download the document."))
        return redirect("po_queue")
    file_name = document.get("file_name") or f"{document_id}.pdf"
    content_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"
    response = HttpResponse(content, content_type=content_type)
    response["Content-Disposition"] = f'attachment; filename="{file_name}"'
    return response
