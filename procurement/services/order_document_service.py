"""Order documents: client/system purchase orders and their PO audit trail.

Documents live in the ``order_documents`` table and their files in a private
storage bucket. File references are stored as ``storage://<bucket>/<path>``;
older rows may hold bucket-relative paths or public/signed Supabase URLs, all
of which are resolved to short-lived signed URLs for display.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote, urlparse

from django.conf import settings
from django.utils import timezone
from fpdf.errors import FPDFException

from ..po_pdf import generate_po_pdf
from .supabase_client import (
    BACKEND_ERRORS,
    APIError,
    get_supabase_client,
    insert_pruning_missing_columns,
    require_client,
)
from .supabase_errors import (
    extract_error_message,
    is_enum_error,
    is_missing_bucket_error,
    is_permission_error,
    user_facing_error,
)

logger = logging.getLogger(__name__)

CLIENT_PO = "CLIENT_PO"
SYSTEM_PO = "SYSTEM_PO"

PO_UPLOADED = "CLIENT_PO_UPLOADED"
PO_GENERATED = "PO_GENERATED"
PO_VERIFIED = "PO_VERIFIED"
PO_REJECTED = "PO_REJECTED"

VERIFIED_STATUS = "PENDING_PAYMENT"
LEGACY_VERIFIED_STATUS = "CONFIRMED"


def _bucket() -> str:
    return settings.ORDER_DOCUMENTS_BUCKET


def build_storage_ref(path: str) -> str:
    return f"storage://{_bucket()}/{path}"


def extract_storage_path(file_ref: str) -> Optional[str]:
    """Return the bucket path referenced by ``file_ref`` or ``None``."""
    if not file_ref or file_ref.startswith("/api/"):
        return None
    bucket = _bucket()
    storage_prefix = f"storage://{bucket}/"
    if file_ref.startswith(storage_prefix):
        return file_ref[len(storage_prefix):]
    if file_ref.startswith(f"{bucket}/"):
        return file_ref[len(bucket) + 1:]

    public_prefix = f"/storage/v1/object/public/{bucket}/"
    signed_prefix = f"/storage/v1/object/sign/{bucket}/"
    if file_ref.startswith(("http://", "https://")):
        path = urlparse(file_ref).path
    elif file_ref.startswith("/"):
        path = file_ref.split("?", 1)[0]
    else:
        return None
    for prefix in (public_prefix, signed_prefix):
        if prefix in path:
            return unquote(path.split(prefix, 1)[1]) or None
    return None


def resolve_document_url(file_ref: str) -> str:
    """Return a signed URL for ``file_ref``, or the reference unchanged."""
    storage_path = extract_storage_path(file_ref)
    if not storage_path:
        return file_ref
    client = get_supabase_client()
    if client is None:
        return file_ref
    try:
        data = client.storage.from_(_bucket()).create_signed_url(
            storage_path, settings.SIGNED_URL_TTL_SECONDS
        )
    except BACKEND_ERRORS as exc:
        logger.warning(
            "Unable to create signed URL for order document %s: %s", storage_path, exc
        )
        return file_ref
    signed = (data or {}).get("signedUrl") or (data or {}).get("signedURL")
    if not signed:
        logger.warning("Signed URL missing for order document %s", storage_path)
        return file_ref
    return signed


def _with_resolved_url(doc: Dict[str, Any]) -> Dict[str, Any]:
    resolved = dict(doc)
    resolved["file_url"] = resolve_document_url(doc.get("file_url") or "")
    return resolved


def get_order_documents_metadata(order_id: str) -> List[Dict[str, Any]]:
    """Return documents for ``order_id`` newest first, without signing URLs.

    Backend failures are raised so callers can show a per-order error.
    """
    client = require_client()
    resp = (
        client.table("order_documents")
        .select("*")
        .eq("order_id", order_id)
        .order("created_at", desc=True)
        .execute()
    )
    return list(resp.data or [])


def get_order_documents(order_id: str) -> List[Dict[str, Any]]:
    """Return documents for ``order_id`` with signed file URLs."""
    try:
        docs = get_order_documents_metadata(order_id)
    except BACKEND_ERRORS:
        logger.exception("Error fetching order documents for %s", order_id)
        raise
    return [_with_resolved_url(doc) for doc in docs]


def get_document(document_id: str) -> Optional[Dict[str, Any]]:
    client = get_supabase_client()
    if client is None:
        return None
    try:
        resp = (
            client.table("order_documents")
            .select("*")
            .eq("id", document_id)
            .limit(1)
            .execute()
        )
    except BACKEND_ERRORS:
        logger.exception("Error fetching document %s", document_id)
        return None
    rows = resp.data or []
    return _with_resolved_url(rows[0]) if rows else None


def pick_client_po(documents: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return the first unverified client PO, else the first client PO."""
    client_pos = [
        doc
        for doc in documents
        if str(doc.get("document_type") or "").upper() == CLIENT_PO
    ]
    for doc in client_pos:
        if not doc.get("verified_at") and not doc.get("verified_by"):
            return doc
    return client_pos[0] if client_pos else None


def log_po_audit(
    order_id: str,
    actor_id: Optional[str],
    action: str,
    *,
    actor_role: str = "ADMIN",
    document_id: Optional[str] = None,
    metadata: Optional[Dict[str, Any]] = None,
    notes: Optional[str] = None,
) -> bool:
    """Persist a PO audit entry in ``po_audit_logs``.

    When the entry cannot be stored it is written to the log instead so the
    event is not lost, and ``False`` is returned.
    """
    entry = {
        "order_id": order_id,
        "document_id": document_id,
        "actor_user_id": actor_id,
        "actor_role": actor_role,
        "action": action,
        "metadata": metadata,
        "notes": notes,
    }
    client = get_supabase_client()
    if client is None:
        logger.warning("[PO_AUDIT] Supabase unavailable, audit entry: %s", entry)
        return False
    try:
        client.table("po_audit_logs").insert(entry).execute()
    except BACKEND_ERRORS as exc:
        logger.warning(
            "[PO_AUDIT] Unable to persist audit entry %s: %s", entry, extract_error_message(exc)
        )
        return False
    logger.info("[PO_AUDIT] %s persisted for order %s", action, order_id)
    return True


def _log_verification_failure(
    order_id: Optional[str], actor_id: Optional[str], error: Any, document_id: Optional[str] = None
) -> None:
    if not order_id:
        logger.warning(
            "[PO_AUDIT] Verification failed without order context (document %s): %s",
            document_id,
            extract_error_message(error),
        )
        return
    log_po_audit(
        order_id,
        actor_id,
        PO_VERIFIED,
        document_id=document_id,
        notes="PO verification failed",
        metadata={
            "verificationOutcome": "FAILED",
            "errorMessage": extract_error_message(error),
        },
    )


def _mark_order_verified(client, order_id: str, admin_id: Optional[str], now_iso: str) -> None:
    updates = {
        "status": VERIFIED_STATUS,
        "admin_verified": True,
        "admin_verified_by": admin_id,
        "admin_verified_at": now_iso,
        "updated_at": now_iso,
    }
    try:
        client.table("orders").update(updates).eq("id", order_id).execute()
    except APIError as exc:
        if not is_enum_error(exc):
            raise
        # Older schemas have no PENDING_PAYMENT status.
        updates["status"] = LEGACY_VERIFIED_STATUS
        client.table("orders").update(updates).eq("id", order_id).execute()


def _document_order_id(client, document_id: str) -> Optional[str]:
    try:
        resp = (
            client.table("order_documents")
            .select("id,order_id")
            .eq("id", document_id)
            .limit(1)
            .execute()
        )
    except BACKEND_ERRORS:
        logger.exception("Unable to look up order for document %s", document_id)
        return None
    rows = resp.data or []
    return rows[0].get("order_id") if rows else None


def verify_client_po(document_id: str, admin_id: Optional[str]) -> Tuple[bool, str]:
    """Verify a client PO and move its order to the payment stage.

    The atomic RPC is tried first. Permission errors are final; other RPC
    failures fall back to updating the document and order directly.
    """
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        try:
            client.rpc(
                "verify_client_po_and_confirm_order", {"p_document_id": document_id}
            ).execute()
            return True, "PO confirmed successfully."
        except APIError as rpc_error:
            if is_permission_error(rpc_error):
                raise
            logger.warning(
                "verify_client_po_and_confirm_order RPC failed for %s, using direct verification: %s",
                document_id,
                extract_error_message(rpc_error),
            )
            order_id = _document_order_id(client, document_id)
            if not order_id:
                raise
        now_iso = timezone.now().isoformat()
        client.table("order_documents").update(
            {"verified_by": admin_id, "verified_at": now_iso, "updated_at": now_iso}
        ).eq("id", document_id).execute()
        _mark_order_verified(client, order_id, admin_id, now_iso)
        return True, "PO confirmed successfully."
    except BACKEND_ERRORS as exc:
        logger.error("Error verifying client PO %s: %s", document_id, exc)
        _log_verification_failure(
            _document_order_id(client, document_id), admin_id, exc, document_id
        )
        return False, user_facing_error(exc, "Failed to verify PO.")


def verify_order_po(order_id: str, admin_id: Optional[str]) -> Tuple[bool, str]:
    """Verify an order that has no client PO document."""
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured."
    try:
        _mark_order_verified(client, order_id, admin_id, timezone.now().isoformat())
    except BACKEND_ERRORS as exc:
        logger.error("Error verifying order PO %s: %s", order_id, exc)
        _log_verification_failure(order_id, admin_id, exc)
        return False, user_facing_error(exc, "Failed to verify PO.")
    return True, "Order confirmed successfully."


def _upload(client, path: str, content: bytes, content_type: str) -> None:
    client.storage.from_(_bucket()).upload(
        path=path,
        file=content,
        file_options={
            "content-type": content_type,
            "cache-control": "3600",
            "upsert": "false",
        },
    )


def upload_client_po_by_admin(
    order_id: str,
    file_name: str,
    content: bytes,
    admin_id: Optional[str],
    content_type: str = "application/pdf",
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """Store a client PO the admin received outside the platform."""
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured.", None
    extension = (file_name.rsplit(".", 1)[-1] if "." in file_name else "pdf").lower()
    storage_name = f"{order_id}_client_po_{int(time.time() * 1000)}.{extension}"
    try:
        _upload(client, storage_name, content, content_type)
        doc = insert_pruning_missing_columns(
            client,
            "order_documents",
            {
                "order_id": order_id,
                "document_type": CLIENT_PO,
                "file_url": build_storage_ref(storage_name),
                "file_name": file_name,
                "uploaded_by": admin_id,
            },
        )
        client.table("orders").update({"client_po_uploaded": True}).eq(
            "id", order_id
        ).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Error uploading client PO for order %s: %s", order_id, exc)
        if is_missing_bucket_error(exc):
            return (
                False,
                f'Storage bucket "{_bucket()}" is missing. Create the bucket and retry.',
                None,
            )
        return False, user_facing_error(exc, "Failed to upload the client PO."), None
    log_po_audit(
        order_id,
        admin_id,
        PO_UPLOADED,
        document_id=doc.get("id"),
        metadata={
            "fileName": file_name,
            "fileSize": len(content),
            "source": "ADMIN_MANUAL_UPLOAD",
        },
    )
    return True, "Client PO uploaded.", doc


def generate_system_po(
    order: Dict[str, Any], admin_id: Optional[str], client_name: str = ""
) -> Tuple[bool, str, Optional[Dict[str, Any]]]:
    """Render, store and register the system PO for ``order``.

    When the PDF cannot be rendered or uploaded the document points at the
    on-demand ``/api/generate-po/<order>`` endpoint instead.
    """
    client = get_supabase_client()
    if client is None:
        return False, "Supabase is not configured.", None
    order_id = order["id"]
    file_name = f"MWRD_PO_{order_id}.pdf"
    file_url = f"/api/generate-po/{order_id}"
    storage_name = f"{order_id}_system_po_{int(time.time() * 1000)}.pdf"
    try:
        pdf = generate_po_pdf(
            order,
            client_name,
            settings.DEFAULT_CURRENCY,
            font_path=settings.PO_PDF_FONT_PATH or None,
        )
    except (FPDFException, OSError) as exc:
        logger.error("Error rendering system PO for %s: %s", order_id, exc)
    else:
        try:
            _upload(client, storage_name, pdf, "application/pdf")
            file_url = build_storage_ref(storage_name)
        except BACKEND_ERRORS as exc:
            logger.error("Error uploading generated system PO for %s: %s", order_id, exc)
    try:
        doc = insert_pruning_missing_columns(
            client,
            "order_documents",
            {
                "order_id": order_id,
                "document_type": SYSTEM_PO,
                "file_url": file_url,
                "file_name": file_name,
                "uploaded_by": admin_id,
            },
        )
        client.table("orders").update({"system_po_generated": True}).eq(
            "id", order_id
        ).execute()
    except BACKEND_ERRORS as exc:
        logger.error("Error generating system PO for %s: %s", order_id, exc)
        return False, user_facing_error(exc, "Failed to generate the system PO."), None
    log_po_audit(
        order_id, admin_id, PO_GENERATED, document_id=doc.get("id"), metadata={"fileName": file_name}
    )
    return True, "System PO generated.", doc


def download_document(file_ref: str) -> bytes:
    """Return the stored bytes for ``file_ref``; backend errors are raised."""
    client = require_client()
    storage_path = extract_storage_path(file_ref) or file_ref
    return client.storage.from_(_bucket()).download(storage_path)
