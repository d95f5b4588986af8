"""Service layer for the procurement console."""

from . import (
    bank_details_service,
    custom_request_service,
    list_utils,
    master_product_service,
    order_document_service,
    order_service,
    payout_service,
    po_verification_service,
    supabase_cache,
    supabase_client,
    supabase_errors,
    supplier_performance_service,
    ui_service,
    user_service,
)

__all__ = [
    "bank_details_service",
    "custom_request_service",
    "list_utils",
    "master_product_service",
    "order_document_service",
    "order_service",
    "payout_service",
    "po_verification_service",
    "supabase_cache",
    "supabase_client",
    "supabase_errors",
    "supplier_performance_service",
    "ui_service",
    "user_service",
]
