from django.urls import path

from .views.bank_details import (
    bank_details_activate,
    bank_details_delete,
    bank_details_edit,
    bank_details_list,
)
from .views.catalog import (
    CatalogBulkUploadView,
    CatalogCreateView,
    CatalogDeleteView,
    CatalogEditView,
    CatalogExportView,
    CatalogListView,
    CatalogSkuSuggestionView,
    CatalogTableView,
)
from .views.custom_requests import (
    custom_request_assign,
    custom_request_detail,
    custom_request_notes,
    custom_request_reject,
    custom_request_status,
    custom_requests_list,
)
from .views.payouts import payout_record, payout_update_status, payouts_list
from .views.performance import supplier_performance
from .views.po_verification import (
    po_document_download,
    po_generate,
    po_queue,
    po_reject,
    po_row_documents,
    po_upload,
    po_verify,
)

urlpatterns = [
    path("po-verification/", po_queue, name="po_queue"),
    path(
        "po-verification/<str:order_id>/documents/",
        po_row_documents,
        name="po_row_documents",
    ),
    path("po-verification/<str:order_id>/verify/", po_verify, name="po_verify"),
    path("po-verification/<str:order_id>/reject/", po_reject, name="po_reject"),
    path("po-verification/<str:order_id>/upload/", po_upload, name="po_upload"),
    path("po-verification/<str:order_id>/generate/", po_generate, name="po_generate"),
    path(
        "documents/<str:document_id>/download/",
        po_document_download,
        name="po_document_download",
    ),
    path("catalog/", CatalogListView.as_view(), name="catalog_list"),
    path("catalog/table/", CatalogTableView.as_view(), name="catalog_table"),
    path("catalog/export/", CatalogExportView.as_view(), name="catalog_export"),
    path("catalog/create/", CatalogCreateView.as_view(), name="catalog_create"),
    path("catalog/sku/", CatalogSkuSuggestionView.as_view(), name="catalog_sku"),
    path(
        "catalog/bulk-upload/",
        CatalogBulkUploadView.as_view(),
        name="catalog_bulk_upload",
    ),
    path("catalog/<str:pk>/edit/", CatalogEditView.as_view(), name="catalog_edit"),
    path("catalog/<str:pk>/delete/", CatalogDeleteView.as_view(), name="catalog_delete"),
    path("suppliers/performance/", supplier_performance, name="supplier_performance"),
    path("custom-requests/", custom_requests_list, name="custom_requests"),
    path("custom-requests/<str:pk>/", custom_request_detail, name="custom_request_detail"),
    path(
        "custom-requests/<str:pk>/assign/",
        custom_request_assign,
        name="custom_request_assign",
    ),
    path(
        "custom-requests/<str:pk>/reject/",
        custom_request_reject,
        name="custom_request_reject",
    ),
    path(
        "custom-requests/<str:pk>/notes/",
        custom_request_notes,
        name="custom_request_notes",
    ),
    path(
        "custom-requests/<str:pk>/status/",
        custom_request_status,
        name="custom_request_status",
    ),
    path("bank-details/", bank_details_list, name="bank_details"),
    path("bank-details/<str:pk>/edit/", bank_details_edit, name="bank_details_edit"),
    path(
        "bank-details/<str:pk>/activate/",
        bank_details_activate,
        name="bank_details_activate",
    ),
    path(
        "bank-details/<str:pk>/delete/",
        bank_details_delete,
        name="bank_details_delete",
    ),
    path("payouts/", payouts_list, name="payouts"),
    path("payouts/record/", payout_record, name="payout_record"),
    path("payouts/<str:pk>/status/", payout_update_status, name="payout_update_status"),
]
