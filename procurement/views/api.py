from django.http import Http404
from rest_framework import permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from ..serializers import (
    AssignRequestSerializer,
    BankDetailsSerializer,
    CustomRequestSerializer,
    MasterProductSerializer,
    PayoutSerializer,
    PayoutStatusSerializer,
    QueueRowSerializer,
    RecordPayoutSerializer,
    RejectPOSerializer,
    RejectRequestSerializer,
    RequestStatusSerializer,
    RowDocumentsSerializer,
    VerifyPOSerializer,
)
from ..services import (
    bank_details_service,
    custom_request_service,
    master_product_service,
    payout_service,
    po_verification_service,
    supplier_performance_service,
)
from .common import actor_id


def _outcome(ok: bool, msg: str, data=None, created: bool = False) -> Response:
    if not ok:
        return Response({"detail": msg}, status=status.HTTP_400_BAD_REQUEST)
    body = {"detail": msg}
    if data is not None:
        body["data"] = data
    return Response(body, status=status.HTTP_201_CREATED if created else status.HTTP_200_OK)


class POVerificationViewSet(viewsets.ViewSet):
    """PO verification queue.

    Query params:
        hydrate: ``1`` loads every row's documents concurrently before
        responding; otherwise rows come back in the ``loading`` state.
    """

    permission_classes = [permissions.IsAdminUser]

    def list(self, request):
        rows = po_verification_service.load_queue()
        if request.query_params.get("hydrate") == "1":
            rows = po_verification_service.hydrate_queue(rows)
        return Response(QueueRowSerializer(rows, many=True).data)

    @action(detail=True, methods=["get"])
    def documents(self, request, pk=None):
        result = po_verification_service.fetch_row_documents(pk)
        return Response(RowDocumentsSerializer(result).data)

    @action(detail=True, methods=["post"])
    def verify(self, request, pk=None):
        serializer = VerifyPOSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        document_id = serializer.validated_data.get("document_id")
        if document_id:
            ok, msg = po_verification_service.verify(document_id, actor_id(request), pk)
        else:
            ok, msg = po_verification_service.verify_without_document(pk, actor_id(request))
        return _outcome(ok, msg)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        serializer = RejectPOSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ok, msg = po_verification_service.reject(
            pk, actor_id(request), serializer.validated_data["reason"]
        )
        return _outcome(ok, msg)


class MasterProductViewSet(viewsets.ViewSet):
    """CRUD API for the master catalog.

    Query params:
        category: exact category match.
        search: substring of the product name.
    """

    permission_classes = [permissions.IsAdminUser]

    def list(self, request):
        rows = master_product_service.get_master_products(
            category=request.query_params.get("category"),
            search=request.query_params.get("search"),
        )
        return Response(MasterProductSerializer(rows, many=True).data)

    def retrieve(self, request, pk=None):
        product = master_product_service.get_master_product(pk)
        if product is None:
            raise Http404
        return Response(MasterProductSerializer(product).data)

    def create(self, request):
        serializer = MasterProductSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ok, msg, row = master_product_service.create_master_product(serializer.validated_data)
        return _outcome(ok, msg, MasterProductSerializer(row).data if row else None, created=True)

    def partial_update(self, request, pk=None):
        serializer = MasterProductSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        ok, msg = master_product_service.update_master_product(pk, serializer.validated_data)
        return _outcome(ok, msg)

    def destroy(self, request, pk=None):
        ok, msg = master_product_service.delete_master_product(pk)
        if not ok:
            return _outcome(ok, msg)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=["get"])
    def categories(self, request):
        return Response(master_product_service.get_categories())


class CustomRequestViewSet(viewsets.ViewSet):
    """Custom item request triage.

    Query params:
        status: ``OPEN`` for the pending queue, otherwise an exact status.
    """

    permission_classes = [permissions.IsAdminUser]

    def list(self, request):
        wanted = (request.query_params.get("status") or "").upper()
        if wanted == "OPEN":
            items = custom_request_service.get_pending_requests()
        else:
            items = custom_request_service.get_all_requests(wanted or None)
        return Response(CustomRequestSerializer(items, many=True).data)

    def retrieve(self, request, pk=None):
        item = custom_request_service.get_request(pk)
        if item is None:
            raise Http404
        return Response(CustomRequestSerializer(item).data)

    @action(detail=False, methods=["get"])
    def stats(self, request):
        return Response(custom_request_service.get_request_stats())

    @action(detail=True, methods=["post"])
    def assign(self, request, pk=None):
        serializer = AssignRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ok, msg = custom_request_service.assign_to_supplier(
            pk, data["supplier_id"], actor_id(request), data.get("notes")
        )
        return _outcome(ok, msg)

    @action(detail=True, methods=["post"])
    def reject(self, request, pk=None):
        serializer = RejectRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ok, msg = custom_request_service.reject_request(pk, serializer.validated_data["reason"])
        return _outcome(ok, msg)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = RequestStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ok, msg = custom_request_service.update_status(
            pk, data["status"], {"admin_notes": data.get("admin_notes")}
        )
        return _outcome(ok, msg)


class BankDetailsViewSet(viewsets.ViewSet):
    """Bank accounts used for bank transfer payments."""

    permission_classes = [permissions.IsAdminUser]

    def list(self, request):
        return Response(BankDetailsSerializer(bank_details_service.get_all_bank_details(), many=True).data)

    def create(self, request):
        serializer = BankDetailsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ok, msg, row = bank_details_service.create_bank_details(serializer.validated_data)
        return _outcome(ok, msg, BankDetailsSerializer(row).data if row else None, created=True)

    def partial_update(self, request, pk=None):
        serializer = BankDetailsSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        ok, msg = bank_details_service.update_bank_details(pk, serializer.validated_data)
        return _outcome(ok, msg)

    def destroy(self, request, pk=None):
        ok, msg = bank_details_service.delete_bank_details(pk)
        if not ok:
            return _outcome(ok, msg)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["post"])
    def activate(self, request, pk=None):
        ok, msg = bank_details_service.set_active_bank_details(pk)
        return _outcome(ok, msg)

    @action(detail=False, methods=["get"])
    def active(self, request):
        account = bank_details_service.get_active_bank_details()
        if account is None:
            raise Http404
        return Response(BankDetailsSerializer(account).data)


class PayoutViewSet(viewsets.ViewSet):
    """Supplier payouts.

    Query params:
        status: exact payout status.
        supplier: supplier id.
    """

    permission_classes = [permissions.IsAdminUser]

    def list(self, request):
        payouts = payout_service.get_payouts(
            status=request.query_params.get("status"),
            supplier_id=request.query_params.get("supplier"),
        )
        return Response(PayoutSerializer(payouts, many=True).data)

    def create(self, request):
        serializer = RecordPayoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ok, msg, row = payout_service.record_payout(
            data["supplier_id"],
            data["order_id"],
            data["amount"],
            payment_method=data["payment_method"],
            reference_number=data.get("reference_number") or None,
            notes=data.get("notes") or None,
            admin_id=actor_id(request),
        )
        return _outcome(ok, msg, PayoutSerializer(row).data if row else None, created=True)

    @action(detail=True, methods=["post"], url_path="status")
    def set_status(self, request, pk=None):
        serializer = PayoutStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        ok, msg = payout_service.update_payout_status(pk, data["status"], data.get("notes"))
        return _outcome(ok, msg)


class SupplierPerformanceViewSet(viewsets.ViewSet):
    """Supplier performance report.

    Query params:
        date_range, min_rating, category.
    """

    permission_classes = [permissions.IsAdminUser]

    def list(self, request):
        params = request.query_params
        try:
            min_rating = float(params.get("min_rating") or 0)
        except ValueError:
            return Response(
                {"detail": "min_rating must be a number."}, status=status.HTTP_400_BAD_REQUEST
            )
        filters = supplier_performance_service.ReportFilters(
            date_range=params.get("date_range") or supplier_performance_service.ALL,
            min_rating=min_rating,
            category=params.get("category") or supplier_performance_service.ALL,
        )
        return Response(supplier_performance_service.performance_report(filters))
