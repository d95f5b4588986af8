"""API routes for the procurement console."""

from rest_framework.routers import DefaultRouter

from .views import (
    BankDetailsViewSet,
    CustomRequestViewSet,
    MasterProductViewSet,
    PayoutViewSet,
    POVerificationViewSet,
    SupplierPerformanceViewSet,
)

router = DefaultRouter()
router.register(r"po-verification", POVerificationViewSet, basename="po-verification")
router.register(r"master-products", MasterProductViewSet, basename="master-product")
router.register(r"custom-requests", CustomRequestViewSet, basename="custom-request")
router.register(r"bank-details", BankDetailsViewSet, basename="bank-details")
router.register(r"payouts", PayoutViewSet, basename="payout")
router.register(r"supplier-performance", SupplierPerformanceViewSet, basename="supplier-performance")

urlpatterns = router.urls
