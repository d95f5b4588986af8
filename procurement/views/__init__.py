from .api import (
    BankDetailsViewSet,
    CustomRequestViewSet,
    MasterProductViewSet,
    PayoutViewSet,
    POVerificationViewSet,
    SupplierPerformanceViewSet,
)

__all__ = [
    "BankDetailsViewSet",
    "CustomRequestViewSet",
    "MasterProductViewSet",
    "PayoutViewSet",
    "POVerificationViewSet",
    "SupplierPerformanceViewSet",
]
