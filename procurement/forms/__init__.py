from .bank_forms import BankDetailsForm
from .bulk_forms import BulkUploadForm
from .catalog_forms import MasterProductForm
from .payout_forms import PayoutStatusForm, RecordPayoutForm
from .performance_forms import PerformanceFilterForm
from .po_forms import ClientPOUploadForm, RejectPOForm
from .request_forms import (
    AdminNotesForm,
    AssignRequestForm,
    RejectRequestForm,
    RequestStatusForm,
)

__all__ = [
    "AdminNotesForm",
    "AssignRequestForm",
    "BankDetailsForm",
    "BulkUploadForm",
    "ClientPOUploadForm",
    "MasterProductForm",
    "PayoutStatusForm",
    "PerformanceFilterForm",
    "RecordPayoutForm",
    "RejectPOForm",
    "RejectRequestForm",
    "RequestStatusForm",
]
