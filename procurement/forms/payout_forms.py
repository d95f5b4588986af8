from decimal import Decimal

from django import forms

from ..services import payout_service
from ..services.user_service import display_name
from .base import StyledFormMixin

PAYMENT_METHODS = [
    ("BANK_TRANSFER", "Bank transfer"),
    ("CHEQUE", "Cheque"),
    ("CASH", "Cash"),
]


class RecordPayoutForm(StyledFormMixin, forms.Form):
    supplier_id = forms.ChoiceField(label="Supplier")
    order_id = forms.CharField(max_length=64, label="Order")
    amount = forms.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = forms.ChoiceField(choices=PAYMENT_METHODS)
    reference_number = forms.CharField(max_length=100, required=False)
    notes = forms.CharField(widget=forms.Textarea(attrs={"rows": 2}), required=False)

    def __init__(self, *args, suppliers=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["supplier_id"].choices = [("", "Select a supplier")] + [
            (s["id"], display_name(s, default=s.get("email") or s["id"]))
            for s in suppliers
        ]


class PayoutStatusForm(StyledFormMixin, forms.Form):
    status = forms.ChoiceField(
        choices=[(s, s.title()) for s in payout_service.STATUSES]
    )
    notes = forms.CharField(required=False)
