from django import forms

from ..services import custom_request_service
from ..services.user_service import display_name
from .base import StyledFormMixin


class AssignRequestForm(StyledFormMixin, forms.Form):
    supplier_id = forms.ChoiceField(label="Supplier")
    notes = forms.CharField(widget=forms.Textarea(attrs={"rows": 2}), required=False)

    def __init__(self, *args, suppliers=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.fields["supplier_id"].choices = [("", "Select a supplier")] + [
            (s["id"], display_name(s, default=s.get("email") or s["id"]))
            for s in suppliers
        ]


class RejectRequestForm(StyledFormMixin, forms.Form):
    reason = forms.CharField(widget=forms.Textarea(attrs={"rows": 2}))


class AdminNotesForm(StyledFormMixin, forms.Form):
    admin_notes = forms.CharField(
        widget=forms.Textarea(attrs={"rows": 3}), required=False, label="Admin notes"
    )


class RequestStatusForm(StyledFormMixin, forms.Form):
    status = forms.ChoiceField(
        choices=[(s, s.replace("_", " ").title()) for s in custom_request_service.STATUSES]
    )
