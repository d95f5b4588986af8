from django import forms

from .. import validators
from .base import StyledFormMixin


class BankDetailsForm(StyledFormMixin, forms.Form):
    bank_name = forms.CharField(max_length=255)
    account_name = forms.CharField(max_length=255)
    account_number = forms.CharField(max_length=64)
    iban = forms.CharField(max_length=42, required=False, label="IBAN")
    swift_code = forms.CharField(max_length=11, required=False, label="SWIFT code")
    branch_name = forms.CharField(max_length=255, required=False)
    branch_code = forms.CharField(max_length=32, required=False)
    currency = forms.CharField(max_length=3, initial="SAR")
    notes = forms.CharField(widget=forms.Textarea(attrs={"rows": 2}), required=False)
    is_active = forms.BooleanField(required=False, label="Active account")

    def clean_iban(self):
        iban = self.cleaned_data.get("iban")
        validators.validate_iban(iban)
        return validators.normalize_iban(iban)

    def clean_swift_code(self):
        swift = self.cleaned_data.get("swift_code")
        validators.validate_swift(swift)
        return (swift or "").strip().upper()

    def clean_currency(self):
        currency = (self.cleaned_data.get("currency") or "SAR").strip().upper()
        validators.validate_currency(currency)
        return currency
