from decimal import Decimal

import pytest
from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import SimpleUploadedFile

from procurement import validators
from procurement.forms import (
    AssignRequestForm,
    BankDetailsForm,
    ClientPOUploadForm,
    MasterProductForm,
    PerformanceFilterForm,
    RecordPayoutForm,
)
from procurement.forms.base import CHECKBOX_CLASS, INPUT_CLASS
from procurement.serializers import BankDetailsSerializer, RecordPayoutSerializer


def test_iban_validation():
    validators.validate_iban("sa03 8000 0000 6080 1016 7519")
    validators.validate_iban("")
    with pytest.raises(ValidationError):
        validators.validate_iban("SA03")
    assert validators.normalize_iban("sa03 8000 0000 6080 1016 7519") == "SA0380000000608010167519"


def test_swift_and_currency_validation():
    validators.validate_swift("RIBLSARI")
    validators.validate_swift("riblsarixxx")
    with pytest.raises(ValidationError):
        validators.validate_swift("RIBL")
    validators.validate_currency("sar")
    with pytest.raises(ValidationError):
        validators.validate_currency("RIYAL")


def test_parse_and_format_specifications():
    specs = validators.parse_specifications("Colour: Blue\n\n Size : A4 \nNote: a:b")
    assert specs == {"Colour": "Blue", "Size": "A4", "Note": "a:b"}
    assert validators.format_specifications(specs) == "Colour: Blue\nSize: A4\nNote: a:b"
    assert validators.format_specifications(None) == ""
    with pytest.raises(ValidationError):
        validators.parse_specifications("just words")


def test_master_product_form_parses_specifications():
    form = MasterProductForm(
        {"name": " Stapler ", "category": "Office", "specifications": "Colour: Black"}
    )
    assert form.is_valid(), form.errors
    assert form.cleaned_data["name"] == "Stapler"
    assert form.cleaned_data["specifications"] == {"Colour": "Black"}
    assert form.fields["category"].widget.attrs["list"] == "category-options"
    assert form.fields["name"].widget.attrs["class"] == INPUT_CLASS


def test_master_product_form_initial_from_product():
    form = MasterProductForm(
        product={"name": "Stapler", "category": "Office", "specifications": {"Colour": "Black"}}
    )
    assert form.initial["name"] == "Stapler"
    assert form.initial["specifications"] == "Colour: Black"


def test_master_product_form_rejects_bad_specifications():
    form = MasterProductForm({"name": "Stapler", "category": "Office", "specifications": "oops"})
    assert not form.is_valid()
    assert "specifications" in form.errors


def test_bank_details_form_normalizes():
    form = BankDetailsForm(
        {
            "bank_name": "Riyad Bank",
            "account_name": "Marketplace LLC",
            "account_number": "0123",
            "iban": "sa03 8000 0000 6080 1016 7519",
            "swift_code": "riblsari",
            "currency": "sar",
            "is_active": "on",
        }
    )
    assert form.is_valid(), form.errors
    assert form.cleaned_data["iban"] == "SA0380000000608010167519"
    assert form.cleaned_data["swift_code"] == "RIBLSARI"
    assert form.cleaned_data["currency"] == "SAR"
    assert form.fields["is_active"].widget.attrs["class"] == CHECKBOX_CLASS


def test_bank_details_form_rejects_bad_iban():
    form = BankDetailsForm(
        {"bank_name": "B", "account_name": "A", "account_number": "1", "iban": "XX", "currency": "SAR"}
    )
    assert not form.is_valid()
    assert "iban" in form.errors


def test_client_po_upload_form_checks_extension():
    ok = ClientPOUploadForm({}, {"file": SimpleUploadedFile("po.pdf", b"%PDF", "application/pdf")})
    assert ok.is_valid()
    bad = ClientPOUploadForm({}, {"file": SimpleUploadedFile("po.exe", b"MZ")})
    assert not bad.is_valid()
    assert bad.errors["file"] == ["Upload a PDF or image file."]


def test_assign_and_payout_forms_use_supplier_choices():
    suppliers = [{"id": "s1", "company_name": "Gulf Supplies"}, {"id": "s2", "email": "b@x.test"}]
    form = AssignRequestForm({"supplier_id": "s1"}, suppliers=suppliers)
    assert form.is_valid()
    assert ("s2", "b@x.test") in form.fields["supplier_id"].choices
    assert not AssignRequestForm({"supplier_id": "s9"}, suppliers=suppliers).is_valid()

    payout = RecordPayoutForm(
        {"supplier_id": "s1", "order_id": "o1", "amount": "0", "payment_method": "CHEQUE"},
        suppliers=suppliers,
    )
    assert not payout.is_valid()
    assert "amount" in payout.errors


def test_performance_filter_form():
    form = PerformanceFilterForm(
        {"date_range": "LAST_30_DAYS", "min_rating": "3.5", "category": "Office"},
        categories=["Office"],
    )
    assert form.is_valid(), form.errors
    assert form.cleaned_data["min_rating"] == Decimal("3.5")
    assert not PerformanceFilterForm({"category": "Unknown"}, categories=["Office"]).is_valid()


def test_bank_details_serializer_normalizes():
    serializer = BankDetailsSerializer(
        data={
            "bank_name": "Riyad Bank",
            "account_name": "Marketplace LLC",
            "account_number": "0123",
            "iban": "sa03 8000 0000 6080 1016 7519",
            "currency": "usd",
        }
    )
    assert serializer.is_valid(), serializer.errors
    assert serializer.validated_data["iban"] == "SA0380000000608010167519"
    assert serializer.validated_data["currency"] == "USD"
    assert serializer.validated_data["is_active"] is False


def test_bank_details_serializer_rejects_bad_swift():
    serializer = BankDetailsSerializer(
        data={"bank_name": "B", "account_name": "A", "account_number": "1", "swift_code": "12"}
    )
    assert not serializer.is_valid()
    assert "swift_code" in serializer.errors


def test_record_payout_serializer_requires_positive_amount():
    serializer = RecordPayoutSerializer(data={"supplier_id": "s1", "order_id": "o1", "amount": "0"})
    assert not serializer.is_valid()
    assert "amount" in serializer.errors
