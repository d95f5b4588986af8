from decimal import Decimal

from rest_framework import serializers

from .services import custom_request_service, payout_service
from . import validators


class RowDocumentsSerializer(serializers.Serializer):
    """Document loading outcome of one PO queue row."""

    state = serializers.CharField()
    document = serializers.JSONField(allow_null=True)
    documents = serializers.ListField(child=serializers.JSONField())
    error = serializers.CharField(allow_null=True)
    retryable = serializers.BooleanField(read_only=True)


class QueueRowSerializer(serializers.Serializer):
    """Order waiting for PO verification with its client name."""

    order_id = serializers.CharField()
    client_name = serializers.CharField()
    order = serializers.JSONField()
    documents = RowDocumentsSerializer()


class VerifyPOSerializer(serializers.Serializer):
    document_id = serializers.CharField(required=False, allow_blank=True)


class RejectPOSerializer(serializers.Serializer):
    reason = serializers.CharField(required=False, allow_blank=True, default="")


class MasterProductSerializer(serializers.Serializer):
    """Expose master catalog entries."""

    id = serializers.CharField(read_only=True)
    name = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    category = serializers.CharField(max_length=100)
    subcategory = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    brand = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    model_number = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    specifications = serializers.JSONField(required=False, allow_null=True)
    image_url = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    created_at = serializers.CharField(read_only=True, required=False)


class CustomRequestSerializer(serializers.Serializer):
    """Read-only view of a custom item request."""

    id = serializers.CharField()
    client_id = serializers.CharField()
    item_name = serializers.CharField()
    description = serializers.CharField(allow_blank=True)
    specifications = serializers.CharField(allow_null=True)
    category = serializers.CharField(allow_null=True)
    quantity = serializers.IntegerField()
    target_price = serializers.FloatField(allow_null=True)
    currency = serializers.CharField()
    deadline = serializers.CharField(allow_null=True)
    priority = serializers.CharField()
    status = serializers.CharField()
    admin_notes = serializers.CharField(allow_null=True)
    assigned_to = serializers.CharField(allow_null=True)
    assigned_at = serializers.CharField(allow_null=True)
    rejection_reason = serializers.CharField(allow_null=True)
    created_at = serializers.CharField(allow_null=True)
    updated_at = serializers.CharField(allow_null=True)


class AssignRequestSerializer(serializers.Serializer):
    supplier_id = serializers.CharField()
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class RejectRequestSerializer(serializers.Serializer):
    reason = serializers.CharField()


class RequestStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=custom_request_service.STATUSES)
    admin_notes = serializers.CharField(required=False, allow_blank=True)


class BankDetailsSerializer(serializers.Serializer):
    """Bank account with IBAN/SWIFT/currency validation."""

    id = serializers.CharField(read_only=True)
    bank_name = serializers.CharField(max_length=255)
    account_name = serializers.CharField(max_length=255)
    account_number = serializers.CharField(max_length=64)
    iban = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, validators=[validators.validate_iban]
    )
    swift_code = serializers.CharField(
        required=False, allow_blank=True, allow_null=True, validators=[validators.validate_swift]
    )
    branch_name = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    branch_code = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    currency = serializers.CharField(default="SAR", validators=[validators.validate_currency])
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    is_active = serializers.BooleanField(default=False)
    created_at = serializers.CharField(read_only=True, required=False)

    def validate_iban(self, value):
        return validators.normalize_iban(value) or None

    def validate_swift_code(self, value):
        return (value or "").strip().upper() or None

    def validate_currency(self, value):
        return value.strip().upper()


class PayoutSerializer(serializers.Serializer):
    id = serializers.CharField(read_only=True)
    supplier_id = serializers.CharField()
    order_id = serializers.CharField(allow_null=True)
    amount = serializers.DecimalField(max_digits=14, decimal_places=2)
    currency = serializers.CharField(required=False, default="SAR")
    status = serializers.CharField(read_only=True)
    payment_method = serializers.CharField(required=False, allow_null=True)
    reference_number = serializers.CharField(required=False, allow_null=True)
    notes = serializers.CharField(required=False, allow_null=True)
    paid_at = serializers.CharField(read_only=True, allow_null=True)
    created_at = serializers.CharField(read_only=True, required=False)


class RecordPayoutSerializer(serializers.Serializer):
    supplier_id = serializers.CharField()
    order_id = serializers.CharField()
    amount = serializers.DecimalField(max_digits=14, decimal_places=2, min_value=Decimal("0.01"))
    payment_method = serializers.CharField(required=False, default="BANK_TRANSFER")
    reference_number = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class PayoutStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=payout_service.STATUSES)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
