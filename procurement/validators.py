"""Field validators shared by the HTML forms and the API serializers."""

import re

from django.core.exceptions import ValidationError

_IBAN_RE = re.compile(r"^[A-Z]{2}[0-9]{2}[A-Z0-9]{10,30}$")
_SWIFT_RE = re.compile(r"^[A-Z]{6}[A-Z0-9]{2}([A-Z0-9]{3})?$")
_CURRENCY_RE = re.compile(r"^[A-Z]{3}$")


def normalize_iban(value):
    return re.sub(r"\s+", "", value or "").upper()


def validate_iban(value):
    iban = normalize_iban(value)
    if iban and not _IBAN_RE.match(iban):
        raise ValidationError(
            "Enter a valid IBAN: country code, check digits and account number."
        )


def validate_swift(value):
    swift = (value or "").strip().upper()
    if swift and not _SWIFT_RE.match(swift):
        raise ValidationError("SWIFT code must be 8 or 11 letters and digits.")


def validate_currency(value):
    if not _CURRENCY_RE.match((value or "").strip().upper()):
        raise ValidationError("Currency must be a three-letter code such as SAR.")


def parse_specifications(text):
    """Parse ``key: value`` lines into a dict.

    Blank lines are skipped. A line without a colon raises ``ValidationError``.
    """
    specs = {}
    for number, raw in enumerate((text or "").splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        key, sep, value = line.partition(":")
        if not sep or not key.strip():
            raise ValidationError(f"Line {number} must look like 'key: value'.")
        specs[key.strip()] = value.strip()
    return specs


def format_specifications(specs):
    if not specs:
        return ""
    if isinstance(specs, str):
        return specs
    return "\n".join(f"{key}: {value}" for key, value in specs.items())
