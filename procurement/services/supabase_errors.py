"""Helpers for interpreting backend errors.

The backend schema has evolved through many migrations and deployments may
lag behind the console. These helpers recognise the error shapes returned by
PostgREST and storage so services can fall back to older contracts, and map
raw messages to text that is safe to show to an administrator.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

_SCHEMA_CACHE_COLUMN = re.compile(r"could not find the '([^']+)' column", re.IGNORECASE)
_PG_MISSING_COLUMN = re.compile(r'column\s+"?([a-zA-Z0-9_]+)"?\s+(?:of relation \S+ )?does not exist', re.IGNORECASE)
_MISSING_RELATION = re.compile(r"relation .* does not exist", re.IGNORECASE)
_MISSING_COLUMN = re.compile(r"column .* does not exist", re.IGNORECASE)

SCHEMA_ERROR_CODES = {"42P01", "42703"}


def extract_error_message(error: Any, default: str = "Unknown error") -> str:
    """Return the most useful message carried by ``error``."""
    if error is None:
        return default
    if isinstance(error, str):
        return error.strip() or default
    message = getattr(error, "message", None)
    if isinstance(message, str) and message.strip():
        return message
    if isinstance(error, dict):
        message = error.get("message")
        if isinstance(message, str) and message.strip():
            return message
    text = str(error).strip()
    return text or default


def error_code(error: Any) -> Optional[str]:
    code = getattr(error, "code", None)
    if code is None and isinstance(error, dict):
        code = error.get("code")
    return str(code) if code is not None else None


def is_schema_compatibility_error(error: Any) -> bool:
    """Return ``True`` when ``error`` reports a missing table or column."""
    if error is None:
        return False
    if error_code(error) in SCHEMA_ERROR_CODES:
        return True
    message = extract_error_message(error, "")
    return bool(_MISSING_RELATION.search(message) or _MISSING_COLUMN.search(message))


def is_permission_error(error: Any) -> bool:
    message = extract_error_message(error, "").lower()
    return any(
        marker in message
        for marker in ("only admins", "permission", "not authorized", "forbidden")
    )


def is_enum_error(error: Any) -> bool:
    """Return ``True`` when a value was rejected by a Postgres enum."""
    return "invalid input value for enum" in extract_error_message(error, "").lower()


def is_missing_bucket_error(error: Any) -> bool:
    return "bucket not found" in extract_error_message(error, "").lower()


def prune_missing_column(
    payload: Dict[str, Any], error: Any
) -> Optional[Dict[str, Any]]:
    """Return ``payload`` without the column named in ``error``.

    ``None`` is returned when the error is not a missing-column error or the
    named column is not part of the payload, meaning a retry cannot help.
    """

    message = extract_error_message(error, "")
    match = _SCHEMA_CACHE_COLUMN.search(message) or _PG_MISSING_COLUMN.search(message)
    if not match:
        return None
    column = match.group(1).strip()
    if not column or column not in payload:
        return None
    trimmed = {key: value for key, value in payload.items() if key != column}
    logger.warning("Retrying insert without missing column %s", column)
    return trimmed


def user_facing_error(error: Any, fallback: str) -> str:
    """Map a raw backend error to a message suitable for a toast."""
    if isinstance(error, httpx.TransportError):
        return "Network issue detected. Please check your connection and retry."
    message = extract_error_message(error, "").strip()
    if not message:
        return fallback
    normalized = message.lower()
    if (
        "permission denied" in normalized
        or "row-level security" in normalized
        or "rls" in normalized
    ):
        return "You do not have permission to perform this action."
    if "jwt" in normalized or "auth" in normalized or "token" in normalized:
        return "Your session has expired. Please sign in again."
    if "network" in normalized or "fetch" in normalized or "timeout" in normalized:
        return "Network issue detected. Please check your connection and retry."
    if "insufficient credit" in normalized:
        return "This action would exceed the available credit limit."
    return fallback


__all__ = [
    "extract_error_message",
    "error_code",
    "is_schema_compatibility_error",
    "is_permission_error",
    "is_enum_error",
    "is_missing_bucket_error",
    "prune_missing_column",
    "user_facing_error",
]
