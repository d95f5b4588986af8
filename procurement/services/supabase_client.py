import logging
import os
from typing import Any, Dict, Optional

import httpx
from django.conf import settings
from postgrest.exceptions import APIError
from storage3.utils import StorageException
from supabase import Client, SupabaseException, create_client

from .supabase_errors import prune_missing_column

logger = logging.getLogger(__name__)

# Errors raised by table/RPC calls, storage calls, client creation and transport.
BACKEND_ERRORS = (APIError, StorageException, SupabaseException, httpx.HTTPError)

_client: Client | None = None


def get_supabase_client() -> Optional[Client]:
    """Return a cached Supabase client if available.

    The client is initialised from the ``SUPABASE_URL`` and ``SUPABASE_KEY``
    settings, falling back to the environment variables of the same name. If
    configuration is missing or the connection fails, ``None`` is returned and
    the error is logged. The initialisation is performed once and the
    resulting client is cached for subsequent calls.
    """

    global _client
    if _client is not None:
        return _client

    url = getattr(settings, "SUPABASE_URL", "") or os.getenv("SUPABASE_URL")
    key = getattr(settings, "SUPABASE_KEY", "") or os.getenv("SUPABASE_KEY")
    if not url or not key:
        logger.warning("Supabase is not configured")
        return None
    try:  # pragma: no cover - network interaction
        _client = create_client(url, key)
    except SupabaseException:  # pragma: no cover - network interaction
        logger.exception("Failed to initialise Supabase client")
        return None
    return _client


def require_client() -> Client:
    """Return the Supabase client or raise when it is not configured."""
    client = get_supabase_client()
    if client is None:
        raise SupabaseException("Supabase is not configured")
    return client


def insert_pruning_missing_columns(
    client: Client, table: str, payload: Dict[str, Any]
) -> Dict[str, Any]:
    """Insert ``payload`` into ``table`` and return the stored row.

    Columns the deployed schema does not have are dropped one at a time and
    the insert retried. Any other error is raised.
    """

    attempt = dict(payload)
    while attempt:
        try:
            resp = client.table(table).insert(attempt).execute()
        except APIError as exc:
            trimmed = prune_missing_column(attempt, exc)
            if trimmed is None:
                raise
            attempt = trimmed
            continue
        rows = resp.data or []
        if not rows:
            raise APIError({"message": f"Insert into {table} returned no row"})
        return rows[0]
    raise APIError({"message": f"No compatible columns available for {table}"})


__all__ = [
    "APIError",
    "insert_pruning_missing_columns",
    "BACKEND_ERRORS",
    "StorageException",
    "SupabaseException",
    "get_supabase_client",
    "require_client",
]
