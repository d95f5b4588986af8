"""Custom exception handler for the console's REST API."""

import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .services.supabase_client import BACKEND_ERRORS
from .services.supabase_errors import user_facing_error

logger = logging.getLogger(__name__)


def custom_exception_handler(exc, context):
    """Handle Django ValidationError as a REST framework validation error.

    Backend errors that escape a view become a 502 with a safe message. For
    other exceptions, follow DRF's default behavior.
    """
    if isinstance(exc, DjangoValidationError):
        exc = DRFValidationError(detail=exc.messages)

    if isinstance(exc, Http404):
        return Response({"detail": "Not found.", "status_code": 404}, status=404)

    if isinstance(exc, BACKEND_ERRORS):
        logger.error("Backend error in %s: %s", context.get("view"), exc)
        detail = user_facing_error(exc, "The backend request failed.")
        return Response({"detail": detail, "status_code": 502}, status=502)

    response = exception_handler(exc, context)
    if response is not None:
        if not isinstance(response.data, dict):
            response.data = {"detail": response.data}
        response.data["status_code"] = response.status_code
    return response
