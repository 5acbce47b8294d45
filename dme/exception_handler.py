"""
Unified exception handler.

Wired in through DRF's EXCEPTION_HANDLER setting. Clients can treat every
response the same way:
  body has a 'type' field → something went wrong
  no 'type' field         → success

Error body:
{
    "type":    "validation_error" | "block" | "parsing_failed" | ...,
    "code":    "Validation.InvalidFormat",
    "message": "Field 'RawText' is not in the expected format: ...",
    "detail":  { ... }  // optional
}
"""

import logging

from django.http import Http404, JsonResponse
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.views import exception_handler as drf_default_handler

from .exceptions import BaseAppException

logger = logging.getLogger(__name__)


def unified_exception_handler(exc, context):
    """
    DRF exception handler entry point.

    Order:
    1. BaseAppException and subclasses → unified body
    2. DRF ValidationError (serializer.is_valid) → unified body, 400
    3. Http404 → unified body, 404
    4. everything else → DRF default handling
    """

    # --- 1. application exceptions ---
    if isinstance(exc, BaseAppException):
        if exc.http_status >= 500:
            logger.warning('%s %s: %s', exc.type, exc.code, exc.message)
        body = {
            'type': exc.type,
            'code': exc.code,
            'message': exc.message,
        }
        if exc.detail is not None:
            body['detail'] = exc.detail
        return JsonResponse(body, status=exc.http_status)

    # --- 2. DRF ValidationError ---
    if isinstance(exc, DRFValidationError):
        body = {
            'type': 'validation_error',
            'code': 'VALIDATION_ERROR',
            'message': 'Request validation failed',
            'detail': exc.detail,
        }
        return JsonResponse(body, status=400)

    # --- 3. not found ---
    if isinstance(exc, Http404):
        body = {
            'type': 'not_found',
            'code': 'NOT_FOUND',
            'message': str(exc) or 'Not found',
        }
        return JsonResponse(body, status=404)

    # --- 4. everything else ---
    return drf_default_handler(exc, context)
