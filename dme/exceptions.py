"""
Unified exception hierarchy for the service / HTTP / CLI boundary.

Every application exception derives from BaseAppException and carries:
- type:        error category (validation_error / block / parsing_failed / ...)
- code:        stable error code (EMPTY_NOTE / SUBMISSION_ALREADY_SENT / ...)
- message:     human-readable description
- detail:      optional extra payload (dict / list / None)
- http_status: HTTP status code

The extraction engine never raises; it returns ExtractionResult.
raise_for_result() is the single place a failed result becomes an exception.
Views only raise, exception_handler formats the response.
"""

from .extraction.types import ErrorKind


class BaseAppException(Exception):
    """Base of every application exception."""

    type = 'error'
    code = 'UNKNOWN_ERROR'
    http_status = 500

    def __init__(self, message, code=None, detail=None, http_status=None):
        self.message = message
        if code is not None:
            self.code = code
        if http_status is not None:
            self.http_status = http_status
        self.detail = detail
        super().__init__(message)


class ValidationError(BaseAppException):
    """Input rejected. 400."""

    type = 'validation_error'
    code = 'VALIDATION_ERROR'
    http_status = 400


class BlockError(BaseAppException):
    """Operation not allowed in the current state. 409."""

    type = 'block'
    code = 'BUSINESS_BLOCK'
    http_status = 409


class ParsingFailedError(BaseAppException):
    """The note could not be parsed at all. 422."""

    type = 'parsing_failed'
    code = 'NOTE_PARSING_FAILED'
    http_status = 422


class ExtractionFailedError(BaseAppException):
    """A device order could not be built from the parsed note. 422."""

    type = 'extraction_failed'
    code = 'DEVICE_ORDER_EXTRACTION_FAILED'
    http_status = 422


class UpstreamUnavailableError(BaseAppException):
    """
    An upstream service (order API, LLM) failed.

    retryable=True means the Celery task may try again later.
    """

    type = 'upstream_unavailable'
    code = 'UPSTREAM_UNAVAILABLE'
    http_status = 503

    def __init__(self, message, code=None, detail=None, http_status=None, retryable=True):
        super().__init__(message, code=code, detail=detail, http_status=http_status)
        self.retryable = retryable


_KIND_TO_EXCEPTION = {
    ErrorKind.VALIDATION:           ValidationError,
    ErrorKind.PARSING_FAILED:       ParsingFailedError,
    ErrorKind.EXTRACTION_FAILED:    ExtractionFailedError,
    ErrorKind.UPSTREAM_UNAVAILABLE: UpstreamUnavailableError,
}


def raise_for_result(result):
    """
    Raise the exception matching a failed ExtractionResult; no-op on success.

    The first error picks the exception class and message; every error is
    listed in detail['errors'] so callers see the full picture.
    """
    if result.is_success:
        return

    first = result.first_error
    exc_cls = _KIND_TO_EXCEPTION.get(first.kind, ValidationError)
    raise exc_cls(
        message=first.description,
        code=first.code,
        detail={'errors': result.error_dicts()},
    )
