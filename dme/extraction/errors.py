"""
FieldError factories.

Codes are stable strings surfaced verbatim to API / CLI callers.
"""

from .types import ErrorKind, FieldError


def missing_required_field(field_name: str) -> FieldError:
    return FieldError(
        code="Validation.MissingRequiredField",
        description=f"Required field '{field_name}' is missing or empty.",
        field=field_name,
    )


def invalid_format(field_name: str, message: str) -> FieldError:
    return FieldError(
        code="Validation.InvalidFormat",
        description=f"Field '{field_name}' is not in the expected format: {message}",
        field=field_name,
    )


def invalid_range(field_name: str, actual: int, expected: str) -> FieldError:
    return FieldError(
        code="Validation.InvalidRange",
        description=f"Field '{field_name}' with length {actual} is not within the expected range: {expected}",
        field=field_name,
    )


def invalid_device_type(device_type: str) -> FieldError:
    return FieldError(
        code="Validation.InvalidDeviceType",
        description=f"'{device_type}' is not a valid device type.",
        field="DeviceType",
    )


def note_parsing_failed(reason: str) -> FieldError:
    return FieldError(
        code="Validation.NoteParsingFailed",
        description=f"Failed to parse physician note: {reason}",
        kind=ErrorKind.PARSING_FAILED,
    )


def device_order_validation_failed(reason: str) -> FieldError:
    return FieldError(
        code="Validation.DeviceOrderValidationFailed",
        description=f"Device order validation failed: {reason}",
        kind=ErrorKind.EXTRACTION_FAILED,
    )


def llm_unavailable(reason: str) -> FieldError:
    return FieldError(
        code="Llm.Unavailable",
        description=f"LLM extraction unavailable: {reason}",
        kind=ErrorKind.UPSTREAM_UNAVAILABLE,
    )


def llm_invalid_response(reason: str) -> FieldError:
    return FieldError(
        code="Llm.InvalidResponse",
        description=f"LLM returned an unusable response: {reason}",
        kind=ErrorKind.UPSTREAM_UNAVAILABLE,
    )
