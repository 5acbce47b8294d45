"""
Validation gates for PhysicianNote and DeviceOrder.

Validators never raise and never mutate: they return a list of FieldError,
empty when the record is acceptable. The parser decides what a non-empty
list means for the current phase.
"""

from . import errors
from .taxonomy import is_allowed_device_type, mentions_dme
from .types import DeviceOrder, FieldError, PhysicianNote

RAW_TEXT_MIN_LENGTH = 10
RAW_TEXT_MAX_LENGTH = 10_000
PATIENT_ID_MAX_LENGTH = 50
NAME_MAX_LENGTH = 100

# device type (upper) → (required specification keys, message)
REQUIRED_SPECIFICATIONS: dict[str, tuple[tuple[str, ...], str]] = {
    "CPAP":   (("mask_type", "pressure"), "CPAP orders must include mask type and pressure settings"),
    "BIPAP":  (("mask_type", "pressure"), "BiPAP orders must include mask type and pressure settings"),
    "OXYGEN": (("flow_rate", "delivery_method"), "Oxygen orders must include flow rate and delivery method"),
}


def _check_length(value: str | None, field_name: str, label: str,
                  min_length: int, max_length: int) -> list[FieldError]:
    if value is None or not value.strip():
        return [errors.invalid_format(field_name, f"{label} is required")]
    if not min_length <= len(value) <= max_length:
        return [errors.invalid_range(
            field_name, len(value), f"{label} must be between {min_length} and {max_length} characters",
        )]
    return []


def validate_note(note: PhysicianNote) -> list[FieldError]:
    found: list[FieldError] = []

    raw_text = note.raw_text or ""
    if not raw_text.strip():
        found.append(errors.invalid_format("RawText", "Note text is required"))
    else:
        if len(raw_text) < RAW_TEXT_MIN_LENGTH:
            found.append(errors.invalid_format(
                "RawText", f"Note text must be at least {RAW_TEXT_MIN_LENGTH} characters long",
            ))
        elif len(raw_text) > RAW_TEXT_MAX_LENGTH:
            found.append(errors.invalid_format(
                "RawText", f"Note text cannot exceed {RAW_TEXT_MAX_LENGTH:,} characters",
            ))
        if not mentions_dme(raw_text):
            found.append(errors.invalid_format(
                "RawText", "Note must contain reference to a medical device (CPAP, BiPAP, Oxygen, etc.)",
            ))

    found += _check_length(note.patient_id, "PatientId", "Patient ID", 1, PATIENT_ID_MAX_LENGTH)
    found += _check_length(note.ordering_provider, "OrderingProvider", "Ordering provider", 2, NAME_MAX_LENGTH)
    found += _check_length(note.patient_name, "PatientName", "Patient name", 2, NAME_MAX_LENGTH)
    return found


def validate_order(order: DeviceOrder) -> list[FieldError]:
    found: list[FieldError] = []

    device_type = order.device_type or ""
    if not device_type.strip():
        found.append(errors.invalid_format("DeviceType", "Device type is required"))
    elif not is_allowed_device_type(device_type):
        found.append(errors.invalid_device_type(device_type))

    found += _check_length(order.ordering_provider, "OrderingProvider", "Provider", 1, NAME_MAX_LENGTH)
    found += _check_length(order.patient_id, "PatientId", "Patient ID", 1, PATIENT_ID_MAX_LENGTH)

    if order.specifications is None:
        found.append(errors.invalid_format("Specifications", "Specifications are required"))
        return found

    required = REQUIRED_SPECIFICATIONS.get(device_type.upper())
    if required:
        keys, message = required
        if not all(key in order.specifications for key in keys):
            found.append(errors.invalid_format("Specifications", message))

    return found
