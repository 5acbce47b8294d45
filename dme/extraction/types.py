"""
Extraction engine data types.

PhysicianNote / DeviceOrder are the only shapes the rest of the app consumes.
ExtractionResult wraps either a value or a non-empty list of FieldError,
never both; the engine returns it instead of raising.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")

SpecValue = str | list[str] | bool


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    PARSING_FAILED = "parsing_failed"
    EXTRACTION_FAILED = "extraction_failed"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"


@dataclass(frozen=True)
class FieldError:
    code: str                  # e.g. "Validation.InvalidFormat"
    description: str
    field: str = ""            # e.g. "RawText", "Specifications"
    kind: ErrorKind = ErrorKind.VALIDATION

    def as_dict(self) -> dict[str, str]:
        return {
            "code": self.code,
            "field": self.field,
            "message": self.description,
            "kind": self.kind.value,
        }


@dataclass(frozen=True)
class ExtractionContext:
    """
    Per-request context threaded explicitly through every engine call.

    correlation_id  prefixes log lines so one note can be traced end to end.
    source          intake source ("text" / "json" / "cli" ...).
    filename        original file name when the note came from disk.
    """

    correlation_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    source: str = ""
    filename: str = ""


@dataclass(frozen=True)
class PhysicianNote:
    patient_name: str
    patient_id: str
    date_of_birth: str
    diagnosis: str
    prescription: str
    usage: str
    ordering_provider: str
    note_date: datetime
    raw_text: str = field(repr=False)


@dataclass(frozen=True)
class DeviceOrder:
    device_type: str
    ordering_provider: str
    patient_name: str
    date_of_birth: str
    diagnosis: str
    patient_id: str
    specifications: dict[str, SpecValue] | None
    ordered_at: datetime


@dataclass(frozen=True)
class ExtractionResult(Generic[T]):
    value: T | None = None
    errors: list[FieldError] = field(default_factory=list)
    strategy: str | None = None    # "llm" / "rules", set by the selector

    def __post_init__(self):
        if self.value is None and not self.errors:
            raise ValueError("ExtractionResult needs either a value or at least one error.")
        if self.value is not None and self.errors:
            raise ValueError("ExtractionResult cannot carry both a value and errors.")

    @classmethod
    def ok(cls, value: T, strategy: str | None = None) -> "ExtractionResult[T]":
        return cls(value=value, strategy=strategy)

    @classmethod
    def fail(cls, errors: FieldError | list[FieldError]) -> "ExtractionResult[T]":
        if isinstance(errors, FieldError):
            errors = [errors]
        return cls(errors=list(errors))

    @property
    def is_success(self) -> bool:
        return not self.errors

    @property
    def is_error(self) -> bool:
        return bool(self.errors)

    @property
    def first_error(self) -> FieldError:
        if not self.errors:
            raise ValueError("first_error is only available on failed results; check is_error first.")
        return self.errors[0]

    def with_strategy(self, strategy: str) -> "ExtractionResult[T]":
        return ExtractionResult(value=self.value, errors=list(self.errors), strategy=strategy)

    def error_dicts(self) -> list[dict[str, Any]]:
        return [e.as_dict() for e in self.errors]
