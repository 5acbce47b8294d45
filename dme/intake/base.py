"""
BaseIntakeAdapter: abstract base for every note source.

Adding a source:
1. subclass BaseIntakeAdapter
2. implement parse() and transform()
3. register one line in factory.py

Extraction code does not change.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..exceptions import ValidationError
from .types import NoteInput


class BaseIntakeAdapter(ABC):
    """
    Three-step pipeline: parse → transform → validate

    Subclasses implement parse() and transform(); validate() rejects empty
    notes and may be extended with super().
    """

    # registry key in factory.py
    source: str = ""

    def __init__(self, raw_body: bytes | str, content_type: str = "", filename: str = ""):
        self._raw_body = raw_body
        self._content_type = content_type
        self._filename = filename

    def _decode(self) -> str:
        """bytes → str, UTF-8 with an optional BOM."""
        body = self._raw_body
        if body is None:
            return ""
        if isinstance(body, bytes):
            return body.decode("utf-8-sig")
        return body.lstrip("\ufeff")

    # ── Required ───────────────────────────────────────────────────────────

    @abstractmethod
    def parse(self) -> Any:
        """
        Raw body (bytes / str) → intermediate structure.
        Store it on self._parsed for transform().
        """

    @abstractmethod
    def transform(self) -> NoteInput:
        """
        self._parsed → NoteInput.
        The original body must be kept in NoteInput.raw_payload.
        """

    # ── Overridable ────────────────────────────────────────────────────────

    def validate(self, note: NoteInput) -> None:
        if not (note.text or "").strip():
            raise ValidationError(
                message="Physician note is empty.",
                code="EMPTY_NOTE",
                detail={"source": self.source, "filename": self._filename or None},
            )

    # ── Entry point ────────────────────────────────────────────────────────

    def process(self) -> NoteInput:
        """parse → transform → validate, returns a non-empty NoteInput."""
        self.parse()
        note = self.transform()
        self.validate(note)
        return note
