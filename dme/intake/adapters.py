"""
Concrete adapters.

Adding a source: add a class here, then register it in factory.py.

Registered sources:
  text → PlainTextAdapter   (free-text note, .txt files, text/plain bodies)
  json → JsonNoteAdapter    (JSON wrapper around the note, .json files)
"""

import json
from typing import Any

from .base import BaseIntakeAdapter
from .types import NoteInput


# ── PlainTextAdapter ───────────────────────────────────────────────────────
#
# Example:
#   Patient Name: Harold Finch
#   DOB: 04/12/1952
#   Diagnosis: COPD
#   Prescription: Requires a portable oxygen tank delivering 2 L per minute.
#   Usage: During sleep and exertion.
#   Ordering Physician: Dr. Cuddy

class PlainTextAdapter(BaseIntakeAdapter):
    source = "text"

    def parse(self) -> Any:
        self._parsed = self._decode()
        return self._parsed

    def transform(self) -> NoteInput:
        return NoteInput(
            text=self._parsed.strip(),
            source=self.source,
            filename=self._filename,
            raw_payload=self._parsed,
        )


# ── JsonNoteAdapter ────────────────────────────────────────────────────────
#
# Example:
# {
#   "note": "Patient needs a CPAP with full face mask and humidifier. AHI > 20. Ordered by Dr. Cameron."
# }
#
# The note may sit under any of WRAPPER_KEYS; the first string value wins.
# Anything else (no known key, a list, malformed JSON) is treated as the
# note text itself.

class JsonNoteAdapter(BaseIntakeAdapter):
    source = "json"

    WRAPPER_KEYS = ("note", "physician_note", "text", "content")

    def parse(self) -> Any:
        content = self._decode()
        self._raw_str = content
        try:
            self._parsed = json.loads(content)
        except json.JSONDecodeError:
            self._parsed = None
        return self._parsed

    def _unwrap(self) -> str:
        if isinstance(self._parsed, dict):
            for key in self.WRAPPER_KEYS:
                value = self._parsed.get(key)
                if isinstance(value, str):
                    return value
        return self._raw_str

    def transform(self) -> NoteInput:
        return NoteInput(
            text=self._unwrap().strip(),
            source=self.source,
            filename=self._filename,
            raw_payload=self._parsed if self._parsed is not None else self._raw_str,
        )
