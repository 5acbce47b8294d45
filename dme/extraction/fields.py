"""
Field extractors: raw note text → single string field.

Every extractor is a pure function with a fixed fallback value, so a note
missing a field still produces a complete PhysicianNote; validators decide
afterwards whether the result is acceptable.
"""

import hashlib
import re
from datetime import datetime

from django.utils import timezone

UNKNOWN = "Unknown"
UNKNOWN_PROVIDER = "Dr. Unknown"
PROVIDER_PREFIX = "Dr."

PATIENT_NAME_RE = re.compile(r"(?:Patient Name|Patient):\s*(.+)", re.IGNORECASE)
PATIENT_ID_RE = re.compile(r"\b(?:Patient ID|ID):\s*(.+)", re.IGNORECASE)
DOB_RE = re.compile(r"DOB:\s*(.+)", re.IGNORECASE)
DIAGNOSIS_RE = re.compile(r"Diagnosis:\s*(.+)", re.IGNORECASE)
PRESCRIPTION_RE = re.compile(r"Prescription:\s*(.+)", re.IGNORECASE)
USAGE_RE = re.compile(r"Usage:\s*(.+)", re.IGNORECASE)

# Tried in order; first non-empty capture wins.
PROVIDER_PATTERNS = (
    re.compile(r"Ordered by\s+(.+?)\.?$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"Ordering Physician:\s*(.+?)\.?$", re.IGNORECASE | re.MULTILINE),
    # "Dr." + capitalized words: "Dr. Cameron saw the patient" → "Cameron"
    re.compile(r"\b[Dd][Rr]\.[ \t]*([A-Z][A-Za-z'-]*(?:[ \t]+[A-Z][A-Za-z'-]*)*)"),
    re.compile(r"Provider:\s*(.+?)\.?$", re.IGNORECASE | re.MULTILINE),
)

_DATE_TOKEN = r"(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})"
NOTE_DATE_PATTERNS = (
    re.compile(r"Date:\s*" + _DATE_TOKEN, re.IGNORECASE),
    re.compile(_DATE_TOKEN),
)
NOTE_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y")


def _first_group(pattern: re.Pattern, text: str) -> str | None:
    match = pattern.search(text or "")
    if not match:
        return None
    return match.group(1).strip() or None


def extract_patient_name(text: str) -> str:
    return _first_group(PATIENT_NAME_RE, text) or UNKNOWN


def extract_patient_id(text: str) -> str:
    """
    Explicit "Patient ID:" / "ID:" line, else a stable id derived from the text.

    Derived ids are the first 8 hex digits of the note's SHA-256, so the same
    note always yields the same order.
    """
    found = _first_group(PATIENT_ID_RE, text)
    if found:
        return found
    return hashlib.sha256((text or "").encode("utf-8")).hexdigest()[:8]


def extract_date_of_birth(text: str) -> str:
    return _first_group(DOB_RE, text) or UNKNOWN


def extract_diagnosis(text: str) -> str:
    return _first_group(DIAGNOSIS_RE, text) or UNKNOWN


def extract_prescription(text: str) -> str:
    return _first_group(PRESCRIPTION_RE, text) or text


def extract_usage(text: str) -> str:
    return _first_group(USAGE_RE, text) or ""


def normalize_provider(raw: str) -> str:
    """Trim, drop trailing periods, ensure a single leading "Dr."."""
    provider = (raw or "").strip().rstrip(".").strip()
    if not provider:
        return UNKNOWN_PROVIDER
    if provider.startswith(PROVIDER_PREFIX):
        return provider
    return f"{PROVIDER_PREFIX} {provider}"


def extract_ordering_provider(text: str) -> str:
    for pattern in PROVIDER_PATTERNS:
        match = pattern.search(text or "")
        if not match:
            continue
        candidate = match.group(1).strip().rstrip(".").strip()
        if candidate:
            return normalize_provider(candidate)
    return UNKNOWN_PROVIDER


def parse_date_token(token: str) -> datetime | None:
    normalized = token.replace("-", "/")
    for fmt in NOTE_DATE_FORMATS:
        try:
            return datetime.strptime(normalized, fmt)
        except ValueError:
            continue
    return None


def extract_note_date(text: str, now: datetime | None = None) -> datetime:
    for pattern in NOTE_DATE_PATTERNS:
        match = pattern.search(text or "")
        if not match:
            continue
        parsed = parse_date_token(match.group(1))
        if parsed is not None:
            return timezone.make_aware(parsed)
    return now or timezone.now()
