"""
NoteParser: rule-based two-phase extraction.

    parse_note():           raw text → PhysicianNote   (fields + note validation)
    extract_device_order(): PhysicianNote → DeviceOrder (taxonomy + specs + order validation)

parse() runs both phases in order and stops at the first failed phase.
Neither phase raises: unexpected faults become a single error result.
"""

import logging
from datetime import datetime
from typing import Callable

from django.utils import timezone

from . import errors, fields
from .specifications import extract_specifications
from .taxonomy import detect_device_type
from .types import DeviceOrder, ExtractionContext, ExtractionResult, PhysicianNote
from .validators import validate_note, validate_order

logger = logging.getLogger(__name__)


class NoteParser:

    def __init__(self, clock: Callable[[], datetime] | None = None):
        self._clock = clock or timezone.now

    # ── Phase 1 ────────────────────────────────────────────────────────────

    def parse_note(self, raw_text: str, context: ExtractionContext | None = None) -> ExtractionResult[PhysicianNote]:
        context = context or ExtractionContext()
        try:
            logger.info("[%s] Parsing physician note (%d characters)",
                        context.correlation_id, len(raw_text or ""))

            if raw_text is None or not raw_text.strip():
                return ExtractionResult.fail(errors.missing_required_field("RawText"))

            note = PhysicianNote(
                patient_name=fields.extract_patient_name(raw_text),
                patient_id=fields.extract_patient_id(raw_text),
                date_of_birth=fields.extract_date_of_birth(raw_text),
                diagnosis=fields.extract_diagnosis(raw_text),
                prescription=fields.extract_prescription(raw_text),
                usage=fields.extract_usage(raw_text),
                ordering_provider=fields.extract_ordering_provider(raw_text),
                note_date=fields.extract_note_date(raw_text, now=self._clock()),
                raw_text=raw_text,
            )

            problems = validate_note(note)
            if problems:
                logger.warning("[%s] Note validation failed: %s",
                               context.correlation_id, "; ".join(p.description for p in problems))
                return ExtractionResult.fail(problems)

            logger.info("[%s] Parsed physician note for patient %s",
                        context.correlation_id, note.patient_name)
            return ExtractionResult.ok(note)

        except Exception as exc:
            logger.error("[%s] Error parsing physician note", context.correlation_id, exc_info=True)
            return ExtractionResult.fail(errors.note_parsing_failed(str(exc)))

    # ── Phase 2 ────────────────────────────────────────────────────────────

    def extract_device_order(self, note: PhysicianNote,
                             context: ExtractionContext | None = None) -> ExtractionResult[DeviceOrder]:
        context = context or ExtractionContext()
        try:
            device_type = detect_device_type(note.raw_text)
            specifications = extract_specifications(note.raw_text, device_type)

            order = DeviceOrder(
                device_type=device_type,
                ordering_provider=note.ordering_provider,
                patient_name=note.patient_name,
                date_of_birth=note.date_of_birth,
                diagnosis=note.diagnosis,
                patient_id=note.patient_id,
                specifications=specifications,
                ordered_at=self._clock(),
            )

            problems = validate_order(order)
            if problems:
                logger.warning("[%s] Device order validation failed: %s",
                               context.correlation_id, "; ".join(p.description for p in problems))
                return ExtractionResult.fail(problems)

            logger.info("[%s] Extracted device order: %s for patient %s",
                        context.correlation_id, device_type, note.patient_name)
            return ExtractionResult.ok(order)

        except Exception as exc:
            logger.error("[%s] Error extracting device order", context.correlation_id, exc_info=True)
            return ExtractionResult.fail(errors.device_order_validation_failed(str(exc)))

    # ── Both phases ────────────────────────────────────────────────────────

    def parse(self, raw_text: str, context: ExtractionContext | None = None) -> ExtractionResult[DeviceOrder]:
        context = context or ExtractionContext()
        note_result = self.parse_note(raw_text, context)
        if note_result.is_error:
            return ExtractionResult.fail(note_result.errors)
        return self.extract_device_order(note_result.value, context)
