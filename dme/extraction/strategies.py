"""
Extraction strategies and the selector that chains them.

Notes are gated by NoteParser.parse_note() first. The chain is at most two
entries long and is walked once per request:

    [LLMExtractionStrategy]  → one call, any failure falls through
    RuleBasedExtractionStrategy → always last, its result is final

There is no retry loop: a failed LLM attempt is never repeated for the
same note.
"""

import json
import logging
import re
from datetime import datetime
from typing import Any, Callable

from django.utils import timezone

from . import errors, fields
from .parser import NoteParser
from .specifications import format_flow_rate
from .taxonomy import canonical_device_type
from .types import DeviceOrder, ExtractionContext, ExtractionResult, FieldError, PhysicianNote
from .validators import validate_order

logger = logging.getLogger(__name__)

STRATEGY_LLM = "llm"
STRATEGY_RULES = "rules"

SYSTEM_PROMPT = "You are a medical device extraction assistant."

EXTRACTION_PROMPT = """Extract medical device information from the following physician note and return as JSON:

Physician Note:
{note}

Return ONLY a JSON object with these fields (omit null/empty fields):
- device: Device type ("CPAP", "BiPAP", "Oxygen Tank", "Nebulizer", "Wheelchair", "Walker", "Hospital Bed")
- patient_name, dob, diagnosis, ordering_provider
- mask_type: For CPAP/BiPAP ("full face", "nasal")
- pressure: For CPAP/BiPAP ("10 cmH2O")
- add_ons: Array of features (["humidifier", "heated tube"])
- qualifier: Medical qualifiers ("AHI > 20")
- liters: For oxygen flow rate ("2 L")
- delivery_method: For oxygen ("nasal cannula", "oxygen mask", "oxygen tank")
- usage: When used ("sleep and exertion")

Return valid JSON only."""

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_NUMBER_RE = re.compile(r"(\d+(?:\.\d+)?)")
_QUALIFIER_AHI_RE = re.compile(r"AHI\s*>\s*(\d+)", re.IGNORECASE)


class LLMExtractionError(Exception):
    """The LLM path could not produce a valid order. Always recovered by falling back."""

    def __init__(self, error: FieldError):
        self.error = error
        super().__init__(error.description)


# ── Response helpers ───────────────────────────────────────────────────────

def build_prompt(raw_text: str) -> str:
    return EXTRACTION_PROMPT.format(note=raw_text)


def clean_llm_response(content: str) -> str:
    """Strip surrounding markdown code fences (```json ... ```)."""
    return _FENCE_RE.sub("", (content or "").strip()).strip()


def _string(data: dict, key: str) -> str | None:
    value = data.get(key)
    if not isinstance(value, str):
        return None
    value = value.strip().rstrip(",").strip('"').strip()
    return value or None


def parse_llm_payload(content: str) -> dict[str, Any]:
    cleaned = clean_llm_response(content)
    try:
        data = json.loads(cleaned)
    except (json.JSONDecodeError, TypeError) as exc:
        raise LLMExtractionError(errors.llm_invalid_response(f"not valid JSON ({exc})")) from exc
    if not isinstance(data, dict):
        raise LLMExtractionError(errors.llm_invalid_response("expected a JSON object"))
    return data


def specifications_from_payload(data: dict[str, Any]) -> dict:
    specs: dict = {}

    mask_type = _string(data, "mask_type")
    if mask_type:
        specs["mask_type"] = mask_type

    pressure = _string(data, "pressure")
    if pressure:
        number = _NUMBER_RE.search(pressure)
        specs["pressure"] = f"{number.group(1)} cmH2O" if number else pressure

    add_ons = data.get("add_ons")
    if isinstance(add_ons, list):
        cleaned = [item.strip() for item in add_ons if isinstance(item, str) and item.strip()]
        if cleaned:
            specs["add_ons"] = cleaned

    qualifier = _string(data, "qualifier")
    if qualifier:
        ahi = _QUALIFIER_AHI_RE.search(qualifier)
        if ahi:
            specs["ahi"] = f">{ahi.group(1)}"
        else:
            specs["qualifier"] = qualifier

    liters = _string(data, "liters")
    if liters:
        number = _NUMBER_RE.search(liters)
        if number:
            specs["flow_rate"] = format_flow_rate(number.group(1))

    delivery_method = _string(data, "delivery_method")
    if delivery_method:
        specs["delivery_method"] = delivery_method

    usage = _string(data, "usage")
    if usage:
        specs["usage"] = usage

    return specs


# ── Strategies ─────────────────────────────────────────────────────────────

class LLMExtractionStrategy:
    name = STRATEGY_LLM

    def __init__(self, llm_service, clock: Callable[[], datetime] | None = None):
        self.llm_service = llm_service
        self._clock = clock or timezone.now

    def extract(self, raw_text: str, context: ExtractionContext) -> ExtractionResult[DeviceOrder]:
        """One LLM call. Raises LLMExtractionError (or the SDK's own exception) on any failure."""
        logger.info("[%s] Calling LLM for device extraction (%d characters)",
                    context.correlation_id, len(raw_text))
        try:
            response = self.llm_service.complete(SYSTEM_PROMPT, build_prompt(raw_text))
        except Exception as exc:
            raise LLMExtractionError(errors.llm_unavailable(str(exc))) from exc

        logger.info("[%s] LLM responded (model=%s, tokens=%d)",
                    context.correlation_id, response.model, response.total_tokens)

        data = parse_llm_payload(response.content)
        device_label = _string(data, "device")
        if not device_label:
            raise LLMExtractionError(errors.llm_invalid_response("no device in response"))

        order = DeviceOrder(
            device_type=canonical_device_type(device_label),
            ordering_provider=fields.normalize_provider(_string(data, "ordering_provider") or ""),
            patient_name=_string(data, "patient_name") or fields.UNKNOWN,
            date_of_birth=_string(data, "dob") or fields.UNKNOWN,
            diagnosis=_string(data, "diagnosis") or fields.UNKNOWN,
            patient_id=fields.extract_patient_id(raw_text),
            specifications=specifications_from_payload(data),
            ordered_at=self._clock(),
        )

        problems = validate_order(order)
        if problems:
            raise LLMExtractionError(errors.llm_invalid_response(
                "; ".join(p.description for p in problems)
            ))
        return ExtractionResult.ok(order, strategy=self.name)


class RuleBasedExtractionStrategy:
    name = STRATEGY_RULES

    def __init__(self, parser: NoteParser | None = None):
        self.parser = parser or NoteParser()

    def extract(self, raw_text: str, context: ExtractionContext) -> ExtractionResult[DeviceOrder]:
        return self.parser.parse(raw_text, context).with_strategy(self.name)

    def extract_from_note(self, note: PhysicianNote, context: ExtractionContext) -> ExtractionResult[DeviceOrder]:
        """Extract phase only, for a note that already passed parse_note()."""
        return self.parser.extract_device_order(note, context).with_strategy(self.name)


# ── Selector ───────────────────────────────────────────────────────────────

class ExtractionStrategySelector:
    """
    Picks LLM-then-rules or rules-only per request.

    Every note goes through NoteParser.parse_note() first; a note that fails
    it (empty, too short or long, no DME keyword) is returned as an error
    before any strategy runs, so the LLM never sees it.

    With an llm_service: one LLM attempt, any exception → warning + rules.
    Without one: rules only.
    """

    def __init__(self, parser: NoteParser | None = None, llm_service=None,
                 clock: Callable[[], datetime] | None = None):
        self.rules = RuleBasedExtractionStrategy(parser or NoteParser(clock=clock))
        self.llm = LLMExtractionStrategy(llm_service, clock=clock) if llm_service is not None else None

    @property
    def chain(self) -> list:
        return [s for s in (self.llm, self.rules) if s is not None]

    def extract(self, raw_text: str, context: ExtractionContext | None = None) -> ExtractionResult[DeviceOrder]:
        context = context or ExtractionContext()

        gate = self.rules.parser.parse_note(raw_text, context)
        if gate.is_error:
            return gate.with_strategy(STRATEGY_RULES)

        *primary, fallback = self.chain
        for strategy in primary:
            try:
                return strategy.extract(raw_text, context)
            except Exception as exc:
                logger.warning("[%s] %s extraction failed, falling back to rule-based parser: %s",
                               context.correlation_id, strategy.name, exc)

        return fallback.extract_from_note(gate.value, context)


def build_selector(use_llm: bool = True) -> ExtractionStrategySelector:
    """Selector wired from settings; LLM is tried only when configured and use_llm is set."""
    from ..llm.factory import get_configured_llm_service

    llm_service = get_configured_llm_service() if use_llm else None
    return ExtractionStrategySelector(llm_service=llm_service)
