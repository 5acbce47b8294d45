"""
Device-specific specification extraction.

Each device type owns one routine; routines never look at each other's keys.
To support a new device:
  1. write extract_<device>(text) -> dict
  2. add one line to SPECIFICATION_EXTRACTORS
  3. add its keywords to taxonomy.DEVICE_KEYWORDS
Nothing else changes.
"""

import re
from typing import Callable

from .types import SpecValue

Specifications = dict[str, SpecValue]

PRESSURE_RE = re.compile(r"(\d+(?:\.\d+)?)\s*(?:cmH2O|cm|pressure)", re.IGNORECASE)
AHI_RE = re.compile(r"AHI\s*>\s*(\d+)", re.IGNORECASE)
CPAP_ADD_ONS = ("humidifier", "heated tube")

FLOW_RATE_PATTERNS = (
    re.compile(r"(\d+(?:\.\d+)?)\s*L\s*per\s*minute", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*LPM", re.IGNORECASE),
    re.compile(r"(\d+(?:\.\d+)?)\s*L/min", re.IGNORECASE),
    re.compile(r"delivering\s*(\d+(?:\.\d+)?)\s*L", re.IGNORECASE),
)
# literal → delivery method, first hit wins
OXYGEN_DELIVERY = (
    ("cannula", "nasal cannula"),
    ("mask",    "oxygen mask"),
    ("tank",    "oxygen tank"),
)
OXYGEN_USAGE = ("sleep", "exertion", "continuous")

NEBULIZER_FREQUENCY_RE = re.compile(r"(\d+)\s*times?\s*(?:per\s*)?day", re.IGNORECASE)


def _has(text: str, *literals: str) -> bool:
    lowered = text.lower()
    return any(literal.lower() in lowered for literal in literals)


def format_flow_rate(liters: str) -> str:
    return f"{liters} L/min"


# ── CPAP / BiPAP ───────────────────────────────────────────────────────────

def extract_cpap(text: str) -> Specifications:
    specs: Specifications = {}

    if _has(text, "full face"):
        specs["mask_type"] = "full face"
    elif _has(text, "nasal"):
        specs["mask_type"] = "nasal"

    pressure = PRESSURE_RE.search(text)
    if pressure:
        specs["pressure"] = f"{pressure.group(1)} cmH2O"

    add_ons = [add_on for add_on in CPAP_ADD_ONS if _has(text, add_on)]
    if add_ons:
        specs["add_ons"] = add_ons

    ahi = AHI_RE.search(text)
    if ahi:
        specs["ahi"] = f">{ahi.group(1)}"

    return specs


# ── Oxygen ─────────────────────────────────────────────────────────────────

def extract_flow_rate(text: str) -> str | None:
    for pattern in FLOW_RATE_PATTERNS:
        match = pattern.search(text)
        if match:
            return format_flow_rate(match.group(1))
    return None


def extract_oxygen(text: str) -> Specifications:
    specs: Specifications = {}

    flow_rate = extract_flow_rate(text)
    if flow_rate:
        specs["flow_rate"] = flow_rate

    for literal, method in OXYGEN_DELIVERY:
        if _has(text, literal):
            specs["delivery_method"] = method
            break

    usage = [term for term in OXYGEN_USAGE if _has(text, term)]
    if usage:
        specs["usage"] = " and ".join(usage)

    return specs


# ── Nebulizer ──────────────────────────────────────────────────────────────

def extract_nebulizer(text: str) -> Specifications:
    specs: Specifications = {}
    if _has(text, "albuterol"):
        specs["medication"] = "albuterol"

    frequency = NEBULIZER_FREQUENCY_RE.search(text)
    if frequency:
        specs["frequency"] = f"{frequency.group(1)} times per day"
    return specs


# ── Mobility / beds ────────────────────────────────────────────────────────

def extract_wheelchair(text: str) -> Specifications:
    specs: Specifications = {}
    if _has(text, "manual"):
        specs["type"] = "manual"
    elif _has(text, "electric", "powered"):
        specs["type"] = "electric"

    if _has(text, "transport"):
        specs["category"] = "transport"
    return specs


def extract_walker(text: str) -> Specifications:
    specs: Specifications = {}
    if _has(text, "wheeled", "rollator"):
        specs["type"] = "wheeled"
    elif _has(text, "standard"):
        specs["type"] = "standard"
    return specs


def extract_hospital_bed(text: str) -> Specifications:
    specs: Specifications = {}
    if _has(text, "electric", "adjustable"):
        specs["type"] = "electric adjustable"
    if _has(text, "mattress"):
        specs["includes_mattress"] = True
    return specs


# ── Registry ───────────────────────────────────────────────────────────────
SPECIFICATION_EXTRACTORS: dict[str, Callable[[str], Specifications]] = {
    "CPAP":         extract_cpap,
    "BiPAP":        extract_cpap,
    "Oxygen":       extract_oxygen,
    "Nebulizer":    extract_nebulizer,
    "Wheelchair":   extract_wheelchair,
    "Walker":       extract_walker,
    "Hospital Bed": extract_hospital_bed,
}


def extract_specifications(text: str, device_type: str) -> Specifications:
    """Specifications for device_type; {} for "Unknown" or unregistered types."""
    extractor = SPECIFICATION_EXTRACTORS.get(device_type)
    if extractor is None:
        return {}
    return extractor(text or "")
