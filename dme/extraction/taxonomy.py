"""
Device taxonomy: keyword / alias table → canonical device type.

DEVICE_KEYWORDS is an ordered tuple, not a dict lookup: when a note mentions
several devices the first entry in this list wins. Position or frequency in
the note text is never considered.
"""

UNKNOWN_DEVICE = "Unknown"

# ── Priority list ───────────────────────────────────────────────────────────
DEVICE_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("CPAP",         ("cpap", "continuous positive airway pressure")),
    ("BiPAP",        ("bipap", "bilevel", "bi-level")),
    ("Oxygen",       ("oxygen", "o2", "oxygen tank", "oxygen concentrator")),
    ("Nebulizer",    ("nebulizer", "breathing treatment", "albuterol")),
    ("Wheelchair",   ("wheelchair", "mobility device")),
    ("Walker",       ("walker", "walking aid", "rollator")),
    ("Hospital Bed", ("hospital bed", "adjustable bed")),
)

ALLOWED_DEVICE_TYPES: tuple[str, ...] = tuple(name for name, _ in DEVICE_KEYWORDS)

# Generic terms that mark a DME note without naming a device
GENERIC_DME_TERMS: tuple[str, ...] = (
    "breathing", "sleep apnea", "respiratory", "mobility", "DME",
    "durable medical equipment",
)

# Note validation vocabulary: every device name and alias, plus the generic terms
DME_KEYWORDS: tuple[str, ...] = tuple(dict.fromkeys(
    [name.lower() for name in ALLOWED_DEVICE_TYPES]
    + [alias for _, aliases in DEVICE_KEYWORDS for alias in aliases]
    + [term.lower() for term in GENERIC_DME_TERMS]
))


def detect_device_type(text: str) -> str:
    """Return the first device type whose keyword occurs in text (case-insensitive)."""
    lowered = (text or "").lower()
    for device_type, keywords in DEVICE_KEYWORDS:
        if any(keyword in lowered for keyword in keywords):
            return device_type
    return UNKNOWN_DEVICE


def is_allowed_device_type(device_type: str | None) -> bool:
    if not device_type or not device_type.strip():
        return False
    return device_type.lower() in {name.lower() for name in ALLOWED_DEVICE_TYPES}


def canonical_device_type(label: str | None) -> str:
    """
    Map an external device label onto the taxonomy.

    Exact (case-insensitive) names win, then keyword detection:
    "oxygen tank" → "Oxygen", "bipap" → "BiPAP", "Ventilator" → "Unknown".
    """
    label = (label or "").strip()
    if not label:
        return UNKNOWN_DEVICE
    for name in ALLOWED_DEVICE_TYPES:
        if name.lower() == label.lower():
            return name
    return detect_device_type(label)


def mentions_dme(text: str) -> bool:
    lowered = (text or "").lower()
    return any(keyword.lower() in lowered for keyword in DME_KEYWORDS)
