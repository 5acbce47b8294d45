"""
NoteInput dataclass: the one shape the extraction pipeline accepts.

Every adapter's transform() returns this structure. services.py only
consumes NoteInput and never looks at the raw request body or file.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class NoteInput:
    """
    A physician note ready for extraction.

    raw_payload  original body (str / dict), kept for troubleshooting only.
    source       adapter that produced it ("text" / "json").
    filename     original file name when the note came from disk.
    """

    text: str
    source: str = ""
    filename: str = ""
    raw_payload: Any = field(default=None, repr=False)
