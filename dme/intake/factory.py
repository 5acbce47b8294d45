"""
Factory: source string → adapter instance.

Adding a source:
  1. create the adapter class in adapters.py
  2. add one line to the registry below
  No extraction code changes.
"""

import os

from ..exceptions import ValidationError
from .base import BaseIntakeAdapter

SUPPORTED_EXTENSIONS = (".txt", ".json")


# ── Registry ────────────────────────────────────────────────────────────────
# key: source string (?source= query param, or picked by source_for())
# value: adapter class (not instantiated)
def _build_registry() -> dict[str, type[BaseIntakeAdapter]]:
    # deferred import to avoid a circular import through base.py
    from .adapters import JsonNoteAdapter, PlainTextAdapter

    return {
        "text": PlainTextAdapter,
        "json": JsonNoteAdapter,
    }


def source_for(content_type: str = "", filename: str = "") -> str:
    """
    Pick a source from the file extension, else the Content-Type.

    Raises:
        ValidationError: filename with an extension outside SUPPORTED_EXTENSIONS
    """
    if filename:
        extension = os.path.splitext(filename)[1].lower()
        if extension == ".json":
            return "json"
        if extension and extension not in SUPPORTED_EXTENSIONS:
            raise ValidationError(
                message=f"Unsupported file type: {extension!r}.",
                code="UNSUPPORTED_EXTENSION",
                detail={"filename": filename, "supported": list(SUPPORTED_EXTENSIONS)},
            )
        if extension:
            return "text"

    if "application/json" in (content_type or "").lower():
        return "json"
    return "text"


def get_adapter(source: str, raw_body: bytes | str, content_type: str = "",
                filename: str = "") -> BaseIntakeAdapter:
    """
    Return an instantiated adapter for source.

    Args:
        source:       "text" / "json"
        raw_body:     request body or file content (bytes or str)
        content_type: HTTP Content-Type, informational
        filename:     original file name, carried into NoteInput

    Raises:
        ValidationError: unknown source
    """
    registry = _build_registry()
    adapter_cls = registry.get(source)

    if adapter_cls is None:
        raise ValidationError(
            message=f"Unknown note source: {source!r}.",
            code="UNKNOWN_SOURCE",
            detail={"known_sources": list(registry.keys())},
        )

    return adapter_cls(raw_body=raw_body, content_type=content_type, filename=filename)
