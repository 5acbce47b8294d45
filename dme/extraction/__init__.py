"""
Note → DeviceOrder extraction engine.

Pure Python on top of Django's clock only; no ORM access. Callers go
through ExtractionStrategySelector (or build_selector()) and get an
ExtractionResult back, never an exception.
"""

from .parser import NoteParser
from .strategies import ExtractionStrategySelector, build_selector
from .types import DeviceOrder, ExtractionContext, ExtractionResult, FieldError, PhysicianNote

__all__ = [
    'DeviceOrder',
    'ExtractionContext',
    'ExtractionResult',
    'ExtractionStrategySelector',
    'FieldError',
    'NoteParser',
    'PhysicianNote',
    'build_selector',
]
