from .factory import SUPPORTED_EXTENSIONS, get_adapter, source_for
from .types import NoteInput

__all__ = ['SUPPORTED_EXTENSIONS', 'NoteInput', 'get_adapter', 'source_for']
