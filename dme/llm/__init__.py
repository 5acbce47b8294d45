from .factory import get_configured_llm_service, get_llm_service
from .types import LLMResponse

__all__ = ['LLMResponse', 'get_configured_llm_service', 'get_llm_service']
