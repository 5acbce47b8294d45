"""
Factory: return the LLMService selected by settings.LLM_PROVIDER.

Adding a provider:
  1. create XxxService(BaseLLMService) in services.py
  2. add one line to the registry below
  No extraction code changes.
"""

import logging

from django.conf import settings

from .base import BaseLLMService

logger = logging.getLogger(__name__)


def _build_registry() -> dict[str, type[BaseLLMService]]:
    # deferred import so the SDKs are not touched before Django is configured
    from .services import ClaudeService, OpenAIService

    return {
        "anthropic": ClaudeService,
        "openai":    OpenAIService,
    }


def get_llm_service() -> BaseLLMService:
    """
    Instantiate the provider named by settings.LLM_PROVIDER (default "anthropic").

    Raises:
        ValueError: unknown LLM_PROVIDER
    """
    provider = getattr(settings, "LLM_PROVIDER", "anthropic")
    registry = _build_registry()
    service_cls = registry.get(provider)

    if service_cls is None:
        raise ValueError(
            f"Unknown LLM_PROVIDER: {provider!r}. "
            f"Known providers: {list(registry.keys())}"
        )

    return service_cls()


def get_configured_llm_service() -> BaseLLMService | None:
    """
    The LLM service to try first, or None when the LLM path should be skipped.

    Skipped when LLM_ENABLED is off, the provider is unknown, or its
    credential is missing.
    """
    if not getattr(settings, "LLM_ENABLED", True):
        return None

    try:
        service = get_llm_service()
    except ValueError as exc:
        logger.warning("LLM disabled: %s", exc)
        return None

    if not service.is_configured():
        logger.info("No credential for LLM provider %s; using rule-based extraction only",
                    getattr(settings, "LLM_PROVIDER", "anthropic"))
        return None

    return service
