"""
BaseLLMService: abstract base for every LLM provider.

Adding a provider:
1. subclass BaseLLMService
2. implement complete() and api_key_env
3. register one line in factory.py

The extraction strategies never know which vendor sits behind the service.
"""

import os
from abc import ABC, abstractmethod

from .types import LLMResponse


class BaseLLMService(ABC):

    # environment variable holding the provider credential
    api_key_env: str = ""

    @classmethod
    def is_configured(cls) -> bool:
        """True when the provider's credential is present in the environment."""
        return bool(os.getenv(cls.api_key_env, "").strip())

    @abstractmethod
    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        """
        Call the LLM once and return a normalized LLMResponse.

        Args:
            system_prompt: role setup ("You are a medical device extraction assistant.")
            user_prompt:   the physician note plus the JSON contract to fill

        Returns:
            LLMResponse(content=generated text, model=model name)

        Raises:
            Exception: any SDK / network / timeout failure. Callers treat every
            exception as "LLM unavailable" and fall back to rule-based parsing.
        """
