"""
Concrete LLM providers.

Adding a provider: add a class here, then register it in factory.py.

Registered providers:
  anthropic → ClaudeService   (claude-sonnet-4-20250514)
  openai    → OpenAIService   (gpt-4o)

Generation settings (max tokens, temperature, timeout) are read from
Django settings and shared by every provider.
"""

import os

from django.conf import settings

from .base import BaseLLMService
from .types import LLMResponse


def _generation_options() -> dict:
    return {
        "max_tokens": getattr(settings, "LLM_MAX_TOKENS", 1000),
        "temperature": getattr(settings, "LLM_TEMPERATURE", 0.1),
        "timeout": getattr(settings, "LLM_TIMEOUT_SECONDS", 30),
    }


# ── ClaudeService ──────────────────────────────────────────────────────────
#
# Anthropic SDK.
# Env: ANTHROPIC_API_KEY
# Model: claude-sonnet-4-20250514 (override with ANTHROPIC_MODEL)

class ClaudeService(BaseLLMService):

    DEFAULT_MODEL = "claude-sonnet-4-20250514"
    api_key_env = "ANTHROPIC_API_KEY"

    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        import anthropic

        api_key = os.getenv(self.api_key_env)
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY is not set")

        options = _generation_options()
        model = os.getenv("ANTHROPIC_MODEL", self.DEFAULT_MODEL)
        client = anthropic.Anthropic(api_key=api_key, timeout=options["timeout"], max_retries=0)

        response = client.messages.create(
            model=model,
            max_tokens=options["max_tokens"],
            temperature=options["temperature"],
            system=system_prompt,
            messages=[{"role": "user", "content": user_prompt}],
        )

        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=response.content[0].text,
            model=model,
            total_tokens=(usage.input_tokens + usage.output_tokens) if usage else 0,
        )


# ── OpenAIService ──────────────────────────────────────────────────────────
#
# OpenAI SDK.
# Env: OPENAI_API_KEY
# Model: gpt-4o (override with OPENAI_MODEL)

class OpenAIService(BaseLLMService):

    DEFAULT_MODEL = "gpt-4o"
    api_key_env = "OPENAI_API_KEY"

    def complete(self, system_prompt: str, user_prompt: str) -> LLMResponse:
        import openai

        api_key = os.getenv(self.api_key_env)
        if not api_key:
            raise ValueError("OPENAI_API_KEY is not set")

        options = _generation_options()
        model = os.getenv("OPENAI_MODEL", self.DEFAULT_MODEL)
        client = openai.OpenAI(api_key=api_key, timeout=options["timeout"], max_retries=0)

        response = client.chat.completions.create(
            model=model,
            max_tokens=options["max_tokens"],
            temperature=options["temperature"],
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user",   "content": user_prompt},
            ],
        )

        usage = getattr(response, "usage", None)
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=model,
            total_tokens=usage.total_tokens if usage else 0,
        )
