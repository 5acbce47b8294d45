"""
Normalized LLM response.

Every LLMService.complete() returns this; the extraction layer only reads
content and never touches vendor SDK objects.
"""

from dataclasses import dataclass


@dataclass
class LLMResponse:
    content: str       # raw generated text, expected to be a JSON document
    model: str         # model actually used, logged with the extraction
    total_tokens: int = 0
