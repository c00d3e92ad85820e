"""LLM-based structured extraction."""

from .prompts import build_extraction_prompt
from .providers.base import ExtractionProvider
from .providers.factory import available_providers, create_provider
from .providers.gemini import GeminiProvider
from .providers.openai_compatible import OpenAICompatibleProvider

__all__ = [
    "ExtractionProvider",
    "GeminiProvider",
    "OpenAICompatibleProvider",
    "available_providers",
    "build_extraction_prompt",
    "create_provider",
]
