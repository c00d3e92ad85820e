"""Provider factory and registry for hot-swappable LLM backends."""

from __future__ import annotations

from ...config import LoggingConfig, ProviderConfig, get_api_key
from ...errors import ConfigError
from .base import ExtractionProvider
from .gemini import GeminiProvider
from .openai_compatible import OpenAICompatibleProvider


ProviderBuilder = type[ExtractionProvider]

_PROVIDER_REGISTRY: dict[str, ProviderBuilder] = {
    "openrouter": OpenAICompatibleProvider,
    "openai": OpenAICompatibleProvider,
    "openai_compatible": OpenAICompatibleProvider,
    "openai-compatible": OpenAICompatibleProvider,
    "gemini": GeminiProvider,
}


def available_providers() -> list[str]:
    """Return the set of registered provider names."""
    return sorted(_PROVIDER_REGISTRY.keys())


def create_provider(
    provider_cfg: ProviderConfig,
    log_cfg: LoggingConfig,
) -> ExtractionProvider:
    """Build a provider instance from runtime config.

    Raises:
        ConfigError: For an unknown provider name or a missing API key
    """
    name = provider_cfg.name.lower().strip()
    builder = _PROVIDER_REGISTRY.get(name)
    if builder is None:
        supported = ", ".join(available_providers())
        raise ConfigError(f"Unsupported provider: {provider_cfg.name}. Supported: {supported}")
    api_key = get_api_key(provider_cfg)
    return builder(provider_cfg, api_key, log_cfg)
