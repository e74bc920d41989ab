"""Selects and configures the generation backend from settings."""
import logging
from typing import Optional

from config import Settings
from integrations.anthropic_client import AnthropicProvider
from integrations.llm_provider import GenerationProvider
from integrations.ollama_client import OllamaProvider
from integrations.openai_client import OpenAIProvider

logger = logging.getLogger(__name__)

PROVIDERS: dict[str, type[GenerationProvider]] = {
    OpenAIProvider.name: OpenAIProvider,
    AnthropicProvider.name: AnthropicProvider,
    OllamaProvider.name: OllamaProvider,
}


def build_provider(settings: Settings) -> Optional[GenerationProvider]:
    """
    Returns the configured provider, or None when a keyed backend has no API
    key (generation is then reported as unavailable). Unknown names raise.
    """
    name = (settings.LLM_PROVIDER or "openai").strip().lower()
    cls = PROVIDERS.get(name)
    if cls is None:
        supported = ", ".join(sorted(PROVIDERS))
        raise ValueError(f"unknown LLM provider: {name!r} (supported: {supported})")

    if cls.requires_api_key and not settings.LLM_API_KEY:
        logger.warning("LLM_API_KEY not set, SQL generation disabled")
        return None

    provider = cls(
        api_key=settings.LLM_API_KEY,
        model=settings.LLM_MODEL,
        base_url=settings.LLM_BASE_URL,
        timeout=settings.LLM_TIMEOUT_SECONDS,
        default_max_tokens=settings.LLM_MAX_TOKENS,
    )
    logger.info("LLM provider: %s (model=%s)", provider.name, provider.model)
    return provider
