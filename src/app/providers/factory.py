"""
Provider 생성: config(ai.provider, ai.generation) → GenerationProvider
"""

import logging
from typing import Any

from src.domain.constants import (
    DEFAULT_CLAUDE_MODEL,
    DEFAULT_GEMINI_MODEL,
    DEFAULT_MAX_TOKENS,
    DEFAULT_PROVIDER,
)
from src.domain.errors import ErrorCodes

from .anthropic import ClaudeHtmlProvider
from .base import GenerationProvider, ProviderError
from .gemini import GeminiHtmlProvider

logger = logging.getLogger(__name__)


def create_provider(config: dict[str, Any]) -> GenerationProvider:
    """
    config 기반 Provider 생성.

    Args:
        config: default.yaml 내용

    Returns:
        GenerationProvider

    Raises:
        ProviderError: 알 수 없는 provider 이름
    """
    ai_config = config.get("ai", {})
    name = str(ai_config.get("provider", DEFAULT_PROVIDER)).lower()
    gen_config = ai_config.get("generation", {})

    max_tokens = int(gen_config.get("max_tokens", DEFAULT_MAX_TOKENS))
    temperature = gen_config.get("temperature")

    if name == "gemini":
        provider: GenerationProvider = GeminiHtmlProvider(
            model=gen_config.get("model", DEFAULT_GEMINI_MODEL),
            max_tokens=max_tokens,
            temperature=temperature,
        )
    elif name == "anthropic":
        provider = ClaudeHtmlProvider(
            model=gen_config.get("model", DEFAULT_CLAUDE_MODEL),
            max_tokens=max_tokens,
            temperature=temperature,
        )
    else:
        raise ProviderError(
            ErrorCodes.UNKNOWN_PROVIDER,
            f"Unknown AI provider: {name}",
            provider=name,
        )

    logger.info(f"Generation provider: {name} ({provider.model})")
    return provider
