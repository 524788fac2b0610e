"""
AI Provider Abstraction.

모델 교체 가능하게 설계.
모델명은 config만 SSOT.
"""

from .anthropic import ClaudeHtmlProvider
from .base import GenerationProvider, ProviderError, build_user_prompt
from .factory import create_provider
from .gemini import GeminiHtmlProvider

__all__ = [
    "GenerationProvider",
    "ProviderError",
    "build_user_prompt",
    "ClaudeHtmlProvider",
    "GeminiHtmlProvider",
    "create_provider",
]
