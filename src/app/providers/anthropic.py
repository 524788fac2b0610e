"""
Anthropic (Claude) Generation Provider.

- ai.provider: anthropic 일 때 사용
- messages.stream → text_stream 청크를 그대로 전달
- 자동 재시도 없음 (실패는 사용자에게 그대로 보고)
"""

import logging
import os
from collections.abc import AsyncIterator, Sequence
from typing import Any

from src.domain.constants import DEFAULT_CLAUDE_MODEL, DEFAULT_MAX_TOKENS
from src.domain.errors import ErrorCodes
from src.domain.schemas import ImageReference, SourceFile

from .base import GenerationProvider, ProviderError, build_user_prompt

logger = logging.getLogger(__name__)


class ClaudeHtmlProvider(GenerationProvider):
    """
    Claude 스트리밍 Provider.

    Usage:
        provider = ClaudeHtmlProvider(model="claude-sonnet-4-5")
        async for chunk in provider.stream_html(files, image):
            ...
    """

    provider_name = "anthropic"

    def __init__(
        self,
        model: str = DEFAULT_CLAUDE_MODEL,
        api_key: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float | None = None,
    ):
        """
        Args:
            model: 모델 ID (config에서 주입)
            api_key: API 키 (환경변수 MY_ANTHROPIC_KEY 또는 ANTHROPIC_API_KEY 사용 가능)
            max_tokens: 최대 토큰 수
            temperature: 샘플링 온도 (None이면 API 기본값)

        Raises:
            ProviderError: API 키가 없을 때 (fail-fast)
        """
        self.model = model
        # API 키 결정: 인자 > MY_ANTHROPIC_KEY > ANTHROPIC_API_KEY
        self.api_key = (
            api_key
            or os.environ.get("MY_ANTHROPIC_KEY")
            or os.environ.get("ANTHROPIC_API_KEY")
        )

        # Fail-fast: 키가 없으면 즉시 에러 (나중에 모호한 에러 방지)
        if not self.api_key:
            raise ProviderError(
                ErrorCodes.API_KEY_MISSING,
                "Anthropic API key is missing. "
                "Set MY_ANTHROPIC_KEY or ANTHROPIC_API_KEY.",
            )

        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client: Any = None

    def _get_client(self) -> Any:
        """Anthropic 클라이언트 (lazy init)."""
        if self._client is None:
            try:
                import anthropic

                self._client = anthropic.AsyncAnthropic(api_key=self.api_key)
            except ImportError as e:
                raise ProviderError(
                    ErrorCodes.PROVIDER_NOT_INSTALLED,
                    "anthropic package not installed. Run: pip install anthropic",
                ) from e
        return self._client

    def _build_messages(
        self,
        source_files: Sequence[SourceFile],
        image: ImageReference | None,
    ) -> list[dict[str, Any]]:
        """이미지 블록(선택) + 텍스트 블록."""
        content: list[dict[str, Any]] = []
        if image is not None:
            content.append({
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image.mime_type,
                    "data": image.data,
                },
            })
        content.append({
            "type": "text",
            "text": build_user_prompt(source_files, has_image=image is not None),
        })
        return [{"role": "user", "content": content}]

    def _collect_model_params(self) -> dict[str, Any]:
        """호출에 사용된 모델 파라미터 수집."""
        params: dict[str, Any] = {
            "max_tokens": self.max_tokens,
        }
        if self.temperature is not None:
            params["temperature"] = self.temperature
        return params

    async def stream_html(
        self,
        source_files: Sequence[SourceFile],
        image: ImageReference | None = None,
    ) -> AsyncIterator[str]:
        """Claude 스트리밍 호출."""
        client = self._get_client()

        try:
            async with client.messages.stream(
                model=self.model,
                system=self.system_prompt,
                messages=self._build_messages(source_files, image),
                **self._collect_model_params(),
            ) as stream:
                async for text in stream.text_stream:
                    yield text

        except Exception as e:
            logger.error(f"Claude stream failed: {e}", exc_info=True)
            raise ProviderError(
                ErrorCodes.GENERATION_FAILED,
                self._get_user_friendly_error_message(e),
                model=self.model,
            ) from e

    def _get_user_friendly_error_message(self, error: Exception) -> str:
        """사용자 친화적인 에러 메시지 생성."""
        try:
            import anthropic

            # APITimeoutError는 APIConnectionError 하위 클래스 → 먼저 검사
            if isinstance(error, anthropic.APITimeoutError):
                return "The API response timed out. Check your network or try again later."
            elif isinstance(error, anthropic.APIConnectionError):
                return "Could not reach the Anthropic API. Check your internet connection."
            elif isinstance(error, anthropic.RateLimitError):
                return "API quota exceeded. Please wait a moment and try again."
            elif isinstance(error, anthropic.AuthenticationError):
                return "API authentication failed. Check the ANTHROPIC_API_KEY environment variable."
            elif isinstance(error, anthropic.PermissionDeniedError):
                return "This API key is not allowed to use the model. Check the key's permissions."
            elif isinstance(error, anthropic.BadRequestError):
                return "The request was rejected. The uploaded files or image may be too large."
        except ImportError:
            pass

        # 기본 메시지
        error_str = str(error)
        if "api_key" in error_str.lower():
            return "Check the API key configuration."
        elif "timeout" in error_str.lower():
            return "The request timed out. Please try again."
        elif "connection" in error_str.lower():
            return "A network connection error occurred."

        return f"An error occurred while generating HTML: {error_str}"
