"""
Google Gemini Generation Provider.

예외 정책 (자동 재시도 없음):
- REJECT_IMMEDIATELY: InvalidArgument, PermissionDenied, Unauthenticated → 인증/입력 오류
- TRANSIENT_ERRORS: NotFound, ServiceUnavailable, ResourceExhausted → 사용자에게 재시도 안내
- 그 외 → GENERATION_FAILED
"""

import base64
import logging
import os
from collections.abc import AsyncIterator, Sequence
from typing import Any

from src.domain.constants import DEFAULT_GEMINI_MODEL, DEFAULT_MAX_TOKENS
from src.domain.errors import ErrorCodes
from src.domain.schemas import ImageReference, SourceFile

from .base import GenerationProvider, ProviderError, build_user_prompt

logger = logging.getLogger(__name__)

# =============================================================================
# Exception Mapping
# =============================================================================

# 일시적 오류 (사용자가 다시 시도하면 풀릴 수 있음)
TRANSIENT_ERRORS: tuple[type[Exception], ...] = ()

# 즉시 reject하는 예외
REJECT_IMMEDIATELY: tuple[type[Exception], ...] = ()

# Google API 예외 동적 로드
try:
    from google.api_core.exceptions import (
        InvalidArgument,
        NotFound,
        PermissionDenied,
        ResourceExhausted,
        ServiceUnavailable,
        Unauthenticated,
    )

    TRANSIENT_ERRORS = (
        NotFound,           # 모델명 오류/미지원
        ServiceUnavailable,  # 5xx
        ResourceExhausted,   # 429 쿼터/레이트리밋
    )

    REJECT_IMMEDIATELY = (
        InvalidArgument,    # 입력 오류
        PermissionDenied,   # 인증 오류
        Unauthenticated,    # API 키 오류
    )
except ImportError:
    pass


class GeminiHtmlProvider(GenerationProvider):
    """
    Gemini 스트리밍 Provider.

    Usage:
        provider = GeminiHtmlProvider(model="gemini-2.5-flash")
        async for chunk in provider.stream_html(files, image):
            ...
    """

    provider_name = "gemini"

    def __init__(
        self,
        model: str = DEFAULT_GEMINI_MODEL,
        api_key: str | None = None,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float | None = None,
    ):
        """
        Args:
            model: 모델 ID (config에서 주입)
            api_key: API 키 (환경변수 GOOGLE_API_KEY 또는 GEMINI_API_KEY 사용 가능)
            max_tokens: 최대 출력 토큰 수
            temperature: 샘플링 온도 (None이면 API 기본값)
        """
        self.model = model
        self.api_key = (
            api_key
            or os.environ.get("GOOGLE_API_KEY")
            or os.environ.get("GEMINI_API_KEY")
        )
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client: Any = None

    def _get_client(self) -> Any:
        """Gemini 클라이언트 (lazy init)."""
        if self._client is None:
            if not self.api_key:
                raise ProviderError(
                    ErrorCodes.API_KEY_MISSING,
                    "Gemini API key is missing. Set GOOGLE_API_KEY or GEMINI_API_KEY.",
                )
            try:
                import google.generativeai as genai
                genai.configure(api_key=self.api_key)
                self._client = genai
            except ImportError as e:
                raise ProviderError(
                    ErrorCodes.PROVIDER_NOT_INSTALLED,
                    "google-generativeai package not installed. "
                    "Run: pip install google-generativeai",
                ) from e
        return self._client

    def _generation_config(self) -> dict[str, Any]:
        config: dict[str, Any] = {"max_output_tokens": self.max_tokens}
        if self.temperature is not None:
            config["temperature"] = self.temperature
        return config

    def _build_contents(
        self,
        source_files: Sequence[SourceFile],
        image: ImageReference | None,
    ) -> list[Any]:
        """프롬프트 + (선택) 이미지 part."""
        contents: list[Any] = [build_user_prompt(source_files, has_image=image is not None)]
        if image is not None:
            contents.append({
                "mime_type": image.mime_type,
                "data": base64.b64decode(image.data),
            })
        return contents

    async def stream_html(
        self,
        source_files: Sequence[SourceFile],
        image: ImageReference | None = None,
    ) -> AsyncIterator[str]:
        """Gemini 스트리밍 호출."""
        genai = self._get_client()
        model_instance = genai.GenerativeModel(
            self.model,
            system_instruction=self.system_prompt,
            generation_config=self._generation_config(),
        )
        contents = self._build_contents(source_files, image)

        try:
            response = await model_instance.generate_content_async(contents, stream=True)
            async for chunk in response:
                # 텍스트 part 없는 청크 (finish 신호 등)
                if not chunk.parts:
                    continue
                yield chunk.text

        except REJECT_IMMEDIATELY as e:
            logger.error(f"Authentication or input error: {e}", exc_info=True)
            raise ProviderError(
                ErrorCodes.AUTH_OR_INPUT_ERROR,
                self._get_user_friendly_error_message(e),
                model=self.model,
            ) from e

        except TRANSIENT_ERRORS as e:
            logger.warning(f"Gemini model ({self.model}) unavailable: {e}")
            raise ProviderError(
                ErrorCodes.GENERATION_FAILED,
                self._get_user_friendly_error_message(e),
                model=self.model,
            ) from e

        except Exception as e:
            logger.error(f"Generation failed with unexpected error: {e}", exc_info=True)
            raise ProviderError(
                ErrorCodes.GENERATION_FAILED,
                self._get_user_friendly_error_message(e),
                model=self.model,
            ) from e

    def _get_user_friendly_error_message(self, error: Exception) -> str:
        """사용자 친화적인 에러 메시지 생성."""
        try:
            from google.api_core.exceptions import (
                InvalidArgument,
                NotFound,
                PermissionDenied,
                ResourceExhausted,
                ServiceUnavailable,
                Unauthenticated,
            )

            if isinstance(error, Unauthenticated):
                return "Gemini authentication failed. Check the GOOGLE_API_KEY environment variable."
            elif isinstance(error, PermissionDenied):
                return "This API key is not allowed to use the model. Check the key's permissions."
            elif isinstance(error, ResourceExhausted):
                return "API quota exceeded. Please wait a moment and try again."
            elif isinstance(error, ServiceUnavailable):
                return "The Gemini service is temporarily unavailable. Please try again later."
            elif isinstance(error, NotFound):
                return f"Model '{self.model}' was not found. Check ai.generation.model in default.yaml."
            elif isinstance(error, InvalidArgument):
                return "The request was rejected. The uploaded files or image may be too large."
        except ImportError:
            pass

        # 기본 메시지
        error_str = str(error)
        if "api_key" in error_str.lower() or "api key" in error_str.lower():
            return "Check the API key configuration."
        elif "quota" in error_str.lower() or "limit" in error_str.lower():
            return "API quota exceeded. Please wait a moment and try again."
        elif "connection" in error_str.lower():
            return "A network connection error occurred."
        elif "timeout" in error_str.lower():
            return "The request timed out. Please try again."

        return f"An error occurred while generating HTML: {error_str}"
