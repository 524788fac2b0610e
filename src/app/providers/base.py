"""
Generation Provider 추상 인터페이스.

- Provider 추상화로 모델 교체 가능 (gemini / anthropic)
- 모델명은 config만 SSOT
- 호출 1회 = 스트림 1개, 자동 재시도 없음
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable, Sequence
from typing import Any

from src.domain.constants import (
    IMAGE_PROMPT_NOTE,
    SYSTEM_PROMPT,
    USER_PROMPT_HEADER,
    get_language,
)
from src.domain.errors import ErrorCodes, GenerationError
from src.domain.schemas import ImageReference, SourceFile

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[str], None]

# =============================================================================
# Provider Exceptions
# =============================================================================


class ProviderError(GenerationError):
    """
    Provider 관련 에러.

    SDK 예외를 사용자 메시지로 바꿔서 올린다.
    """
    pass


# =============================================================================
# Prompt
# =============================================================================


def build_user_prompt(
    source_files: Sequence[SourceFile],
    has_image: bool = False,
) -> str:
    """
    소스 파일 목록 → 유저 프롬프트.

    파일마다 이름 헤더 + 확장자 기반 코드 펜스.
    """
    parts = [USER_PROMPT_HEADER]
    if has_image:
        parts.append(IMAGE_PROMPT_NOTE)

    for f in source_files:
        language = get_language(f.name)
        parts.append(f"--- File: {f.name} ---\n```{language}\n{f.content}\n```")

    return "\n\n".join(parts)


# =============================================================================
# Abstract Provider
# =============================================================================


class GenerationProvider(ABC):
    """
    스트리밍 HTML 생성 Provider.

    역할: 소스 + 참고 이미지 → HTML 텍스트 청크 스트림
    """

    # config / 로그용 이름
    provider_name: str = "base"

    model: str
    system_prompt: str = SYSTEM_PROMPT

    @abstractmethod
    def stream_html(
        self,
        source_files: Sequence[SourceFile],
        image: ImageReference | None = None,
    ) -> AsyncIterator[str]:
        """
        HTML 청크 스트림.

        Args:
            source_files: 순서 있는 소스 파일 목록
            image: 참고 이미지 (없으면 None)

        Yields:
            생성된 HTML 조각 (도착 순서대로)

        Raises:
            ProviderError: API 호출 실패
        """
        ...

    async def generate_html_stream(
        self,
        source_files: Sequence[SourceFile],
        image: ImageReference | None,
        on_chunk: ChunkCallback,
    ) -> str:
        """
        스트림을 끝까지 소비하며 청크마다 콜백 호출.

        Returns:
            실제 사용된 모델 ID

        Raises:
            GenerationError: 스트림 실패 (이미 전달된 청크는 그대로 남음)
        """
        try:
            async for chunk in self.stream_html(source_files, image):
                if chunk:
                    on_chunk(chunk)
        except GenerationError:
            raise
        except Exception as e:
            logger.error(f"Generation stream failed: {e}", exc_info=True)
            raise GenerationError(
                ErrorCodes.GENERATION_FAILED,
                f"HTML generation failed: {e}",
                provider=self.provider_name,
                model=self.model,
            ) from e

        return self.model

    def describe(self) -> dict[str, Any]:
        return {"provider": self.provider_name, "model": self.model}
