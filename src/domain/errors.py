"""
Error definitions for the studio.

에러 규칙:
- 조용한 실패 금지 → 코드가 붙은 예외로 명시적 실패
- 자동 재시도 없음: 모든 실패는 현재 시도에 대해 종료
- 사용자 메시지(message)와 로그용 컨텍스트(context) 분리
"""

from typing import Any


class StudioError(Exception):
    """
    스튜디오 공통 에러.

    Usage:
        raise FileReadError(ErrorCodes.FILE_READ_FAILED, "Failed to read file: a.js", files=["a.js"])
    """

    def __init__(self, code: str, message: str, **context: Any) -> None:
        self.code = code
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        if ctx_str:
            return f"[{self.code}] {self.message} ({ctx_str})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            "message": self.message,
            **self.context,
        }


class FileReadError(StudioError):
    """업로드 파일 하나 이상을 텍스트로 읽지 못함 (한 번에 집계)."""
    pass


class ValidationError(StudioError):
    """
    입력 검증 실패.

    인라인 표시, 기존 상태는 건드리지 않음.
    """
    pass


class GenerationError(StudioError):
    """스트리밍 생성 호출 실패."""
    pass


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Intake ===
    FILE_READ_FAILED = "FILE_READ_FAILED"

    # === Validation ===
    EMPTY_CODE = "EMPTY_CODE"
    INVALID_FILE_NAME = "INVALID_FILE_NAME"
    NOT_AN_IMAGE = "NOT_AN_IMAGE"

    # === Generation ===
    GENERATION_FAILED = "GENERATION_FAILED"
    PROVIDER_NOT_INSTALLED = "PROVIDER_NOT_INSTALLED"
    API_KEY_MISSING = "API_KEY_MISSING"
    AUTH_OR_INPUT_ERROR = "AUTH_OR_INPUT_ERROR"
    UNKNOWN_PROVIDER = "UNKNOWN_PROVIDER"

    # === Session ===
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
