"""
Source File Collector: 업로드/붙여넣기 → SourceFile, 이미지 → ImageReference

규칙:
- 파일 하나라도 읽기 실패 → 전체 실패 (FileReadError 1개로 집계)
- 이미지는 image/* 만 허용, base64 + MIME 타입 보존
- 붙여넣기 검증 실패는 ValidationError (기존 상태 유지)
"""

import base64
import logging
from collections.abc import Sequence
from typing import Protocol

from src.domain.constants import (
    DEFAULT_MAX_UPLOAD_BYTES,
    IMAGE_MIME_PREFIX,
    PROJECT_NAME_TEMPLATE,
    get_mime_type,
)
from src.domain.errors import ErrorCodes, FileReadError, ValidationError
from src.domain.schemas import ImageReference, SourceFile

logger = logging.getLogger(__name__)

EMPTY_CODE_MESSAGE = "Please paste some code to convert."
INVALID_FILE_NAME_MESSAGE = (
    "Please provide a valid file name with an extension (e.g., script.js)."
)
NOT_AN_IMAGE_MESSAGE = "Please select an image file (PNG, JPEG, GIF or WebP)."


class Upload(Protocol):
    """업로드 파일 (fastapi.UploadFile 호환)."""

    filename: str | None

    @property
    def content_type(self) -> str | None: ...

    async def read(self, size: int = -1) -> bytes: ...

    async def close(self) -> None: ...


# =============================================================================
# Files
# =============================================================================


def decode_text(data: bytes) -> str:
    """
    바이트 → 텍스트 (UTF-8, BOM 허용).

    Raises:
        UnicodeDecodeError: 텍스트가 아닌 파일
    """
    return data.decode("utf-8-sig")


async def read_files(
    uploads: Sequence[Upload],
    max_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
) -> list[SourceFile]:
    """
    업로드 파일 전체를 텍스트로 읽기.

    Args:
        uploads: 업로드 파일 목록 (순서 유지)
        max_bytes: 파일 하나당 최대 크기

    Returns:
        SourceFile 목록

    Raises:
        FileReadError: 하나 이상 실패 (실패 파일명 전체를 한 메시지로)
    """
    files: list[SourceFile] = []
    failed: list[str] = []

    for upload in uploads:
        name = upload.filename or "unknown"
        try:
            data = await upload.read()
            if len(data) > max_bytes:
                logger.warning(f"File too large: {name} ({len(data)} bytes)")
                failed.append(name)
                continue
            files.append(SourceFile(name=name, content=decode_text(data)))
        except (UnicodeDecodeError, OSError) as e:
            logger.warning(f"Failed to read file {name}: {e}")
            failed.append(name)
        finally:
            await upload.close()

    if failed:
        raise FileReadError(
            ErrorCodes.FILE_READ_FAILED,
            f"File Read Error: Failed to read file: {', '.join(failed)}",
            files=failed,
        )

    return files


def project_name_for(files: Sequence[SourceFile]) -> str:
    """
    새 프로젝트 이름 (= registry path).

    파일 하나 → 파일명, 여러 개 → "Project (N files)"
    """
    if not files:
        raise ValueError("project_name_for requires at least one file")
    if len(files) > 1:
        return PROJECT_NAME_TEMPLATE.format(count=len(files))
    return files[0].name


# =============================================================================
# Image
# =============================================================================


async def read_image(upload: Upload) -> ImageReference:
    """
    참고 이미지 읽기.

    content_type이 비어 있으면 확장자로 추정.

    Raises:
        ValidationError: 이미지가 아님
        FileReadError: 읽기 실패
    """
    name = upload.filename or "unknown"
    mime_type = upload.content_type or get_mime_type(name)

    try:
        if not mime_type.startswith(IMAGE_MIME_PREFIX):
            raise ValidationError(
                ErrorCodes.NOT_AN_IMAGE,
                NOT_AN_IMAGE_MESSAGE,
                filename=name,
                mime_type=mime_type,
            )
        try:
            data = await upload.read()
        except OSError as e:
            raise FileReadError(
                ErrorCodes.FILE_READ_FAILED,
                f"File Read Error: Failed to read file: {name}",
                files=[name],
            ) from e
    finally:
        await upload.close()

    return ImageReference(
        data=base64.b64encode(data).decode("ascii"),
        mime_type=mime_type,
    )


# =============================================================================
# Pasted Code
# =============================================================================


def validate_pasted_input(code: str, file_name: str) -> str:
    """
    붙여넣기 입력 검증.

    Args:
        code: 붙여넣은 코드
        file_name: 사용자 입력 파일명 (언어 감지용)

    Returns:
        앞뒤 공백 제거한 파일명

    Raises:
        ValidationError: 코드가 비었거나 파일명에 확장자가 없음
    """
    if not code or not code.strip():
        raise ValidationError(ErrorCodes.EMPTY_CODE, EMPTY_CODE_MESSAGE)

    name = (file_name or "").strip()
    if not name or "." not in name:
        raise ValidationError(
            ErrorCodes.INVALID_FILE_NAME,
            INVALID_FILE_NAME_MESSAGE,
            file_name=file_name,
        )
    return name
