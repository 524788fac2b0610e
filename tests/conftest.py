"""
Pytest fixtures for the studio tests.

구성:
- FakeProvider: 외부 모델 대신 미리 정한 청크를 스트리밍
- 업로드 파일 factory (fastapi.UploadFile)
"""

import asyncio
import base64
import io
from collections.abc import AsyncIterator, Sequence
from pathlib import Path

import pytest
import yaml
from fastapi import UploadFile
from starlette.datastructures import Headers

from src.app.providers.base import GenerationProvider, ProviderError
from src.domain.errors import ErrorCodes
from src.domain.schemas import ImageReference, SourceFile

# =============================================================================
# Fake Provider
# =============================================================================


class FakeProvider(GenerationProvider):
    """
    테스트용 Provider.

    - chunks를 순서대로 yield
    - fail_after가 있으면 그 개수만큼 보낸 뒤 ProviderError
    - gate가 있으면 첫 청크 이후 gate가 열릴 때까지 대기 (mid-stream 시나리오용)
    """

    provider_name = "fake"

    def __init__(
        self,
        chunks: Sequence[str] = ("<html>", "<body>", "</body></html>"),
        fail_after: int | None = None,
        delay: float = 0.0,
        gate: asyncio.Event | None = None,
    ):
        self.model = "fake-model"
        self.chunks = list(chunks)
        self.fail_after = fail_after
        self.delay = delay
        self.gate = gate
        self.calls: list[tuple[list[SourceFile], ImageReference | None]] = []

    async def stream_html(
        self,
        source_files: Sequence[SourceFile],
        image: ImageReference | None = None,
    ) -> AsyncIterator[str]:
        self.calls.append((list(source_files), image))
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i >= self.fail_after:
                raise ProviderError(ErrorCodes.GENERATION_FAILED, "model exploded")
            if self.delay:
                await asyncio.sleep(self.delay)
            yield chunk
            if i == 0 and self.gate is not None:
                await self.gate.wait()
        if self.fail_after is not None and self.fail_after >= len(self.chunks):
            raise ProviderError(ErrorCodes.GENERATION_FAILED, "model exploded")


@pytest.fixture
def fake_provider() -> FakeProvider:
    """기본 FakeProvider (3 청크)."""
    return FakeProvider()


@pytest.fixture
def provider_factory():
    """FakeProvider 클래스를 fixture로 노출 (옵션 지정용)."""
    return FakeProvider


# =============================================================================
# Upload Fixtures
# =============================================================================


def make_upload(
    filename: str,
    data: bytes,
    content_type: str = "text/plain",
) -> UploadFile:
    """fastapi.UploadFile 생성."""
    return UploadFile(
        file=io.BytesIO(data),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def upload_factory():
    """make_upload 함수를 fixture로 노출."""
    return make_upload


@pytest.fixture
def sample_files() -> list[SourceFile]:
    """기본 소스 파일 2개."""
    return [
        SourceFile(name="a.js", content="console.log('a');"),
        SourceFile(name="b.js", content="console.log('b');"),
    ]


# 1x1 white pixel PNG (valid minimal PNG)
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mP8/5+hHgAHggJ/PchI7wAAAABJRU5ErkJggg=="
)


@pytest.fixture
def png_bytes() -> bytes:
    return PNG_BYTES


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config(project_root: Path) -> dict:
    """default.yaml 로드."""
    with open(project_root / "default.yaml", encoding="utf-8") as f:
        return yaml.safe_load(f)
