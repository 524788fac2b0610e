"""
Data schemas for the studio.

규칙:
- 상태 객체는 불변 (frozen dataclass) → 전이 함수가 새 객체 반환
- source_files는 tuple (삽입 순서 유지)
- generated_output은 append-only 누적 버퍼
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# Source Inputs
# =============================================================================

@dataclass(frozen=True)
class SourceFile:
    """소스 파일 한 개 (이름 + 텍스트 내용)."""
    name: str
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "content": self.content}


@dataclass(frozen=True)
class ImageReference:
    """
    참고 이미지.

    data는 base64 payload (data URL prefix 없음).
    """
    data: str
    mime_type: str

    def to_dict(self) -> dict[str, Any]:
        return {"data": self.data, "mime_type": self.mime_type}


# =============================================================================
# Registry Schemas
# =============================================================================

@dataclass(frozen=True)
class ProjectEntry:
    """
    생성 단위: 경로 하나, 소스 입력, 누적 출력.

    revision:
    - 생성 시 1
    - 소스 파일이 실제로 추가될 때마다 +1
    - 진행 중인 생성이 최신 소스 기준인지 판별하는 데 사용
    """
    name: str
    path: str
    source_files: tuple[SourceFile, ...] = ()
    generated_output: str = ""
    revision: int = 1

    @property
    def file_names(self) -> list[str]:
        return [f.name for f in self.source_files]

    def to_dict(self, include_sources: bool = False) -> dict[str, Any]:
        """JSON 직렬화용 (기본값은 소스 본문 제외)."""
        result: dict[str, Any] = {
            "name": self.name,
            "path": self.path,
            "file_names": self.file_names,
            "output_length": len(self.generated_output),
            "revision": self.revision,
        }
        if include_sources:
            result["source_files"] = [f.to_dict() for f in self.source_files]
        return result


@dataclass(frozen=True)
class RegistryState:
    """
    Project Registry 상태.

    entries는 전이 함수 밖에서 수정하지 않는다 (항상 새 dict로 교체).
    """
    entries: dict[str, ProjectEntry] = field(default_factory=dict)
    active_path: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "active_path": self.active_path,
            "entries": {path: e.to_dict() for path, e in self.entries.items()},
        }


# =============================================================================
# Generation Run Log
# =============================================================================

class RunResult(str, Enum):
    """생성 실행 결과."""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    CANCELLED = "cancelled"


@dataclass
class GenerationRun:
    """
    생성 실행 기록 (세션 메모리에만 유지).

    model_requested: config에 설정된 모델
    model_used: 실제 스트림을 반환한 모델
    """
    run_id: str
    path: str
    revision: int
    started_at: str
    result: RunResult = RunResult.PENDING
    model_requested: str | None = None
    model_used: str | None = None
    finished_at: str | None = None
    chunk_count: int = 0
    output_chars: int = 0
    error_code: str | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "run_id": self.run_id,
            "path": self.path,
            "revision": self.revision,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result.value,
            "model_requested": self.model_requested,
            "model_used": self.model_used,
            "chunk_count": self.chunk_count,
            "output_chars": self.output_chars,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }
        # None 값 제거
        return {k: v for k, v in result.items() if v is not None}
