"""
Run logging: 생성 실행 기록 + 로깅 설정

규칙:
- 생성 시도마다 GenerationRun 1개 (성공/실패/취소 모두 기록)
- 기록은 세션 메모리에만 유지 (디스크 저장 없음)
- 실패 기록 필수 키: error_code, error_message
"""

import logging
from datetime import UTC, datetime
from typing import Any

from src.core.ids import generate_run_id
from src.domain.schemas import GenerationRun, RunResult

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# =============================================================================
# Logging Setup
# =============================================================================


def configure_logging(config: dict[str, Any]) -> None:
    """
    config의 logging 섹션으로 루트 로거 설정.

    Args:
        config: default.yaml 내용 (logging.level 사용)
    """
    level_name = str(config.get("logging", {}).get("level", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("src").setLevel(level)


# =============================================================================
# Run Log Management
# =============================================================================


def create_run(
    path: str,
    revision: int,
    model_requested: str | None = None,
) -> GenerationRun:
    """
    새 GenerationRun 생성.

    Args:
        path: 대상 엔트리 path
        revision: 대상 엔트리 revision
        model_requested: config에 설정된 모델

    Returns:
        초기화된 GenerationRun (result=pending)
    """
    now = datetime.now(UTC).isoformat()

    return GenerationRun(
        run_id=generate_run_id(),
        path=path,
        revision=revision,
        started_at=now,
        model_requested=model_requested,
    )


def record_chunk(run: GenerationRun, chunk: str) -> None:
    """수신한 청크 통계 누적."""
    run.chunk_count += 1
    run.output_chars += len(chunk)


def complete_run(
    run: GenerationRun,
    result: RunResult,
    model_used: str | None = None,
    error_code: str | None = None,
    error_message: str | None = None,
) -> None:
    """
    GenerationRun 완료 처리.

    Args:
        run: GenerationRun 인스턴스
        result: success / failed / cancelled
        model_used: 실제 사용된 모델
        error_code: 에러 코드 (실패 시)
        error_message: 사용자 메시지 (실패 시)
    """
    run.finished_at = datetime.now(UTC).isoformat()
    run.result = result
    if model_used is not None:
        run.model_used = model_used

    if result == RunResult.FAILED:
        run.error_code = error_code
        run.error_message = error_message


def append_run(runs: list[GenerationRun], run: GenerationRun, max_runs: int) -> None:
    """
    기록 목록에 추가 (최근 max_runs개만 유지).

    Args:
        runs: 세션의 기록 목록 (최신이 뒤)
        run: 추가할 기록
        max_runs: 최대 보관 개수
    """
    runs.append(run)
    overflow = len(runs) - max_runs
    if overflow > 0:
        del runs[:overflow]
