"""
test_logging.py - 생성 실행 기록 테스트

DoD:
- 생성 시도마다 GenerationRun 1개
- 실패 기록에 error_code / error_message
- 최근 max_runs개만 유지
"""

import logging
from datetime import UTC, datetime

from src.core.logging import (
    append_run,
    complete_run,
    configure_logging,
    create_run,
    record_chunk,
)
from src.domain.schemas import RunResult

# =============================================================================
# create_run 테스트
# =============================================================================


class TestCreateRun:
    """create_run 함수 테스트."""

    def test_creates_pending_run(self):
        """path/revision으로 GenerationRun 생성."""
        run = create_run("x.py", 1, model_requested="fake-model")

        assert run.path == "x.py"
        assert run.revision == 1
        assert run.run_id.startswith("RUN-")
        assert run.result == RunResult.PENDING
        assert run.model_requested == "fake-model"

    def test_has_started_at(self):
        """started_at 타임스탬프 포함."""
        before = datetime.now(UTC)
        run = create_run("x.py", 1)
        after = datetime.now(UTC)

        started = datetime.fromisoformat(run.started_at)
        assert before <= started <= after

    def test_counters_start_at_zero(self):
        run = create_run("x.py", 1)

        assert run.chunk_count == 0
        assert run.output_chars == 0


# =============================================================================
# record_chunk / complete_run 테스트
# =============================================================================


class TestCompleteRun:
    """record_chunk, complete_run 함수 테스트."""

    def test_record_chunk_counts(self):
        """청크 수와 글자 수 누적."""
        run = create_run("x.py", 1)

        record_chunk(run, "<html>")
        record_chunk(run, "</html>")

        assert run.chunk_count == 2
        assert run.output_chars == len("<html></html>")

    def test_success(self):
        """성공 → finished_at, model_used 기록."""
        run = create_run("x.py", 1, model_requested="fake-model")

        complete_run(run, RunResult.SUCCESS, model_used="fake-model")

        assert run.result == RunResult.SUCCESS
        assert run.finished_at is not None
        assert run.model_used == "fake-model"
        assert run.error_code is None

    def test_failure_records_error(self):
        """실패 → error_code, error_message 기록."""
        run = create_run("x.py", 1)

        complete_run(
            run,
            RunResult.FAILED,
            error_code="GENERATION_FAILED",
            error_message="boom",
        )

        assert run.result == RunResult.FAILED
        assert run.error_code == "GENERATION_FAILED"
        assert run.error_message == "boom"

    def test_cancel_ignores_error_fields(self):
        """취소에는 에러 필드 없음."""
        run = create_run("x.py", 1)

        complete_run(run, RunResult.CANCELLED, error_code="X", error_message="y")

        assert run.result == RunResult.CANCELLED
        assert run.error_code is None

    def test_to_dict_drops_none(self):
        """to_dict는 None 필드 제외."""
        run = create_run("x.py", 1)

        data = run.to_dict()

        assert data["path"] == "x.py"
        assert data["result"] == "pending"
        assert "finished_at" not in data
        assert "error_code" not in data


# =============================================================================
# append_run 테스트
# =============================================================================


class TestAppendRun:
    """append_run 함수 테스트."""

    def test_appends_in_order(self):
        runs = []
        first = create_run("a", 1)
        second = create_run("b", 1)

        append_run(runs, first, max_runs=5)
        append_run(runs, second, max_runs=5)

        assert runs == [first, second]

    def test_keeps_latest_only(self):
        """max_runs 초과 시 오래된 것부터 제거."""
        runs = []
        created = [create_run(f"p{i}", 1) for i in range(5)]
        for run in created:
            append_run(runs, run, max_runs=3)

        assert runs == created[-3:]


# =============================================================================
# configure_logging 테스트
# =============================================================================


class TestConfigureLogging:
    """configure_logging 함수 테스트."""

    def test_sets_package_level(self):
        configure_logging({"logging": {"level": "debug"}})

        assert logging.getLogger("src").level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        configure_logging({"logging": {"level": "chatty"}})

        assert logging.getLogger("src").level == logging.INFO

    def test_missing_section(self):
        configure_logging({})

        assert logging.getLogger("src").level == logging.INFO
