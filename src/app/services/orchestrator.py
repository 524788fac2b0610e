"""
Generation Orchestrator: 활성 엔트리 → 스트리밍 생성 1회.

트리거 (상태 전이마다 평가):
- 활성 엔트리에 소스가 있고 출력이 비어 있음
- 같은 path + 같은 revision으로는 한 번만 실행

동시성 규칙 (path당 in-flight 작업 최대 1개):
- 소스 추가로 revision이 바뀌면 이전 작업 취소 후 새로 시작
- 취소된 작업의 늦은 청크는 버림
- reset 시 모든 작업 취소

실패 처리:
- 에러 메시지 1개만 유지, 이미 받은 청크는 그대로
- 자동 재시도 없음 (reset 또는 파일 추가로만 재시도)
"""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from src.app.providers.base import GenerationProvider
from src.core.logging import append_run, complete_run, create_run, record_chunk
from src.core.registry import (
    AppendOutputChunk,
    RegistryStore,
    active_entry,
    needs_generation,
)
from src.domain.constants import DEFAULT_MAX_RUNS
from src.domain.errors import GenerationError
from src.domain.schemas import (
    GenerationRun,
    ImageReference,
    ProjectEntry,
    RegistryState,
    RunResult,
)

logger = logging.getLogger(__name__)


@dataclass
class InFlight:
    """진행 중인 생성 작업."""
    revision: int
    run: GenerationRun
    task: "asyncio.Task[None]"


class GenerationOrchestrator:
    """
    store 구독 → 필요 시 생성 작업 시작.

    Usage:
        orchestrator = GenerationOrchestrator(store, provider)
        store.dispatch(CreateEntry(...))   # 여기서 작업 시작
        await orchestrator.wait_idle()
    """

    def __init__(
        self,
        store: RegistryStore,
        provider: GenerationProvider,
        image_source: Callable[[], ImageReference | None] | None = None,
        on_change: Callable[[], None] | None = None,
        max_runs: int = DEFAULT_MAX_RUNS,
    ):
        """
        Args:
            store: Project Registry store
            provider: 스트리밍 생성 Provider
            image_source: 시작 시점의 참고 이미지 조회 (없으면 이미지 없음)
            on_change: loading/error 변경 알림
            max_runs: 보관할 실행 기록 개수
        """
        self.store = store
        self.provider = provider
        self._image_source = image_source
        self._on_change = on_change
        self.max_runs = max_runs

        self.error: str | None = None
        self.error_code: str | None = None
        self.runs: list[GenerationRun] = []

        self._in_flight: dict[str, InFlight] = {}
        self._attempted: dict[str, int] = {}
        self._tasks: set[asyncio.Task[None]] = set()

        self._unsubscribe = store.subscribe(self._on_transition)

    # =========================================================================
    # State
    # =========================================================================

    @property
    def is_loading(self) -> bool:
        return bool(self._in_flight)

    def in_flight_paths(self) -> list[str]:
        return list(self._in_flight)

    def report_error(self, code: str, message: str) -> None:
        """생성 외 단계(파일 읽기 등)의 실패를 같은 에러 슬롯에 표시."""
        self.error = message
        self.error_code = code
        self._notify()

    def reset(self) -> None:
        """모든 작업 취소 + 에러/기록 초기화."""
        for path in list(self._in_flight):
            self._cancel(path)
        self._attempted.clear()
        self.error = None
        self.error_code = None
        self._notify()

    def close(self) -> None:
        """store 구독 해제 + 작업 취소."""
        self._unsubscribe()
        for path in list(self._in_flight):
            self._cancel(path)

    async def wait_idle(self) -> None:
        """진행 중인 (취소된 것 포함) 작업이 모두 끝날 때까지 대기."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # =========================================================================
    # Trigger
    # =========================================================================

    def _on_transition(self, previous: RegistryState, current: RegistryState) -> None:
        self.reconcile(current)

    def reconcile(self, state: RegistryState | None = None) -> None:
        """
        상태 전이 후 파생 조건 평가.

        1. 사라졌거나 revision이 바뀐 path의 작업 취소
        2. 활성 엔트리가 생성 필요 + 아직 시도 안 한 revision이면 시작
        """
        state = state if state is not None else self.store.state

        for path, flight in list(self._in_flight.items()):
            entry = state.entries.get(path)
            if entry is None or entry.revision != flight.revision:
                self._cancel(path)

        if not state.entries:
            self._attempted.clear()

        entry = active_entry(state)
        if entry is None or not needs_generation(entry):
            return
        if self._attempted.get(entry.path) == entry.revision:
            return

        self._start(entry)

    def _start(self, entry: ProjectEntry) -> None:
        image = self._image_source() if self._image_source else None
        run = create_run(entry.path, entry.revision, model_requested=self.provider.model)
        append_run(self.runs, run, self.max_runs)

        self._attempted[entry.path] = entry.revision
        self.error = None
        self.error_code = None

        task = asyncio.get_running_loop().create_task(self._generate(entry, image, run))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._in_flight[entry.path] = InFlight(entry.revision, run, task)

        logger.info(
            f"Generation started: run={run.run_id} path={entry.path!r} "
            f"revision={entry.revision} files={len(entry.source_files)}"
        )
        self._notify()

    def _cancel(self, path: str) -> None:
        flight = self._in_flight.pop(path, None)
        if flight is None:
            return
        flight.task.cancel()
        if flight.run.result == RunResult.PENDING:
            complete_run(flight.run, RunResult.CANCELLED)
        logger.info(f"Generation cancelled: run={flight.run.run_id} path={path!r}")

    def _is_current(self, path: str, run: GenerationRun) -> bool:
        flight = self._in_flight.get(path)
        return flight is not None and flight.run is run

    # =========================================================================
    # Run
    # =========================================================================

    async def _generate(
        self,
        entry: ProjectEntry,
        image: ImageReference | None,
        run: GenerationRun,
    ) -> None:
        path = entry.path

        def on_chunk(chunk: str) -> None:
            # 취소된 작업의 늦은 청크는 버림
            if not self._is_current(path, run):
                return
            record_chunk(run, chunk)
            self.store.dispatch(AppendOutputChunk(path, chunk))

        try:
            model_used = await self.provider.generate_html_stream(
                entry.source_files, image, on_chunk
            )
            if self._is_current(path, run):
                complete_run(run, RunResult.SUCCESS, model_used=model_used)
                logger.info(
                    f"Generation finished: run={run.run_id} chunks={run.chunk_count} "
                    f"chars={run.output_chars}"
                )

        except GenerationError as e:
            if self._is_current(path, run):
                complete_run(
                    run,
                    RunResult.FAILED,
                    error_code=e.code,
                    error_message=e.message,
                )
                self.error = e.message
                self.error_code = e.code
            logger.error(f"Generation failed: run={run.run_id} {e}")

        finally:
            if self._is_current(path, run):
                del self._in_flight[path]
            self._notify()

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change()
