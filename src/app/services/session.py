"""
Studio Session: 브라우저 세션 1개 = registry store + orchestrator + 폼 입력.

규칙:
- 세션 상태는 메모리에만 (서버 재시작/리셋 시 소멸)
- 붙여넣기 검증 실패 → validation_error만 설정, 기존 상태 유지
- 파일 읽기 실패 → error 슬롯에 표시 (생성 실패와 같은 패널)
- reset → registry, error, 폼 입력, 이미지 전부 초기화
"""

import asyncio
import logging
from collections import OrderedDict
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from src.app.providers.base import GenerationProvider
from src.app.services.collector import (
    Upload,
    project_name_for,
    read_files,
    read_image,
    validate_pasted_input,
)
from src.app.services.orchestrator import GenerationOrchestrator
from src.core.ids import generate_session_id, sanitize_path_key
from src.core.registry import (
    AppendSourceFiles,
    CreateEntry,
    RegistryStore,
    Reset,
    active_entry,
)
from src.domain.constants import DEFAULT_MAX_RUNS, DEFAULT_MAX_UPLOAD_BYTES
from src.domain.errors import ErrorCodes, FileReadError, StudioError, ValidationError
from src.domain.schemas import ImageReference, ProjectEntry, SourceFile

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 100


class ChangeNotifier:
    """
    상태 변경 알림 (SSE 연결마다 Event 1개).

    notify()는 동기 함수 → store 리스너에서 바로 호출 가능.
    """

    def __init__(self) -> None:
        self._events: set[asyncio.Event] = set()

    def subscribe(self) -> asyncio.Event:
        event = asyncio.Event()
        self._events.add(event)
        return event

    def unsubscribe(self, event: asyncio.Event) -> None:
        self._events.discard(event)

    def notify(self) -> None:
        for event in self._events:
            event.set()


class StudioSession:
    """브라우저 세션 하나의 전체 상태."""

    def __init__(
        self,
        provider: GenerationProvider,
        session_id: str | None = None,
        max_runs: int = DEFAULT_MAX_RUNS,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.session_id = session_id or generate_session_id()
        self.created_at = datetime.now(UTC).isoformat()
        self.max_upload_bytes = max_upload_bytes

        # 폼 입력 (reset 시 초기화)
        self.pasted_code = ""
        self.file_name = ""
        self.validation_error: str | None = None
        self.image: ImageReference | None = None
        self.image_name: str | None = None

        self.notifier = ChangeNotifier()
        self.store = RegistryStore()
        self.store.subscribe(lambda previous, current: self.notifier.notify())
        self.orchestrator = GenerationOrchestrator(
            self.store,
            provider,
            image_source=lambda: self.image,
            on_change=self.notifier.notify,
            max_runs=max_runs,
        )

    # =========================================================================
    # Read
    # =========================================================================

    @property
    def active(self) -> ProjectEntry | None:
        return active_entry(self.store.state)

    @property
    def error(self) -> str | None:
        return self.orchestrator.error

    @property
    def is_loading(self) -> bool:
        return self.orchestrator.is_loading

    def active_output(self) -> str:
        entry = self.active
        return entry.generated_output if entry is not None else ""

    def snapshot(self) -> dict[str, Any]:
        """JSON 응답용 상태 스냅샷 (소스 본문/출력 본문 제외)."""
        entry = self.active
        return {
            "session_id": self.session_id,
            "created_at": self.created_at,
            "active_path": self.store.state.active_path,
            "active": entry.to_dict() if entry is not None else None,
            "entries": self.store.state.to_dict()["entries"],
            "loading": self.is_loading,
            "error": self.error,
            "error_code": self.orchestrator.error_code,
            "validation_error": self.validation_error,
            "has_image": self.image is not None,
            "provider": self.orchestrator.provider.describe(),
            "image_name": self.image_name,
            "runs": [run.to_dict() for run in self.orchestrator.runs],
        }

    # =========================================================================
    # Actions
    # =========================================================================

    def submit_pasted(self, code: str, file_name: str) -> ProjectEntry:
        """
        붙여넣은 코드로 새 엔트리 생성.

        Raises:
            ValidationError: 코드 없음 / 확장자 없는 파일명 (기존 상태 유지)
        """
        self.pasted_code = code
        self.file_name = file_name
        self.validation_error = None

        try:
            name = validate_pasted_input(code, file_name)
        except ValidationError as e:
            self.validation_error = e.message
            self.notifier.notify()
            raise

        path = sanitize_path_key(name)
        self.store.dispatch(CreateEntry(name, path, (SourceFile(name=name, content=code),)))
        logger.info(f"Pasted code submitted: session={self.session_id} path={path!r}")
        return self._require_active()

    async def add_files(self, uploads: Sequence[Upload]) -> ProjectEntry | None:
        """
        업로드 파일 처리.

        - 활성 엔트리 있음 → 중복 아닌 파일만 추가 (재생성 트리거)
        - 없음 → 새 프로젝트 생성

        Raises:
            FileReadError: 파일 읽기 실패 (error 슬롯에도 표시)
        """
        if not uploads:
            return self.active

        try:
            files = await read_files(uploads, max_bytes=self.max_upload_bytes)
        except FileReadError as e:
            self.orchestrator.report_error(e.code, e.message)
            raise

        if not files:
            return self.active

        entry = self.active
        if entry is not None:
            self.store.dispatch(AppendSourceFiles(entry.path, tuple(files)))
            logger.info(
                f"Files added: session={self.session_id} path={entry.path!r} "
                f"count={len(files)}"
            )
        else:
            name = project_name_for(files)
            self.store.dispatch(CreateEntry(name, name, tuple(files)))
            logger.info(
                f"Project created: session={self.session_id} path={name!r} "
                f"count={len(files)}"
            )
        return self._require_active()

    async def set_image(self, upload: Upload) -> ImageReference:
        """
        참고 이미지 설정 (다음 생성부터 사용).

        Raises:
            ValidationError: 이미지가 아님 (기존 이미지 유지)
            FileReadError: 읽기 실패 (error 슬롯에도 표시)
        """
        try:
            image = await read_image(upload)
        except ValidationError as e:
            self.validation_error = e.message
            self.notifier.notify()
            raise
        except FileReadError as e:
            self.orchestrator.report_error(e.code, e.message)
            raise

        self.image = image
        self.image_name = upload.filename
        self.validation_error = None
        self.notifier.notify()
        return image

    def clear_image(self) -> None:
        self.image = None
        self.image_name = None
        self.notifier.notify()

    def reset(self) -> None:
        """전체 초기화 (registry, error, 폼 입력, 이미지)."""
        self.store.dispatch(Reset())
        self.orchestrator.reset()
        self.pasted_code = ""
        self.file_name = ""
        self.validation_error = None
        self.image = None
        self.image_name = None
        self.notifier.notify()
        logger.info(f"Session reset: session={self.session_id}")

    def close(self) -> None:
        self.orchestrator.close()

    def _require_active(self) -> ProjectEntry:
        entry = self.active
        if entry is None:
            raise StudioError(ErrorCodes.SESSION_NOT_FOUND, "No active project")
        return entry


class SessionManager:
    """
    세션 ID → StudioSession (in-memory).

    max_sessions 초과 시 가장 오래된 세션부터 정리.
    """

    def __init__(
        self,
        provider: GenerationProvider,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        max_runs: int = DEFAULT_MAX_RUNS,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.provider = provider
        self.max_sessions = max_sessions
        self.max_runs = max_runs
        self.max_upload_bytes = max_upload_bytes
        self._sessions: OrderedDict[str, StudioSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self) -> StudioSession:
        session = StudioSession(
            self.provider,
            max_runs=self.max_runs,
            max_upload_bytes=self.max_upload_bytes,
        )
        self._sessions[session.session_id] = session

        while len(self._sessions) > self.max_sessions:
            _, evicted = self._sessions.popitem(last=False)
            evicted.close()
            logger.info(f"Session evicted: session={evicted.session_id}")

        return session

    def get(self, session_id: str) -> StudioSession:
        """
        Raises:
            StudioError: SESSION_NOT_FOUND
        """
        session = self._sessions.get(session_id)
        if session is None:
            raise StudioError(
                ErrorCodes.SESSION_NOT_FOUND,
                "Session not found. Reload the page to start a new session.",
                session_id=session_id,
            )
        self._sessions.move_to_end(session_id)
        return session

    def close_all(self) -> None:
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
