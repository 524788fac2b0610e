"""
Studio Routes: 코드 → HTML 변환 화면 (메인 기능).

- GET / → 스튜디오 화면 (HTMX)
- POST /api/studio/paste → 붙여넣은 코드로 생성 시작
- POST /api/studio/files → 파일 업로드 (새 프로젝트 또는 활성 프로젝트에 추가)
- POST /api/studio/image, DELETE /api/studio/image → 참고 이미지
- POST /api/studio/reset → 전체 초기화
- GET /api/studio/panel → 패널 partial 재렌더
- GET /api/studio/state → JSON 스냅샷
- GET /api/studio/output → 활성 출력 원문
- GET /api/studio/stream → SSE 스트림 (청크/상태)

변경 API는 HTMX partial(패널 HTML)로 응답한다.
검증 실패/파일 읽기 실패도 200 + 패널 안의 메시지로 표시.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from pathlib import Path
from typing import Any

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, PlainTextResponse, StreamingResponse
from fastapi.templating import Jinja2Templates

from src.app.services.session import SessionManager, StudioSession
from src.domain.errors import FileReadError, ValidationError

logger = logging.getLogger(__name__)

# Jinja2 템플릿 설정
_templates_dir = Path(__file__).parent.parent / "templates"
jinja_templates = Jinja2Templates(directory=_templates_dir)

# Routers
router = APIRouter()  # HTML pages
api_router = APIRouter()  # API endpoints

# SSE heartbeat 간격 (seconds)
HEARTBEAT_INTERVAL = 15.0


# =============================================================================
# Session Helpers
# =============================================================================


def get_sessions(request: Request) -> SessionManager:
    sessions: SessionManager = request.app.state.sessions
    return sessions


def get_session(request: Request, session_id: str) -> StudioSession:
    """
    세션 조회.

    Raises:
        StudioError: SESSION_NOT_FOUND (main.py 핸들러 → 404)
    """
    return get_sessions(request).get(session_id)


def render_panel(request: Request, session: StudioSession) -> HTMLResponse:
    """패널 partial 렌더."""
    return jinja_templates.TemplateResponse(
        request,
        "_panel.html",
        {"session": session, "entry": session.active},
    )


# =============================================================================
# Page Routes
# =============================================================================


@router.get("/", response_class=HTMLResponse)
async def studio_page(request: Request) -> HTMLResponse:
    """
    스튜디오 화면.

    페이지 로드마다 새 세션 (새로고침 = 새 작업).
    """
    session = get_sessions(request).create()
    logger.info(f"Session created: session={session.session_id}")

    return jinja_templates.TemplateResponse(
        request,
        "studio.html",
        {"session": session, "entry": session.active},
    )


# =============================================================================
# API Routes
# =============================================================================


@api_router.post("/paste", response_class=HTMLResponse)
async def paste_code(
    request: Request,
    session_id: str = Form(...),
    code: str = Form(""),
    file_name: str = Form(""),
) -> HTMLResponse:
    """붙여넣은 코드 → 새 엔트리 + 생성 시작."""
    session = get_session(request, session_id)
    try:
        session.submit_pasted(code, file_name)
    except ValidationError as e:
        logger.info(f"Paste rejected: session={session_id} code={e.code}")
    return render_panel(request, session)


@api_router.post("/files", response_class=HTMLResponse)
async def upload_files(
    request: Request,
    session_id: str = Form(...),
    files: list[UploadFile] = File(...),
) -> HTMLResponse:
    """
    파일 업로드.

    활성 프로젝트가 있으면 추가, 없으면 새 프로젝트.
    """
    session = get_session(request, session_id)
    try:
        await session.add_files(files)
    except FileReadError as e:
        logger.warning(f"File upload failed: session={session_id} {e}")
    return render_panel(request, session)


@api_router.post("/image", response_class=HTMLResponse)
async def upload_image(
    request: Request,
    session_id: str = Form(...),
    image: UploadFile = File(...),
) -> HTMLResponse:
    """참고 이미지 설정."""
    session = get_session(request, session_id)
    try:
        await session.set_image(image)
    except (ValidationError, FileReadError) as e:
        logger.info(f"Image rejected: session={session_id} code={e.code}")
    return render_panel(request, session)


@api_router.delete("/image", response_class=HTMLResponse)
async def remove_image(request: Request, session_id: str) -> HTMLResponse:
    """참고 이미지 제거."""
    session = get_session(request, session_id)
    session.clear_image()
    return render_panel(request, session)


@api_router.post("/reset", response_class=HTMLResponse)
async def reset_session(
    request: Request,
    session_id: str = Form(...),
) -> HTMLResponse:
    """전체 초기화 (Start Over / Try Again)."""
    session = get_session(request, session_id)
    session.reset()
    return render_panel(request, session)


@api_router.get("/panel", response_class=HTMLResponse)
async def get_panel(request: Request, session_id: str) -> HTMLResponse:
    """패널 재렌더 (스트림 도중 에러/활성 엔트리 변경 시)."""
    return render_panel(request, get_session(request, session_id))


@api_router.get("/state")
async def get_state(request: Request, session_id: str) -> dict[str, Any]:
    """세션 상태 JSON."""
    return get_session(request, session_id).snapshot()


@api_router.get("/output", response_class=PlainTextResponse)
async def get_output(request: Request, session_id: str) -> PlainTextResponse:
    """활성 엔트리 출력 원문."""
    session = get_session(request, session_id)
    return PlainTextResponse(session.active_output())


# =============================================================================
# SSE
# =============================================================================


def format_sse(event: str, data: dict[str, Any]) -> str:
    """SSE 이벤트 1개."""
    return f"event: {event}\ndata: {json.dumps(data, ensure_ascii=False)}\n\n"


async def studio_events(
    session: StudioSession,
    is_disconnected: Callable[[], Awaitable[bool]],
    heartbeat_interval: float = HEARTBEAT_INTERVAL,
) -> AsyncGenerator[str, None]:
    """
    세션 상태 변화 → SSE 이벤트.

    - reset: 활성 엔트리가 바뀌었거나 출력이 다시 시작됨 (전체 출력 전송)
    - chunk: 마지막 전송 이후 늘어난 부분만
    - status: loading / error / active_path 변경
    - done: loading true → false
    """
    changed = session.notifier.subscribe()
    sent_key: tuple[str | None, int] | None = None
    sent_len = 0
    sent_status: dict[str, Any] | None = None

    try:
        while True:
            if await is_disconnected():
                break

            entry = session.active
            path = entry.path if entry is not None else None
            output = entry.generated_output if entry is not None else ""
            key = (path, entry.revision if entry is not None else 0)

            if key != sent_key or len(output) < sent_len:
                yield format_sse("reset", {"path": path, "output": output})
                sent_key, sent_len = key, len(output)
            elif len(output) > sent_len:
                yield format_sse("chunk", {"path": path, "chunk": output[sent_len:]})
                sent_len = len(output)

            status = {
                "active_path": path,
                "loading": session.is_loading,
                "error": session.error,
            }
            if status != sent_status:
                finished = (
                    sent_status is not None
                    and sent_status["loading"]
                    and not status["loading"]
                )
                yield format_sse("status", status)
                if finished:
                    yield format_sse("done", {"path": path, "error": session.error})
                sent_status = status

            try:
                await asyncio.wait_for(changed.wait(), timeout=heartbeat_interval)
            except TimeoutError:
                yield ": heartbeat\n\n"
            changed.clear()
    finally:
        session.notifier.unsubscribe(changed)


@api_router.get("/stream")
async def stream(request: Request, session_id: str) -> StreamingResponse:
    """
    SSE 스트림 (실시간 생성 출력).

    브라우저 EventSource 연동용.
    """
    session = get_session(request, session_id)

    return StreamingResponse(
        studio_events(session, request.is_disconnected),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
        },
    )
