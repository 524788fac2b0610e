"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

import yaml
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from src.app.providers import create_provider
from src.app.routes import studio
from src.app.services.session import DEFAULT_MAX_SESSIONS, SessionManager
from src.core.logging import configure_logging
from src.domain.constants import DEFAULT_MAX_RUNS, DEFAULT_MAX_UPLOAD_BYTES
from src.domain.errors import ErrorCodes, StudioError

# =============================================================================
# Configuration
# =============================================================================


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = Path(__file__).parent.parent.parent / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def build_session_manager(config: dict) -> SessionManager:
    """config(studio 섹션) → SessionManager."""
    studio_config = config.get("studio", {})
    return SessionManager(
        create_provider(config),
        max_sessions=int(studio_config.get("max_sessions", DEFAULT_MAX_SESSIONS)),
        max_runs=int(studio_config.get("max_runs", DEFAULT_MAX_RUNS)),
        max_upload_bytes=int(
            studio_config.get("max_upload_bytes", DEFAULT_MAX_UPLOAD_BYTES)
        ),
    )


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: 설정 로드, 로깅 설정, 세션 매니저 생성
    종료 시: 진행 중인 생성 작업 취소
    """
    # Startup
    app.state.config = load_config()
    configure_logging(app.state.config)

    # 테스트에서 미리 주입한 세션 매니저가 있으면 그대로 사용
    if getattr(app.state, "sessions", None) is None:
        app.state.sessions = build_session_manager(app.state.config)

    yield

    # Shutdown
    app.state.sessions.close_all()
    app.state.sessions = None


# =============================================================================
# App Instance
# =============================================================================

app = FastAPI(
    title="Code to HTML Studio",
    description="소스 코드 → 실행 가능한 단일 HTML 문서 (AI 스트리밍 생성)",
    version="0.1.0",
    lifespan=lifespan,
)

# Static files (CSS, JS)
static_dir = Path(__file__).parent / "static"
if static_dir.exists():
    app.mount("/static", StaticFiles(directory=static_dir), name="static")


@app.exception_handler(StudioError)
async def studio_error_handler(request: Request, exc: StudioError) -> JSONResponse:
    """라우트에서 처리하지 않은 StudioError → JSON."""
    status_code = 404 if exc.code == ErrorCodes.SESSION_NOT_FOUND else 400
    return JSONResponse(status_code=status_code, content=exc.to_dict())


# =============================================================================
# Routes
# =============================================================================

# 페이지 라우트 (HTML)
app.include_router(studio.router, prefix="", tags=["Studio"])

# API 라우트
app.include_router(studio.api_router, prefix="/api/studio", tags=["Studio API"])


# =============================================================================
# Root Endpoints
# =============================================================================


@app.get("/health")
async def health() -> dict[str, str]:
    """헬스 체크."""
    return {"status": "ok"}


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
