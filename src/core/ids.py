"""
ID 생성: session_id, run_id

규칙:
- 세션 ID는 브라우저 세션마다 새로 발급
- run_id는 생성 시도마다 새로 발급
"""

import uuid
from datetime import UTC, datetime

from src.domain.constants import RUN_ID_PREFIX, SESSION_ID_PREFIX


def generate_session_id() -> str:
    """
    Session ID 생성.

    포맷: SES-{uuid hex}

    Returns:
        session_id 문자열
    """
    return f"{SESSION_ID_PREFIX}{uuid.uuid4().hex}"


def generate_run_id() -> str:
    """
    Run ID 생성.

    고유성 보장: UUID v4
    포맷: RUN-{timestamp}-{uuid[:8]}

    Returns:
        run_id 문자열
    """
    now = datetime.now(UTC)
    timestamp = now.strftime("%Y%m%d%H%M%S")
    unique = uuid.uuid4().hex[:8]

    return f"{RUN_ID_PREFIX}{timestamp}-{unique}"


def sanitize_path_key(value: str) -> str:
    """
    registry path로 쓸 문자열 정리.

    - 앞뒤 공백 제거
    - 역슬래시 → 슬래시
    - 연속 슬래시 정리
    """
    cleaned = value.strip().replace("\\", "/")
    while "//" in cleaned:
        cleaned = cleaned.replace("//", "/")
    return cleaned
