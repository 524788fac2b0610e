"""
Domain Constants: 스튜디오 전역 상수.

프롬프트, 기본 모델, 언어 감지 테이블 등 시스템 전반에서 사용되는 값들.
"""

import os

# =============================================================================
# Generation Defaults
# =============================================================================
# 실제 값은 default.yaml (ai.generation)이 SSOT. 여기는 config 누락 시 기본값.

DEFAULT_PROVIDER = "gemini"
DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-5"
DEFAULT_MAX_TOKENS = 16384

# 세션별 보관하는 생성 기록 개수
DEFAULT_MAX_RUNS = 20

# 업로드 파일 하나당 최대 크기
DEFAULT_MAX_UPLOAD_BYTES = 2 * 1024 * 1024

# =============================================================================
# Project Naming
# =============================================================================
# 파일 하나면 그 파일명, 여러 개면 "Project (N files)"
# 이름이 곧 registry path

PROJECT_NAME_TEMPLATE = "Project ({count} files)"

# =============================================================================
# ID Prefixes
# =============================================================================

RUN_ID_PREFIX = "RUN-"
SESSION_ID_PREFIX = "SES-"

# =============================================================================
# Prompts
# =============================================================================

SYSTEM_PROMPT = """You are an expert front-end engineer.
You receive one or more source files written in any language or framework.
Rebuild the behaviour and look of that code as ONE self-contained, runnable HTML document.

Rules:
- Output only the HTML document, starting with <!DOCTYPE html>. No markdown fences, no commentary.
- Inline all CSS in <style> and all JavaScript in <script>. CDN links are allowed for well-known libraries.
- Combine multiple files into a single coherent application; resolve imports between them.
- Replace server calls or native APIs with realistic in-browser mock data.
- If a reference image is provided, match its layout, colours and typography as closely as possible.
"""

USER_PROMPT_HEADER = "Convert the following project into a single runnable HTML file."

IMAGE_PROMPT_NOTE = "A reference image is attached. Use it as the visual target."

# =============================================================================
# Language Detection (파일 확장자 → 코드 펜스 언어)
# =============================================================================

LANGUAGE_BY_EXTENSION = {
    ".js": "javascript",
    ".jsx": "jsx",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".tsx": "tsx",
    ".py": "python",
    ".rb": "ruby",
    ".go": "go",
    ".rs": "rust",
    ".java": "java",
    ".kt": "kotlin",
    ".swift": "swift",
    ".dart": "dart",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cs": "csharp",
    ".php": "php",
    ".vue": "vue",
    ".svelte": "svelte",
    ".html": "html",
    ".htm": "html",
    ".css": "css",
    ".scss": "scss",
    ".json": "json",
    ".md": "markdown",
    ".sql": "sql",
    ".sh": "bash",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".txt": "text",
}

# =============================================================================
# MIME Types
# =============================================================================

IMAGE_MIME_PREFIX = "image/"

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}


def get_mime_type(filename: str) -> str:
    """
    파일명에서 MIME 타입 추출.

    Args:
        filename: 파일명 (확장자 포함)

    Returns:
        MIME 타입 문자열 (알 수 없으면 octet-stream)
    """
    ext = os.path.splitext(filename)[1].lower()
    return MIME_TYPES.get(ext, "application/octet-stream")


def get_language(filename: str) -> str:
    """파일명에서 코드 펜스 언어 추출 (모르면 빈 문자열)."""
    ext = os.path.splitext(filename)[1].lower()
    return LANGUAGE_BY_EXTENSION.get(ext, "")
