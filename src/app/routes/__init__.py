"""
FastAPI Routes.

페이지 라우트 (HTML) + API 라우트 (HTMX partial + SSE)
"""

from . import studio

__all__ = ["studio"]
