"""
Application Services.

역할:
- collector: 업로드/붙여넣기 → SourceFile, 참고 이미지
- orchestrator: 활성 엔트리 → 스트리밍 생성
- session: 브라우저 세션별 상태 묶음
"""

from .collector import read_files, read_image, validate_pasted_input
from .orchestrator import GenerationOrchestrator
from .session import SessionManager, StudioSession

__all__ = [
    "read_files",
    "read_image",
    "validate_pasted_input",
    "GenerationOrchestrator",
    "StudioSession",
    "SessionManager",
]
