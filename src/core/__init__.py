"""
Core layer: 상태 전이 핵심 모듈.

UI/네트워크와 무관한 순수 로직만 둔다 → 렌더링 없이 단위 테스트 가능

역할:
- Project Registry (리듀서 + store), ID, 실행 기록
"""

from .ids import generate_run_id, generate_session_id
from .logging import append_run, complete_run, configure_logging, create_run
from .registry import (
    AppendOutputChunk,
    AppendSourceFiles,
    CreateEntry,
    RegistryStore,
    Reset,
    active_entry,
    append_output_chunk,
    append_source_files,
    create_entry,
    needs_generation,
    reduce,
    reset,
)

__all__ = [
    # registry
    "RegistryStore",
    "CreateEntry",
    "AppendSourceFiles",
    "AppendOutputChunk",
    "Reset",
    "create_entry",
    "append_source_files",
    "append_output_chunk",
    "reset",
    "reduce",
    "active_entry",
    "needs_generation",
    # ids
    "generate_session_id",
    "generate_run_id",
    # logging
    "configure_logging",
    "create_run",
    "complete_run",
    "append_run",
]
