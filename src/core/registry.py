"""
Project Registry: path → ProjectEntry 상태 컨테이너.

규칙:
- 전이 함수는 순수 함수: (이전 상태, 입력) → 다음 상태
- no-op 전이는 같은 객체를 그대로 반환 (identity로 변경 여부 판단)
- 소스 파일 이름은 엔트리 안에서 유일 (병합 시 중복 제거)
- 소스 추가가 실제로 일어나면 출력 초기화 + revision 증가 → 재생성 트리거
"""

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from src.domain.schemas import ProjectEntry, RegistryState, SourceFile

logger = logging.getLogger(__name__)

# =============================================================================
# Events
# =============================================================================


@dataclass(frozen=True)
class CreateEntry:
    name: str
    path: str
    source_files: tuple[SourceFile, ...]


@dataclass(frozen=True)
class AppendSourceFiles:
    path: str
    new_files: tuple[SourceFile, ...]


@dataclass(frozen=True)
class AppendOutputChunk:
    path: str
    chunk: str


@dataclass(frozen=True)
class Reset:
    pass


RegistryEvent = CreateEntry | AppendSourceFiles | AppendOutputChunk | Reset

# =============================================================================
# Transitions
# =============================================================================


def create_entry(
    state: RegistryState,
    name: str,
    path: str,
    source_files: Iterable[SourceFile],
) -> RegistryState:
    """
    새 엔트리 추가 후 활성화.

    같은 path가 있으면 병합 없이 덮어씀 (revision은 이어서 증가).
    """
    previous = state.entries.get(path)
    entry = ProjectEntry(
        name=name,
        path=path,
        source_files=tuple(source_files),
        generated_output="",
        revision=previous.revision + 1 if previous is not None else 1,
    )
    return RegistryState(
        entries={**state.entries, path: entry},
        active_path=path,
    )


def append_source_files(
    state: RegistryState,
    path: str,
    new_files: Iterable[SourceFile],
) -> RegistryState:
    """
    기존 엔트리에 소스 파일 추가.

    no-op:
    - path 없음
    - 새 파일이 전부 기존 이름과 중복

    그 외: 중복 아닌 파일만 순서대로 추가, 출력 초기화, revision +1
    """
    entry = state.entries.get(path)
    if entry is None:
        return state

    seen = set(entry.file_names)
    unique: list[SourceFile] = []
    for f in new_files:
        # 같은 배치 안의 중복도 첫 번째만
        if f.name in seen:
            continue
        seen.add(f.name)
        unique.append(f)

    if not unique:
        return state

    updated = replace(
        entry,
        source_files=entry.source_files + tuple(unique),
        generated_output="",
        revision=entry.revision + 1,
    )
    return replace(state, entries={**state.entries, path: updated})


def append_output_chunk(state: RegistryState, path: str, chunk: str) -> RegistryState:
    """스트림 청크를 출력 뒤에 이어 붙임 (path 없으면 no-op)."""
    entry = state.entries.get(path)
    if entry is None:
        return state

    updated = replace(entry, generated_output=entry.generated_output + chunk)
    return replace(state, entries={**state.entries, path: updated})


def reset(state: RegistryState) -> RegistryState:
    """전체 초기화."""
    if not state.entries and state.active_path is None:
        return state
    return RegistryState()


def reduce(state: RegistryState, event: RegistryEvent) -> RegistryState:
    """이벤트 → 전이 함수 디스패치."""
    if isinstance(event, CreateEntry):
        return create_entry(state, event.name, event.path, event.source_files)
    if isinstance(event, AppendSourceFiles):
        return append_source_files(state, event.path, event.new_files)
    if isinstance(event, AppendOutputChunk):
        return append_output_chunk(state, event.path, event.chunk)
    if isinstance(event, Reset):
        return reset(state)
    raise TypeError(f"Unknown registry event: {event!r}")


# =============================================================================
# Derived Conditions
# =============================================================================


def active_entry(state: RegistryState) -> ProjectEntry | None:
    """활성 엔트리 (없으면 None)."""
    if state.active_path is None:
        return None
    return state.entries.get(state.active_path)


def needs_generation(entry: ProjectEntry | None) -> bool:
    """소스가 있고 출력이 비어 있으면 생성 필요."""
    if entry is None:
        return False
    return len(entry.source_files) > 0 and entry.generated_output == ""


# =============================================================================
# Store
# =============================================================================

Listener = Callable[[RegistryState, RegistryState], None]


class RegistryStore:
    """
    명시적 상태 컨테이너.

    Usage:
        store = RegistryStore()
        unsubscribe = store.subscribe(lambda old, new: ...)
        store.dispatch(CreateEntry("a.py", "a.py", (SourceFile("a.py", "print(1)"),)))
    """

    def __init__(self, state: RegistryState | None = None):
        self._state = state or RegistryState()
        self._listeners: list[Listener] = []

    @property
    def state(self) -> RegistryState:
        return self._state

    def dispatch(self, event: RegistryEvent) -> RegistryState:
        """
        이벤트 적용.

        상태가 실제로 바뀐 경우에만 리스너 호출.
        """
        previous = self._state
        current = reduce(previous, event)
        if current is previous:
            return current

        self._state = current
        if not isinstance(event, AppendOutputChunk):
            logger.debug(f"Registry transition: {type(event).__name__}")

        for listener in list(self._listeners):
            listener(previous, current)
        return current

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """리스너 등록. 반환값을 호출하면 해제."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
