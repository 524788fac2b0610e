"""
test_registry.py - Project Registry 전이 함수 테스트

검증:
- 중복 이름만 추가 → 상태 그대로 (같은 객체)
- 고유 파일 1개 이상 추가 → 출력 초기화 + revision 증가
- 청크는 도착 순서대로 누적
- reset 이후 청크 추가는 no-op
"""

import pytest

from src.core.registry import (
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
from src.domain.schemas import ProjectEntry, RegistryState, SourceFile


def sf(name: str, content: str = "x") -> SourceFile:
    return SourceFile(name=name, content=content)


@pytest.fixture
def project_state() -> RegistryState:
    """path "proj"에 a.js 하나, 출력 일부 있는 상태."""
    state = create_entry(RegistryState(), "proj", "proj", [sf("a.js")])
    return append_output_chunk(state, "proj", "<html>")


# =============================================================================
# create_entry
# =============================================================================


class TestCreateEntry:
    """create_entry 테스트."""

    def test_creates_entry_with_empty_output(self):
        """새 엔트리는 출력이 비어 있고 활성화됨."""
        state = create_entry(RegistryState(), "x.py", "x.py", [sf("x.py", "print(1)")])

        entry = state.entries["x.py"]
        assert entry.source_files == (SourceFile("x.py", "print(1)"),)
        assert entry.generated_output == ""
        assert entry.revision == 1
        assert state.active_path == "x.py"

    def test_overwrites_existing_path(self, project_state):
        """같은 path는 병합 없이 덮어씀."""
        state = create_entry(project_state, "proj", "proj", [sf("c.js")])

        entry = state.entries["proj"]
        assert entry.file_names == ["c.js"]
        assert entry.generated_output == ""
        assert entry.revision == 2

    def test_keeps_other_entries(self, project_state):
        """다른 path 엔트리는 유지, 활성 path만 변경."""
        state = create_entry(project_state, "b.py", "b.py", [sf("b.py")])

        assert set(state.entries) == {"proj", "b.py"}
        assert state.entries["proj"].generated_output == "<html>"
        assert state.active_path == "b.py"

    def test_does_not_mutate_previous_state(self):
        """이전 상태 객체는 그대로."""
        before = RegistryState()
        create_entry(before, "a", "a", [sf("a.js")])

        assert before.entries == {}
        assert before.active_path is None


# =============================================================================
# append_source_files
# =============================================================================


class TestAppendSourceFiles:
    """append_source_files 테스트."""

    def test_all_duplicates_is_noop(self, project_state):
        """전부 중복 → 같은 객체 반환 (출력 유지)."""
        state = append_source_files(project_state, "proj", [sf("a.js", "other")])

        assert state is project_state
        assert state.entries["proj"].generated_output == "<html>"

    def test_unknown_path_is_noop(self, project_state):
        """없는 path → no-op."""
        state = append_source_files(project_state, "missing", [sf("z.js")])

        assert state is project_state

    def test_partial_duplicates_append_unique_and_reset_output(self, project_state):
        """a.js(중복) + b.js → b.js만 추가, 출력 초기화."""
        state = append_source_files(project_state, "proj", [sf("a.js"), sf("b.js")])

        entry = state.entries["proj"]
        assert entry.file_names == ["a.js", "b.js"]
        assert entry.generated_output == ""
        assert entry.revision == 2

    def test_preserves_insertion_order(self, project_state):
        """추가 순서 유지."""
        state = append_source_files(
            project_state, "proj", [sf("c.js"), sf("b.js"), sf("d.js")]
        )

        assert state.entries["proj"].file_names == ["a.js", "c.js", "b.js", "d.js"]

    def test_duplicates_within_batch_keep_first(self, project_state):
        """같은 배치 안 중복은 첫 번째만."""
        state = append_source_files(
            project_state, "proj", [sf("b.js", "first"), sf("b.js", "second")]
        )

        files = state.entries["proj"].source_files
        assert [f.content for f in files if f.name == "b.js"] == ["first"]

    def test_existing_content_not_replaced(self, project_state):
        """중복 이름의 기존 내용은 바뀌지 않음."""
        state = append_source_files(project_state, "proj", [sf("a.js", "new"), sf("b.js")])

        assert state.entries["proj"].source_files[0] == sf("a.js", "x")

    def test_active_path_unchanged(self, project_state):
        """활성 path 유지."""
        state = create_entry(project_state, "other", "other", [sf("o.js")])
        state = append_source_files(state, "proj", [sf("b.js")])

        assert state.active_path == "other"


# =============================================================================
# append_output_chunk
# =============================================================================


class TestAppendOutputChunk:
    """append_output_chunk 테스트."""

    def test_chunks_accumulate_in_order(self):
        """["a","b","c"] → "abc"."""
        state = create_entry(RegistryState(), "p", "p", [sf("p.js")])
        for chunk in ["a", "b", "c"]:
            state = append_output_chunk(state, "p", chunk)

        assert state.entries["p"].generated_output == "abc"

    def test_order_matters(self):
        """다른 순서 → 다른 결과."""
        state = create_entry(RegistryState(), "p", "p", [sf("p.js")])
        for chunk in ["c", "a", "b"]:
            state = append_output_chunk(state, "p", chunk)

        assert state.entries["p"].generated_output == "cab"

    def test_unknown_path_is_noop(self, project_state):
        """없는 path → no-op."""
        state = append_output_chunk(project_state, "missing", "zzz")

        assert state is project_state

    def test_chunk_does_not_change_revision(self, project_state):
        """청크 추가는 revision 변경 없음."""
        state = append_output_chunk(project_state, "proj", "<body>")

        assert state.entries["proj"].revision == project_state.entries["proj"].revision


# =============================================================================
# reset / reduce
# =============================================================================


class TestResetAndReduce:
    """reset, reduce 테스트."""

    def test_reset_clears_everything(self, project_state):
        """registry + 활성 path 초기화."""
        state = reset(project_state)

        assert state.entries == {}
        assert state.active_path is None

    def test_chunk_after_reset_is_noop(self, project_state):
        """reset 후 청크 추가는 no-op."""
        cleared = reset(project_state)
        state = append_output_chunk(cleared, "proj", "late")

        assert state is cleared
        assert state.entries == {}

    def test_reset_empty_state_returns_same(self):
        """이미 비어 있으면 같은 객체."""
        empty = RegistryState()

        assert reset(empty) is empty

    def test_reduce_dispatches_events(self):
        """이벤트 → 전이 함수."""
        state = reduce(RegistryState(), CreateEntry("p", "p", (sf("a.js"),)))
        state = reduce(state, AppendOutputChunk("p", "<h1>"))
        state = reduce(state, AppendSourceFiles("p", (sf("b.js"),)))

        entry = state.entries["p"]
        assert entry.file_names == ["a.js", "b.js"]
        assert entry.generated_output == ""

        assert reduce(state, Reset()) == RegistryState()

    def test_reduce_unknown_event(self):
        """알 수 없는 이벤트 → TypeError."""
        with pytest.raises(TypeError):
            reduce(RegistryState(), object())  # type: ignore[arg-type]


# =============================================================================
# Derived Conditions
# =============================================================================


class TestDerivedConditions:
    """active_entry, needs_generation 테스트."""

    def test_active_entry_none_when_empty(self):
        assert active_entry(RegistryState()) is None

    def test_active_entry(self, project_state):
        assert active_entry(project_state).path == "proj"

    def test_needs_generation(self):
        """소스 있음 + 출력 비어 있음 → True."""
        assert needs_generation(ProjectEntry("p", "p", (sf("a.js"),), "")) is True
        assert needs_generation(ProjectEntry("p", "p", (sf("a.js"),), "<html>")) is False
        assert needs_generation(ProjectEntry("p", "p", (), "")) is False
        assert needs_generation(None) is False


# =============================================================================
# Store
# =============================================================================


class TestRegistryStore:
    """RegistryStore 테스트."""

    def test_dispatch_updates_state(self):
        store = RegistryStore()
        store.dispatch(CreateEntry("x.py", "x.py", (sf("x.py", "print(1)"),)))

        assert store.state.active_path == "x.py"

    def test_listener_called_on_change(self):
        """변경 시 (이전, 현재) 상태로 호출."""
        store = RegistryStore()
        calls = []
        store.subscribe(lambda old, new: calls.append((old, new)))

        store.dispatch(CreateEntry("p", "p", (sf("a.js"),)))

        assert len(calls) == 1
        assert calls[0][0] == RegistryState()
        assert calls[0][1] is store.state

    def test_listener_not_called_on_noop(self):
        """no-op 전이는 알림 없음."""
        store = RegistryStore()
        store.dispatch(CreateEntry("p", "p", (sf("a.js"),)))
        calls = []
        store.subscribe(lambda old, new: calls.append(new))

        store.dispatch(AppendSourceFiles("p", (sf("a.js"),)))
        store.dispatch(AppendOutputChunk("missing", "x"))

        assert calls == []

    def test_unsubscribe(self):
        store = RegistryStore()
        calls = []
        unsubscribe = store.subscribe(lambda old, new: calls.append(new))
        unsubscribe()

        store.dispatch(CreateEntry("p", "p", (sf("a.js"),)))

        assert calls == []
