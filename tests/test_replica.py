"""Tests for the replica adapters (replica/memory.py, replica/file_replica.py)."""

from __future__ import annotations

from pathlib import Path
from uuid import UUID

import pytest
from filelock import FileLock

from taskquery.errors import StoreError, TagValidationError
from taskquery.query.model import ExplicitList, Filter, PartialId, PendingTasks, PositionalId, Require
from taskquery.query.resolver import resolve
from taskquery.replica.file_replica import LOCK_FILENAME, SNAPSHOT_FILENAME, FileReplica, write_snapshot
from taskquery.replica.memory import InMemoryReplica
from taskquery.replica.model import Task, TaskStatus

U1 = UUID("11111111-0000-4000-8000-000000000001")
U2 = UUID("22222222-0000-4000-8000-000000000002")
U3 = UUID("33333333-0000-4000-8000-000000000003")


@pytest.fixture
def state_dir(tmp_path: Path) -> Path:
    d = tmp_path / ".taskquery"
    d.mkdir()
    return d


@pytest.fixture
def seeded(state_dir: Path) -> FileReplica:
    tasks = [
        Task(uuid=U1, description="A", status=TaskStatus.PENDING, tags={"work"}),
        Task(uuid=U2, description="B", status=TaskStatus.COMPLETED),
        Task(uuid=U3, description="C", status=TaskStatus.PENDING, tags={"home"}),
    ]
    write_snapshot(state_dir, tasks, working_set=[U1, None, U3])
    return FileReplica(state_dir)


# ---------------------------------------------------------------------------
# InMemoryReplica
# ---------------------------------------------------------------------------

class TestInMemoryReplica:
    def test_sentinel_slot(self) -> None:
        r = InMemoryReplica()
        assert r.working_set() == [None]
        assert r.get_working_set_task(0) is None

    def test_pending_tasks_get_slots(self) -> None:
        r = InMemoryReplica()
        a = r.new_task(TaskStatus.PENDING, "A")
        r.new_task(TaskStatus.COMPLETED, "B")
        c = r.new_task(TaskStatus.PENDING, "C")
        assert r.get_working_set_index(a.uuid) == 1
        assert r.get_working_set_index(c.uuid) == 2
        assert r.get_working_set_task(2) is c
        assert r.get_working_set_task(3) is None
        assert r.get_working_set_task(-1) is None

    def test_rebuild_renumbers(self) -> None:
        r = InMemoryReplica()
        a = r.new_task(TaskStatus.PENDING, "A")
        b = r.new_task(TaskStatus.PENDING, "B")
        c = r.new_task(TaskStatus.PENDING, "C")
        b.status = TaskStatus.DELETED
        r.rebuild_working_set()
        assert r.working_set() == [None, a, c]

    def test_rebuild_without_renumber_keeps_gaps(self) -> None:
        r = InMemoryReplica()
        a = r.new_task(TaskStatus.PENDING, "A")
        b = r.new_task(TaskStatus.PENDING, "B")
        c = r.new_task(TaskStatus.PENDING, "C")
        b.status = TaskStatus.COMPLETED
        r.rebuild_working_set(renumber=False)
        assert r.working_set() == [None, a, None, c]
        assert r.get_working_set_index(c.uuid) == 3

    def test_add_tag_validates(self) -> None:
        r = InMemoryReplica()
        a = r.new_task(TaskStatus.PENDING, "A")
        r.add_tag(a.uuid, "ok")
        assert a.tags == {"ok"}
        with pytest.raises(TagValidationError):
            r.add_tag(a.uuid, "not ok")

    def test_add_tag_unknown_task(self) -> None:
        with pytest.raises(KeyError):
            InMemoryReplica().add_tag(U1, "ok")

    def test_all_tasks_is_a_copy(self) -> None:
        r = InMemoryReplica()
        r.new_task(TaskStatus.PENDING, "A")
        r.all_tasks().clear()
        assert len(r.all_tasks()) == 1


# ---------------------------------------------------------------------------
# FileReplica
# ---------------------------------------------------------------------------

class TestFileReplica:
    def test_missing_snapshot_is_empty(self, state_dir: Path) -> None:
        r = FileReplica(state_dir)
        assert r.all_tasks() == {}
        assert r.working_set() == [None]
        assert r.get_task(U1) is None

    def test_empty_file_is_empty(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text("", encoding="utf-8")
        assert FileReplica(state_dir).all_tasks() == {}

    def test_reads_tasks(self, seeded: FileReplica) -> None:
        tasks = seeded.all_tasks()
        assert set(tasks) == {U1, U2, U3}
        assert tasks[U1].tags == {"work"}
        assert tasks[U2].status is TaskStatus.COMPLETED

    def test_working_set_layout(self, seeded: FileReplica) -> None:
        ws = seeded.working_set()
        assert [t.uuid if t else None for t in ws] == [None, U1, None, U3]
        assert seeded.get_working_set_task(1).uuid == U1
        assert seeded.get_working_set_task(2) is None
        assert seeded.get_working_set_task(0) is None
        assert seeded.get_working_set_index(U3) == 3
        assert seeded.get_working_set_index(U2) is None

    def test_resolve_against_file(self, seeded: FileReplica) -> None:
        flt = Filter(universe=ExplicitList([PositionalId(3), PartialId("1111")]))
        assert sorted(t.description for t in resolve(flt, seeded)) == ["A", "C"]
        flt = Filter(universe=PendingTasks(), conditions=[Require("home")])
        assert [t.description for t in resolve(flt, seeded)] == ["C"]

    def test_snapshot_is_yaml(self, seeded: FileReplica, state_dir: Path) -> None:
        text = (state_dir / SNAPSHOT_FILENAME).read_text(encoding="utf-8")
        assert "version: 1" in text
        assert str(U1) in text

    def test_corrupt_yaml(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text("tasks: [unclosed", encoding="utf-8")
        with pytest.raises(StoreError, match="YAMLError|ScannerError|ParserError"):
            FileReplica(state_dir).all_tasks()

    def test_wrong_shape(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text("- just\n- a list\n", encoding="utf-8")
        with pytest.raises(StoreError, match="expected object"):
            FileReplica(state_dir).all_tasks()

    def test_bad_task_entry(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text(
            "tasks:\n  - uuid: not-a-uuid\n    description: x\n", encoding="utf-8"
        )
        with pytest.raises(StoreError, match="bad task entry"):
            FileReplica(state_dir).all_tasks()

    def test_bad_status(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text(
            f"tasks:\n  - uuid: {U1}\n    status: exploded\n", encoding="utf-8"
        )
        with pytest.raises(StoreError):
            FileReplica(state_dir).get_task(U1)

    def test_scalar_tags_rejected(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text(
            f"tasks:\n  - uuid: {U1}\n    tags: work\n", encoding="utf-8"
        )
        with pytest.raises(StoreError, match="tags must be a list"):
            FileReplica(state_dir).all_tasks()

    def test_non_string_tag_rejected(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text(
            f"tasks:\n  - uuid: {U1}\n    tags: [work, 7]\n", encoding="utf-8"
        )
        with pytest.raises(StoreError, match="tags must be a list"):
            FileReplica(state_dir).get_task(U1)

    def test_non_string_description_rejected(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text(
            f"tasks:\n  - uuid: {U1}\n    description: [a, b]\n", encoding="utf-8"
        )
        with pytest.raises(StoreError, match="description must be a string"):
            FileReplica(state_dir).all_tasks()

    @pytest.mark.parametrize("version", ["99", "0", "'1'", "true"])
    def test_unknown_version_rejected(self, state_dir: Path, version: str) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text(
            f"version: {version}\ntasks: []\n", encoding="utf-8"
        )
        with pytest.raises(StoreError, match="unsupported snapshot version"):
            FileReplica(state_dir).all_tasks()

    def test_unversioned_snapshot_reads_as_current(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text(
            f"tasks:\n  - uuid: {U1}\n    tags: [work]\n", encoding="utf-8"
        )
        assert FileReplica(state_dir).get_task(U1).tags == {"work"}

    def test_bad_working_set_entry(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text("tasks: []\nworking_set: [nope]\n", encoding="utf-8")
        with pytest.raises(StoreError, match="working-set"):
            FileReplica(state_dir).working_set()

    def test_store_error_aborts_resolution(self, state_dir: Path) -> None:
        (state_dir / SNAPSHOT_FILENAME).write_text("tasks: 5\n", encoding="utf-8")
        with pytest.raises(StoreError):
            resolve(Filter(), FileReplica(state_dir))

    def test_lock_timeout(self, seeded: FileReplica, state_dir: Path) -> None:
        replica = FileReplica(state_dir, lock_timeout=0.05)
        holder = FileLock(str(state_dir / LOCK_FILENAME))
        with holder:
            with pytest.raises(StoreError, match="timed out"):
                replica.all_tasks()
        assert set(replica.all_tasks()) == {U1, U2, U3}
