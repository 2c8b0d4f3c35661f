"""File-based replica view with exclusive locking.

Reads a single YAML snapshot (``replica.yaml``) inside a state directory.  Every
read goes through an exclusive file lock so a concurrent writer never hands us
a half-written snapshot.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional
from uuid import UUID

import yaml
from filelock import FileLock, Timeout
from loguru import logger

from ..errors import StoreError
from .interfaces import Replica
from .model import Task

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SNAPSHOT_FILENAME = "replica.yaml"
LOCK_FILENAME = "replica.lock"
LOCK_TIMEOUT = 30  # seconds
SNAPSHOT_VERSION = 1


# ---------------------------------------------------------------------------
# Low-level I/O
# ---------------------------------------------------------------------------

def _load_raw(path: Path) -> dict[str, Any]:
    """Load the raw snapshot from *path*, returning an empty one if missing."""
    if not path.exists():
        return {"tasks": [], "working_set": []}
    try:
        text = path.read_text(encoding="utf-8")
        data = yaml.safe_load(text)
    except (OSError, yaml.YAMLError) as exc:
        raise StoreError(f"{path.name}: {exc.__class__.__name__}: {exc}") from exc
    if data is None:
        return {"tasks": [], "working_set": []}
    if not isinstance(data, dict):
        raise StoreError(f"{path.name}: expected object, got {type(data).__name__}")
    return data


def _save_raw(path: Path, payload: dict[str, Any]) -> None:
    """Atomically write *payload* to *path* (write-tmp-then-rename)."""
    parent = path.parent
    parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=str(parent), suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            yaml.safe_dump(payload, fh, default_flow_style=False, sort_keys=False)
        shutil.move(tmp, str(path))
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def _decode(path: Path, data: dict[str, Any]) -> tuple[dict[UUID, Task], list[Optional[UUID]]]:
    # A snapshot without a version predates versioning and reads as version 1.
    version = data.get("version", SNAPSHOT_VERSION)
    if isinstance(version, bool) or version != SNAPSHOT_VERSION:
        raise StoreError(f"{path.name}: unsupported snapshot version {version!r}")

    raw_tasks = data.get("tasks") or []
    raw_slots = data.get("working_set") or []
    if not isinstance(raw_tasks, list) or not isinstance(raw_slots, list):
        raise StoreError(f"{path.name}: 'tasks' and 'working_set' must be lists")

    tasks: dict[UUID, Task] = {}
    for item in raw_tasks:
        if not isinstance(item, dict):
            raise StoreError(f"{path.name}: task entry must be an object, got {type(item).__name__}")
        try:
            task = Task.from_dict(item)
        except (KeyError, ValueError) as exc:
            raise StoreError(f"{path.name}: bad task entry {item!r}: {exc}") from exc
        tasks[task.uuid] = task

    # Snapshot lists slot 1 first; slot 0 is the sentinel.
    slots: list[Optional[UUID]] = [None]
    for raw in raw_slots:
        if raw is None:
            slots.append(None)
            continue
        try:
            slots.append(UUID(str(raw)))
        except ValueError as exc:
            raise StoreError(f"{path.name}: bad working-set entry {raw!r}") from exc
    return tasks, slots


def write_snapshot(
    state_dir: Path,
    tasks: Iterable[Task],
    working_set: Iterable[Optional[UUID]] = (),
) -> Path:
    """Write a replica snapshot under *state_dir*.

    *working_set* lists the occupants of slots 1, 2, ... in order (``None``
    for an empty slot).
    """
    path = state_dir / SNAPSHOT_FILENAME
    payload = {
        "version": SNAPSHOT_VERSION,
        "tasks": [t.to_dict() for t in tasks],
        "working_set": [str(u) if u is not None else None for u in working_set],
    }
    with FileLock(str(state_dir / LOCK_FILENAME), timeout=LOCK_TIMEOUT):
        _save_raw(path, payload)
    return path


# ---------------------------------------------------------------------------
# FileReplica
# ---------------------------------------------------------------------------

class FileReplica(Replica):
    """Read-only, file-backed :class:`Replica`.

    Parameters
    ----------
    state_dir:
        Directory holding ``replica.yaml`` and its lock file.
    """

    def __init__(self, state_dir: Path, lock_timeout: float = LOCK_TIMEOUT) -> None:
        self._state_dir = state_dir
        self._snapshot_path = state_dir / SNAPSHOT_FILENAME
        self._lock = FileLock(str(state_dir / LOCK_FILENAME), timeout=lock_timeout)

    @contextmanager
    def _snapshot(self) -> Iterator[tuple[dict[UUID, Task], list[Optional[UUID]]]]:
        try:
            self._lock.acquire()
        except Timeout as exc:
            raise StoreError(f"timed out waiting for {self._lock.lock_file}") from exc
        try:
            data = _load_raw(self._snapshot_path)
            yield _decode(self._snapshot_path, data)
        finally:
            self._lock.release()

    # -- Replica ------------------------------------------------------------

    def all_tasks(self) -> dict[UUID, Task]:
        with self._snapshot() as (tasks, _):
            logger.debug("Loaded {} task(s) from {}", len(tasks), self._snapshot_path)
            return tasks

    def working_set(self) -> list[Optional[Task]]:
        with self._snapshot() as (tasks, slots):
            return [tasks.get(u) if u is not None else None for u in slots]

    def get_task(self, uuid: UUID) -> Optional[Task]:
        with self._snapshot() as (tasks, _):
            return tasks.get(uuid)

    def get_working_set_task(self, index: int) -> Optional[Task]:
        with self._snapshot() as (tasks, slots):
            if index <= 0 or index >= len(slots):
                return None
            uuid = slots[index]
            return tasks.get(uuid) if uuid is not None else None

    def get_working_set_index(self, uuid: UUID) -> Optional[int]:
        with self._snapshot() as (_, slots):
            for i, slot in enumerate(slots):
                if i and slot == uuid:
                    return i
            return None
