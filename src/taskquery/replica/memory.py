"""Dict-backed replica for embedding and tests."""

from __future__ import annotations

from typing import Optional
from uuid import UUID, uuid4

from loguru import logger

from .interfaces import Replica
from .model import Tag, Task, TaskStatus


class InMemoryReplica(Replica):
    """Replica held entirely in memory.

    The seeding helpers (:meth:`new_task`, :meth:`add_tag`,
    :meth:`rebuild_working_set`) exist to populate fixtures; they do not try
    to model a full mutation API.
    """

    def __init__(self) -> None:
        self._tasks: dict[UUID, Task] = {}
        self._working_set: list[Optional[UUID]] = [None]

    # -- seeding ------------------------------------------------------------

    def new_task(self, status: TaskStatus, description: str, uuid: Optional[UUID] = None) -> Task:
        task = Task(uuid=uuid or uuid4(), description=description, status=status)
        self._tasks[task.uuid] = task
        if status is TaskStatus.PENDING:
            self._working_set.append(task.uuid)
        logger.debug("Seeded task {} status={} description={!r}", task.uuid, status.value, description)
        return task

    def add_tag(self, uuid: UUID, tag: str | Tag) -> Task:
        if not isinstance(tag, Tag):
            tag = Tag.parse(tag)
        task = self._tasks.get(uuid)
        if task is None:
            raise KeyError(f"No task {uuid}")
        task.tags.add(tag.name)
        return task

    def rebuild_working_set(self, renumber: bool = True) -> None:
        """Drop terminal tasks from the working set.

        With *renumber*, surviving tasks are compacted into slots ``1..n``
        keeping their relative order; otherwise vacated slots stay empty.
        """
        slots: list[Optional[UUID]] = [None]
        for uuid in self._working_set[1:]:
            task = self._tasks.get(uuid) if uuid is not None else None
            keep = task is not None and not task.status.is_terminal
            if keep:
                slots.append(uuid)
            elif not renumber:
                slots.append(None)
        self._working_set = slots

    # -- Replica ------------------------------------------------------------

    def all_tasks(self) -> dict[UUID, Task]:
        return dict(self._tasks)

    def working_set(self) -> list[Optional[Task]]:
        return [self._tasks.get(u) if u is not None else None for u in self._working_set]

    def get_task(self, uuid: UUID) -> Optional[Task]:
        return self._tasks.get(uuid)

    def get_working_set_task(self, index: int) -> Optional[Task]:
        if index <= 0 or index >= len(self._working_set):
            return None
        uuid = self._working_set[index]
        return self._tasks.get(uuid) if uuid is not None else None

    def get_working_set_index(self, uuid: UUID) -> Optional[int]:
        for i, slot in enumerate(self._working_set):
            if i and slot == uuid:
                return i
        return None
