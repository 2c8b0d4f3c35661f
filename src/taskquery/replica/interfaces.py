from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from .model import Task


class Replica(ABC):
    """Read side of a task replica, as consumed by the resolver.

    Working-set convention: slot 0 is an always-empty sentinel, so
    ``working_set()[0] is None`` and positional ids start at 1.

    Every method may raise :class:`~taskquery.errors.StoreError`. Methods are
    not assumed safe for concurrent use; callers hold the replica exclusively
    for the duration of a resolution.
    """

    @abstractmethod
    def all_tasks(self) -> dict[UUID, Task]:
        raise NotImplementedError

    @abstractmethod
    def working_set(self) -> list[Optional[Task]]:
        raise NotImplementedError

    @abstractmethod
    def get_task(self, uuid: UUID) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    def get_working_set_task(self, index: int) -> Optional[Task]:
        raise NotImplementedError

    @abstractmethod
    def get_working_set_index(self, uuid: UUID) -> Optional[int]:
        raise NotImplementedError
