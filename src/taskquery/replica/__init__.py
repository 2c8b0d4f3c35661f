"""Task replica: the store the resolver reads from.

This package provides the task model, the abstract :class:`Replica` read
interface, and two adapters: an in-memory replica and a YAML-file view.
"""

from .file_replica import FileReplica, write_snapshot
from .interfaces import Replica
from .memory import InMemoryReplica
from .model import Tag, Task, TaskStatus

__all__ = [
    "FileReplica",
    "InMemoryReplica",
    "Replica",
    "Tag",
    "Task",
    "TaskStatus",
    "write_snapshot",
]
