from .model import (
    AllTasks,
    Condition,
    ExplicitList,
    Filter,
    Forbid,
    FullId,
    PartialId,
    PendingTasks,
    PositionalId,
    Require,
    TaskId,
    Universe,
)
from .parse import parse_task_id
from .predicate import compile_conditions, matches
from .resolver import resolve

__all__ = [
    "AllTasks",
    "Condition",
    "ExplicitList",
    "Filter",
    "Forbid",
    "FullId",
    "PartialId",
    "PendingTasks",
    "PositionalId",
    "Require",
    "TaskId",
    "Universe",
    "compile_conditions",
    "matches",
    "parse_task_id",
    "resolve",
]
