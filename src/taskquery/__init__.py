"""Provide the public `taskquery` package exports."""

from __future__ import annotations

from .config import ResolverConfig, get_resolver_config, load_config
from .errors import (
    AmbiguousTaskIdError,
    InvalidTaskIdError,
    StoreError,
    TagValidationError,
    TaskQueryError,
)
from .query import (
    AllTasks,
    ExplicitList,
    Filter,
    Forbid,
    FullId,
    PartialId,
    PendingTasks,
    PositionalId,
    Require,
    matches,
    parse_task_id,
    resolve,
)

__all__ = [
    "AllTasks",
    "AmbiguousTaskIdError",
    "ExplicitList",
    "Filter",
    "Forbid",
    "FullId",
    "InvalidTaskIdError",
    "PartialId",
    "PendingTasks",
    "PositionalId",
    "Require",
    "ResolverConfig",
    "StoreError",
    "TagValidationError",
    "TaskQueryError",
    "get_resolver_config",
    "load_config",
    "matches",
    "parse_task_id",
    "resolve",
]
