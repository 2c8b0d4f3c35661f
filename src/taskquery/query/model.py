"""Declarative query model: which tasks, and which of those.

A :class:`Filter` pairs a universe (the candidate space) with a conjunction of
tag conditions.  Everything here is immutable data; resolution lives in
:mod:`taskquery.query.resolver`.
"""

from __future__ import annotations

from uuid import UUID
from dataclasses import dataclass, field
from typing import Union


# ---------------------------------------------------------------------------
# Task identifiers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FullId:
    """An exact task uuid."""

    uuid: UUID


@dataclass(frozen=True)
class PartialId:
    """A prefix of a uuid's text form, matched case-sensitively."""

    prefix: str


@dataclass(frozen=True)
class PositionalId:
    """A 1-based slot in the replica's working set."""

    index: int


TaskId = Union[FullId, PartialId, PositionalId]


# ---------------------------------------------------------------------------
# Universes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExplicitList:
    """Tasks the caller named one by one, in the order given."""

    ids: tuple[TaskId, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "ids", tuple(self.ids))

    @property
    def has_partial_ids(self) -> bool:
        return any(isinstance(i, PartialId) for i in self.ids)


@dataclass(frozen=True)
class AllTasks:
    pass


@dataclass(frozen=True)
class PendingTasks:
    pass


Universe = Union[ExplicitList, AllTasks, PendingTasks]


# ---------------------------------------------------------------------------
# Tag conditions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Require:
    tag: str


@dataclass(frozen=True)
class Forbid:
    tag: str


Condition = Union[Require, Forbid]


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Filter:
    """Universe plus conditions, ANDed together.

    ``Filter()`` selects every task.  Override only what you need, e.g.
    ``Filter(conditions=[Require("work")])``.
    """

    universe: Universe = field(default_factory=AllTasks)
    conditions: tuple[Condition, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "conditions", tuple(self.conditions))
