"""Resolve a :class:`Filter` against a replica.

The universe's shape picks one of four enumeration strategies:

* explicit list with a partial id: scan every task and match ids against it
  (a uuid prefix cannot be looked up directly);
* explicit list without partial ids: fetch each id directly;
* all tasks: one pass over the replica;
* pending tasks: one pass over the working set.

Every candidate is then tested against the tag conditions, and each matching
task is returned once no matter how many ids named it.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, Optional, Sequence
from uuid import UUID

from loguru import logger

from ..config import ResolverConfig
from ..errors import AmbiguousTaskIdError
from ..replica.interfaces import Replica
from ..replica.model import Task
from .model import (
    AllTasks,
    ExplicitList,
    Filter,
    FullId,
    PartialId,
    PendingTasks,
    PositionalId,
    TaskId,
)
from .predicate import CompiledConditions, compile_conditions, match_compiled

SlotLookup = Callable[[UUID], Optional[int]]


def resolve(
    filter: Filter,
    replica: Replica,
    *,
    config: Optional[ResolverConfig] = None,
) -> Iterator[Task]:
    """Return the tasks matching *filter*, each exactly once.

    Order is unspecified.  The whole result is gathered before the iterator
    is returned, so a store error raised part-way through leaves the caller
    with nothing rather than a partial answer.

    Raises:
        TagValidationError: a condition names a malformed tag (checked before
            the replica is read).
        AmbiguousTaskIdError: a partial id matched several tasks and the
            ``ambiguous_prefix`` policy is ``"error"``.
        StoreError: propagated unchanged from the replica.
    """
    cfg = config or ResolverConfig()
    compiled = compile_conditions(filter.conditions)
    universe = filter.universe

    if isinstance(universe, ExplicitList):
        if not universe.ids:
            return iter(())
        if universe.has_partial_ids:
            logger.debug("Resolving {} id(s) by scanning all tasks", len(universe.ids))
            candidates = _scan_and_match(universe.ids, replica, cfg)
        else:
            logger.debug("Resolving {} id(s) by direct lookup", len(universe.ids))
            candidates = _direct_fetch(universe.ids, replica)
        results = _collect(candidates, compiled, dedupe=True)

    # Both enumerations below are uuid-unique already.
    elif isinstance(universe, AllTasks):
        results = _collect(replica.all_tasks().values(), compiled, dedupe=False)

    elif isinstance(universe, PendingTasks):
        slots = replica.working_set()
        results = _collect((t for t in slots if t is not None), compiled, dedupe=False)

    else:
        raise TypeError(f"Unsupported universe {universe!r}")

    logger.debug("Filter matched {} task(s)", len(results))
    return iter(results)


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------

def _slot_lookup(ids: Sequence[TaskId], replica: Replica, cfg: ResolverConfig) -> SlotLookup:
    if not cfg.memoize_working_set or not any(isinstance(i, PositionalId) for i in ids):
        return replica.get_working_set_index
    # Valid for this call only: the replica is held exclusively while we resolve.
    slots = {t.uuid: i for i, t in enumerate(replica.working_set()) if i and t is not None}
    return slots.get


def _id_matches(task_id: TaskId, uuid: UUID, slot_of: SlotLookup) -> bool:
    if isinstance(task_id, FullId):
        return task_id.uuid == uuid
    if isinstance(task_id, PositionalId):
        return slot_of(uuid) == task_id.index
    return False


def _scan_and_match(ids: Sequence[TaskId], replica: Replica, cfg: ResolverConfig) -> list[Task]:
    all_tasks = replica.all_tasks()
    slot_of = _slot_lookup(ids, replica, cfg)
    exact_ids = [i for i in ids if not isinstance(i, PartialId)]
    prefixes = list(dict.fromkeys(i.prefix for i in ids if isinstance(i, PartialId)))

    matched: list[Task] = []
    prefix_hits: dict[str, list[UUID]] = {p: [] for p in prefixes}
    for uuid, task in all_tasks.items():
        text = str(uuid)
        for prefix in prefixes:
            if text.startswith(prefix):
                prefix_hits[prefix].append(uuid)
        if any(_id_matches(i, uuid, slot_of) for i in exact_ids):
            matched.append(task)

    for prefix in prefixes:
        hits = sorted(prefix_hits[prefix], key=str)
        if not hits:
            logger.debug("Partial id {!r} matched no task", prefix)
            continue
        if len(hits) > 1 and cfg.ambiguous_prefix == "error":
            raise AmbiguousTaskIdError(prefix, [str(h) for h in hits])
        matched.append(all_tasks[hits[0]])
    return matched


def _direct_fetch(ids: Sequence[TaskId], replica: Replica) -> Iterator[Task]:
    for task_id in ids:
        if isinstance(task_id, PositionalId):
            task = replica.get_working_set_task(task_id.index)
        elif isinstance(task_id, FullId):
            task = replica.get_task(task_id.uuid)
        else:
            raise TypeError(f"Unsupported task id {task_id!r}")
        if task is not None:
            yield task


def _collect(candidates: Iterable[Task], compiled: CompiledConditions, *, dedupe: bool) -> list[Task]:
    out: list[Task] = []
    seen: set[UUID] = set()
    for task in candidates:
        if dedupe:
            if task.uuid in seen:
                continue
            seen.add(task.uuid)
        if match_compiled(compiled, task):
            out.append(task)
    return out
