"""Tag-condition evaluation."""

from __future__ import annotations

from functools import lru_cache
from typing import Iterable

from ..errors import TagValidationError
from ..replica.model import Tag, Task
from .model import Condition, Filter, Forbid, Require

# (required, tag): required=True for Require, False for Forbid.
CompiledConditions = tuple[tuple[bool, Tag], ...]


def compile_conditions(conditions: Iterable[Condition]) -> CompiledConditions:
    """Validate every condition's tag once, up front.

    Raises:
        TagValidationError: on the first malformed tag, before any task is
            looked at.
        TypeError: if an entry is neither ``Require`` nor ``Forbid``.
    """
    out: list[tuple[bool, Tag]] = []
    for cond in conditions:
        if isinstance(cond, Require):
            required = True
        elif isinstance(cond, Forbid):
            required = False
        else:
            raise TypeError(f"Unsupported condition {cond!r}")
        try:
            tag = Tag.parse(cond.tag)
        except TagValidationError as exc:
            raise TagValidationError(exc.tag, f"{exc.reason} (in {cond!r})") from exc
        out.append((required, tag))
    return tuple(out)


def match_compiled(compiled: CompiledConditions, task: Task) -> bool:
    for required, tag in compiled:
        if task.has_tag(tag) != required:
            return False
    return True


@lru_cache(maxsize=64)
def _compile_cached(conditions: tuple[Condition, ...]) -> CompiledConditions:
    return compile_conditions(conditions)


def matches(filter: Filter, task: Task) -> bool:
    """Return True if *task* satisfies every condition of *filter*.

    Compiled conditions are cached per condition tuple, so calling this in a
    loop validates each tag once.
    """
    return match_compiled(_compile_cached(filter.conditions), task)
