"""Exception hierarchy for task resolution."""

from __future__ import annotations

from typing import Sequence


class TaskQueryError(Exception):
    """Base class for all errors raised by :mod:`taskquery`."""

    pass


class StoreError(TaskQueryError):
    """A replica read failed (I/O, decoding, lock timeout)."""

    pass


class TagValidationError(TaskQueryError, ValueError):
    """A tag string is not a well-formed tag."""

    def __init__(self, tag: str, reason: str) -> None:
        super().__init__(f"invalid tag {tag!r}: {reason}")
        self.tag = tag
        self.reason = reason


class InvalidTaskIdError(TaskQueryError, ValueError):
    pass


class AmbiguousTaskIdError(TaskQueryError):
    """A partial id matched more than one task."""

    def __init__(self, prefix: str, candidates: Sequence[str]) -> None:
        shown = ", ".join(candidates[:5])
        more = f" (+{len(candidates) - 5} more)" if len(candidates) > 5 else ""
        super().__init__(f"partial id {prefix!r} is ambiguous: matches {shown}{more}")
        self.prefix = prefix
        self.candidates = list(candidates)
