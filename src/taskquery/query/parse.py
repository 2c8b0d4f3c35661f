"""Turn user-typed task references into :data:`TaskId` values."""

from __future__ import annotations

import re
from uuid import UUID

from ..errors import InvalidTaskIdError
from .model import FullId, PartialId, PositionalId, TaskId

_POSITIONAL_RE = re.compile(r"^[0-9]+$")
_FULL_UUID_RE = re.compile(r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$")
_PARTIAL_RE = re.compile(r"^[0-9a-fA-F][0-9a-fA-F-]*$")


def parse_task_id(text: str) -> TaskId:
    """Classify *text* as a working-set index, a full uuid, or a uuid prefix.

    All-digit strings are positional; ``"12"`` means working-set slot 12, not
    a uuid prefix.  Prefixes are kept verbatim (no case folding), so they only
    match the lowercase text form the replica produces if typed in lowercase.
    """
    s = (text or "").strip()
    if _POSITIONAL_RE.match(s):
        return PositionalId(int(s))
    if _FULL_UUID_RE.match(s):
        return FullId(UUID(s))
    if _PARTIAL_RE.match(s):
        return PartialId(s)
    raise InvalidTaskIdError(f"not a task id: {text!r}")
