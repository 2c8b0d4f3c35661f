"""Task model as seen by the resolver.

The replica owns every :class:`Task`; the resolver only reads them long enough
to test tags and hand them back to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from ..errors import TagValidationError


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class TaskStatus(str, Enum):
    """Lifecycle status of a task in the replica."""

    PENDING = "pending"
    COMPLETED = "completed"
    DELETED = "deleted"

    @property
    def is_terminal(self) -> bool:
        return self is not TaskStatus.PENDING


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

_TAG_FORBIDDEN = frozenset(":+-")


@dataclass(frozen=True)
class Tag:
    """A validated tag name.

    Tags must start with an alphabetic character and may not contain
    whitespace, ``:``, ``+`` or ``-`` anywhere after that.
    """

    name: str

    @classmethod
    def parse(cls, raw: str) -> "Tag":
        if not isinstance(raw, str):
            raise TagValidationError(repr(raw), f"tags must be strings, got {type(raw).__name__}")
        if not raw:
            raise TagValidationError(raw, "tags must have at least one character")
        if not raw[0].isalpha():
            raise TagValidationError(raw, "first character of a tag must be alphabetic")
        for ch in raw[1:]:
            if ch.isspace() or ch in _TAG_FORBIDDEN:
                raise TagValidationError(
                    raw, "characters other than the first must not be whitespace, ':', '+' or '-'"
                )
        return cls(raw)

    def __str__(self) -> str:
        return self.name


# ---------------------------------------------------------------------------
# Task dataclass
# ---------------------------------------------------------------------------

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Task:
    uuid: UUID = field(default_factory=uuid4)
    description: str = ""
    status: TaskStatus = TaskStatus.PENDING
    tags: set[str] = field(default_factory=set)
    modified: str = field(default_factory=_now_iso)

    def has_tag(self, tag: Tag) -> bool:
        return tag.name in self.tags

    def to_dict(self) -> dict[str, Any]:
        return {
            "uuid": str(self.uuid),
            "description": self.description,
            "status": self.status.value,
            "tags": sorted(self.tags),
            "modified": self.modified,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Task":
        """Build a task from its snapshot form.

        Raises ``ValueError`` (or ``KeyError``) on a missing or malformed uuid,
        status, description or tag list; callers translate that into a store
        error.
        """
        description = data.get("description") or ""
        if not isinstance(description, str):
            raise ValueError(f"description must be a string, got {type(description).__name__}")
        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise ValueError(f"tags must be a list of strings, got {tags!r}")
        return cls(
            uuid=UUID(str(data["uuid"])),
            description=description,
            status=TaskStatus(data.get("status") or TaskStatus.PENDING.value),
            tags=set(tags),
            modified=str(data.get("modified") or _now_iso()),
        )
