"""Load optional resolver configuration from `.taskquery/config.yaml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

import yaml
from loguru import logger

STATE_DIR_NAME = ".taskquery"
CONFIG_FILE = "config.yaml"

AmbiguousPrefixPolicy = Literal["error", "smallest"]
VALID_AMBIGUOUS_PREFIX_POLICIES = {"error", "smallest"}


@dataclass(frozen=True)
class ResolverConfig:
    """Knobs for :func:`taskquery.query.resolver.resolve`.

    ambiguous_prefix:
        ``"error"`` rejects a partial id that matches several tasks;
        ``"smallest"`` picks the lexicographically smallest matching uuid.
    memoize_working_set:
        Build one uuid-to-slot map per resolution instead of asking the
        replica for each task's slot.
    """

    ambiguous_prefix: AmbiguousPrefixPolicy = "error"
    memoize_working_set: bool = True


def _load_data_with_error(path: Path) -> tuple[dict[str, Any], str | None]:
    if not path.exists():
        return {}, None
    try:
        with open(path, "r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except OSError as exc:
        return {}, f"{path.name}: {exc.__class__.__name__}: {exc}"
    except yaml.YAMLError as exc:
        return {}, f"{path.name}: YAMLError: {exc}"
    if data is None:
        return {}, None
    if not isinstance(data, dict):
        return {}, f"{path.name}: expected object, got {type(data).__name__}"
    return data, None


def load_config(project_dir: Path) -> tuple[dict[str, Any], str | None]:
    """Load the optional config file.

    Args:
        project_dir: Directory that holds the `.taskquery/` state directory.

    Returns:
        A tuple of `(config, error_message)`. If the file is missing, returns `({}, None)`.
    """
    path = project_dir.resolve() / STATE_DIR_NAME / CONFIG_FILE
    data, err = _load_data_with_error(path)
    if err:
        logger.warning("Ignoring unreadable config: {}", err)
        return {}, err
    return data, None


def get_resolver_config(config: dict[str, Any]) -> ResolverConfig:
    """Extract the `resolver` block, falling back to defaults for bad values.

    Args:
        config: Configuration dictionary as returned by `load_config`.

    Returns:
        A `ResolverConfig`.
    """
    raw = config.get("resolver") if isinstance(config, dict) else None
    if not isinstance(raw, dict):
        return ResolverConfig()

    policy = raw.get("ambiguous_prefix")
    if policy not in VALID_AMBIGUOUS_PREFIX_POLICIES:
        if policy is not None:
            logger.warning("Unknown resolver.ambiguous_prefix {!r}; using 'error'", policy)
        policy = "error"

    memoize = raw.get("memoize_working_set")
    if not isinstance(memoize, bool):
        memoize = True

    return ResolverConfig(ambiguous_prefix=policy, memoize_working_set=memoize)
