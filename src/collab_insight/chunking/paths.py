"""Dependency, build-output and binary path detection."""

from typing import Iterable

from ..models import FileDelta


def is_skipped_path(path: str, patterns: Iterable[str]) -> bool:
    """True if path contains any skip pattern ("node_modules/", ".min.js", ...)."""
    if not path or path == "/dev/null":
        return False
    return any(p in path for p in patterns)


def drop_skipped(
    deltas: Iterable[FileDelta], patterns: Iterable[str]
) -> tuple[FileDelta, ...]:
    patterns = tuple(patterns)
    return tuple(d for d in deltas if not is_skipped_path(d.path, patterns))
