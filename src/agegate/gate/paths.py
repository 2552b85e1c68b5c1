from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Iterable

FRONT = "<front>"


def _clean(path: str) -> str:
    path = (path or "").split("?", 1)[0].strip()
    return "/" + path.strip("/") if path.strip("/") else "/"


def path_matches(path: str, pattern: str) -> bool:
    """
    One pattern against one request path.
    Leading/trailing slashes are ignored, `*` is a wildcard, <front> is "/".
    """
    pattern = (pattern or "").strip()
    if not pattern:
        return False
    if pattern == FRONT:
        return _clean(path) == "/"
    return fnmatchcase(_clean(path), _clean(pattern))


def gate_applies(path: str, mode: str, patterns: Iterable[str]) -> bool:
    matched = any(path_matches(path, p) for p in patterns)
    if mode == "include":
        return matched
    return not matched
