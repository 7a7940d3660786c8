"""
Path resolution for module-scoped clients.

A module's private data lives under ``/<module>/`` and its public data under
``/public/<module>/``. The ``root`` module sees the whole tree.

Pure functions with no I/O.

Invariants:
    - make_path is deterministic: same inputs always give the same path
    - extract_module_name(make_path(m, p, x)) == m for any non-root m and
      any non-empty x
"""

from __future__ import annotations

import re
from typing import Any

from .base import ROOT_MODULE

PUBLIC_PREFIX = "/public"

_IS_PUBLIC_RE = re.compile(r"^/public/")
_LAST_SEGMENT_RE = re.compile(r"[^/]+/?$")


def make_path(module_name: str, is_public: bool, relative_path: str) -> str:
    """Turn a module-relative path into an absolute storage path.

    Args:
        module_name: Name of the owning module
        is_public: Whether to resolve into the public subtree
        relative_path: Path relative to the module root

    Returns:
        Absolute path

    Example:
        >>> make_path("tasks", True, "x")
        '/public/tasks/x'
    """
    if module_name == ROOT_MODULE:
        base = "" if relative_path.startswith("/") else "/"
    else:
        base = f"/{module_name}/"
    if is_public:
        base = PUBLIC_PREFIX + base
    return base + relative_path


def extract_module_name(path: Any) -> str | None:
    """Find the module owning an absolute path.

    Returns None when the path is too short to name a module.
    """
    if not path or not isinstance(path, str):
        return None
    parts = path.split("/")
    if len(parts) > 3 and parts[1] == "public":
        return parts[2]
    if len(parts) > 2:
        return parts[1]
    return None


def is_public(path: str) -> bool:
    return bool(path) and _IS_PUBLIC_RE.match(path) is not None


def is_dir(path: str) -> bool:
    return path.endswith("/")


def parent_path(path: str) -> str:
    """Strip the last segment of a path.

    "/a/b" and "/a/b/" both give "/a/". "/" gives "", which has no parent.
    """
    stripped = _LAST_SEGMENT_RE.sub("", path)
    if stripped == path:
        return ""
    return stripped


def containing_dir(path: str) -> str:
    """Directory holding a path, "/" for top-level entries."""
    return parent_path(path) or "/"


def base_name(path: str) -> str:
    """Last segment of a path, keeping the trailing slash of directories."""
    if is_dir(path):
        return path.rstrip("/").split("/")[-1] + "/"
    return path.split("/")[-1]
