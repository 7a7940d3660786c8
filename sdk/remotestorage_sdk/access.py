"""
Access checks for module-scoped clients.

An application claims access ("r" or "rw") on subtrees. The claim is stored
on the node where it starts, so a path is accessible when the node itself or
any of its ancestors carries a matching claim.

Invariants:
    - Access checks are performed before any read or write
    - The walk visits the path, each ancestor, and finally "" exactly once
"""

from __future__ import annotations

import logging

from .base import ROOT_MODULE, AccessMode, LocalStore
from .errors import InsufficientAccessError
from .paths import make_path, parent_path

logger = logging.getLogger(__name__)


def node_gives_access(store: LocalStore, path: str, mode: AccessMode) -> bool:
    """Check whether a node or one of its ancestors grants ``mode``.

    Args:
        store: Local store holding the access claims
        path: Absolute path to start from
        mode: Access mode to look for

    Returns:
        True if some node from ``path`` up to "" grants the mode
    """
    while True:
        node = store.get_node(path)
        if mode.value in (node.start_access or ""):
            return True
        if not path:
            return False
        path = parent_path(path)


def client_root(module_name: str, is_public: bool) -> str:
    """Absolute path of a client's own root."""
    return make_path(module_name, is_public, "/" if module_name == ROOT_MODULE else "")


def ensure_access(
    store: LocalStore,
    module_name: str,
    is_public: bool,
    mode: AccessMode,
) -> None:
    """Require that a client may use ``mode`` on its whole subtree.

    Raises:
        InsufficientAccessError: If no node grants the mode
    """
    path = client_root(module_name, is_public)
    if not node_gives_access(store, path, mode):
        logger.debug(
            "Access check failed",
            extra={"path": path, "mode": mode.value},
        )
        raise InsufficientAccessError(path, mode.value)
