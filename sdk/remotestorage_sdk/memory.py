"""
In-memory collaborators for the scoped client.

This module provides simple in-memory implementations of the LocalStore,
Synchronizer and WireClient protocols for:
- Unit tests
- Integration tests
- Local development without a remote storage account

Invariants:
    - All data is lost on process exit
    - Writing a data node keeps the listings of all its ancestors current
    - Local (outgoing) writes mark every ancestor's diff until pushed
    - Incoming writes emit ``change`` events with origin ``remote``

How to change safely:
    - This is test-only code, changes don't affect the client core
    - Keep interfaces compatible with the protocols in base.py
"""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Any, Callable, Deque, Dict, Optional, Tuple

from .base import (
    EVENT_CHANGE,
    EVENT_CONFLICT,
    ChangeEvent,
    ChangeOrigin,
    ConflictEvent,
    DoneCallback,
    EventHandler,
    FetchCallback,
    Node,
    SyncOneCallback,
)
from .events import EventFacade
from .paths import base_name, containing_dir, is_dir

logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class InMemoryStore:
    """Local store keeping nodes in a dict keyed by absolute path.

    Example:
        >>> store = InMemoryStore()
        >>> store.set_node_access("/tasks/", "rw")
        >>> store.set_node_data("/tasks/a", {"title": "A"}, True)
        >>> store.get_node_data("/tasks/")
        {'a': ...}
    """

    def __init__(self) -> None:
        self._nodes: Dict[str, Node] = {}
        self._events = EventFacade(EVENT_CHANGE)

    def on(self, event_name: str, handler: EventHandler) -> None:
        self._events.on(event_name, handler)

    def _node_for_update(self, path: str) -> Node:
        node = self._nodes.get(path)
        if node is None:
            node = Node()
            self._nodes[path] = node
        return node

    def get_node(self, path: str) -> Node:
        """Node at ``path``, or a fresh default node if nothing is cached."""
        node = self._nodes.get(path)
        return node if node is not None else Node()

    def get_node_data(self, path: str) -> Any:
        node = self._nodes.get(path)
        return node.data if node is not None else None

    def set_node_data(
        self,
        path: str,
        value: Any,
        outgoing: bool,
        timestamp: Optional[int] = None,
        mime_type: Optional[str] = None,
    ) -> None:
        """Write a data node and update the listings above it.

        Args:
            path: Absolute path of a data node
            value: New value, None to remove
            outgoing: True for local writes not yet pushed to the server
            timestamp: Update time (Unix ms), now if omitted
            mime_type: MIME type of the value
        """
        if is_dir(path):
            raise ValueError(f"Cannot store data on directory path {path}")

        timestamp = timestamp or _now_ms()
        node = self._node_for_update(path)
        old_value = node.data
        node.data = value
        node.mime_type = mime_type if value is not None else None
        node.timestamp = timestamp
        self._update_ancestors(path, value is None, outgoing, timestamp)

        if not outgoing:
            self._events.emit(
                EVENT_CHANGE,
                ChangeEvent(
                    path=path,
                    origin=ChangeOrigin.REMOTE,
                    old_value=old_value,
                    new_value=value,
                ),
            )

    def _update_ancestors(self, path: str, removed: bool, outgoing: bool, timestamp: int) -> None:
        child = path
        while child != "/":
            parent = self._node_for_update(containing_dir(child))
            name = base_name(child)
            listing = parent.data if isinstance(parent.data, dict) else {}
            if removed and child == path:
                listing.pop(name, None)
            else:
                listing[name] = timestamp
            parent.data = listing
            parent.timestamp = timestamp
            if outgoing:
                parent.diff[name] = timestamp
            elif child == path:
                parent.diff.pop(name, None)
            child = containing_dir(child)

    def set_node_force(self, path: str, force_data: bool, force_tree: bool) -> None:
        node = self._node_for_update(path)
        node.start_force = force_data
        node.start_force_tree = force_tree

    def set_node_access(self, path: str, claim: Optional[str]) -> None:
        """Record an access claim ("r" or "rw") starting at ``path``."""
        self._node_for_update(path).start_access = claim

    def mark_synced(self, path: str) -> None:
        """Clear the diff markers a local write left on its ancestors."""
        child = path
        while child != "/":
            parent_path = containing_dir(child)
            parent = self._nodes.get(parent_path)
            if parent is None:
                break
            parent.diff.pop(base_name(child), None)
            if parent.diff:
                break
            child = parent_path

    def is_outgoing(self, path: str) -> bool:
        parent = self._nodes.get(containing_dir(path))
        return parent is not None and base_name(path) in parent.diff


class InMemorySynchronizer:
    """Synchronizer against a dict standing in for the remote server.

    Work is queued and runs on ``flush()``. With ``auto_flush`` every request
    runs as soon as it is made.

    Example:
        >>> sync = InMemorySynchronizer(store)
        >>> sync.put_remote("/tasks/a", {"title": "A"})
        >>> sync.sync_one("/tasks/a", lambda node, data: print(data))
        >>> sync.flush()
        {'title': 'A'}
        1
    """

    def __init__(self, store: InMemoryStore, auto_flush: bool = False) -> None:
        self.store = store
        self.auto_flush = auto_flush
        self.remote: Dict[str, Tuple[Any, Optional[str]]] = {}
        self._pending: Deque[Callable[[], None]] = deque()
        self._events = EventFacade(EVENT_CONFLICT)

    def on(self, event_name: str, handler: EventHandler) -> None:
        self._events.on(event_name, handler)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def put_remote(self, path: str, data: Any, mime_type: str = "application/json") -> None:
        """Place a document on the simulated server."""
        self.remote[path] = (data, mime_type)

    def report_conflict(self, path: str, conflict_type: str = "PUT") -> None:
        """Emit a conflict between the cached and the remote value of ``path``."""
        remote_value = self.remote.get(path, (None, None))[0]
        self._events.emit(
            EVENT_CONFLICT,
            ConflictEvent(
                path=path,
                type=conflict_type,
                local_value=self.store.get_node_data(path),
                remote_value=remote_value,
            ),
        )

    def _schedule(self, task: Callable[[], None]) -> None:
        self._pending.append(task)
        if self.auto_flush:
            self.flush()

    def flush(self) -> int:
        """Run queued work, including work queued meanwhile.

        Returns:
            Number of tasks run
        """
        count = 0
        while self._pending:
            task = self._pending.popleft()
            task()
            count += 1
        return count

    def _push(self, path: str) -> None:
        data = self.store.get_node_data(path)
        if data is None:
            self.remote.pop(path, None)
        else:
            self.remote[path] = (data, self.store.get_node(path).mime_type)
        self.store.mark_synced(path)
        logger.debug("Pushed", extra={"path": path})

    def _pull(self, path: str) -> None:
        if path in self.remote:
            data, mime_type = self.remote[path]
            if self.store.get_node_data(path) != data:
                self.store.set_node_data(path, data, False, None, mime_type)

    def _pull_tree(self, path: str, depth: Optional[int] = None) -> None:
        for remote_path in sorted(self.remote):
            if not remote_path.startswith(path):
                continue
            if depth is not None and remote_path[len(path):].count("/") >= depth:
                continue
            if not self.store.is_outgoing(remote_path):
                self._pull(remote_path)

    def sync_one(self, path: str, callback: SyncOneCallback) -> None:
        def task() -> None:
            if self.store.is_outgoing(path):
                self._push(path)
            else:
                self._pull(path)
            callback(self.store.get_node(path), self.store.get_node_data(path))

        self._schedule(task)

    def fetch_now(self, path: str, callback: FetchCallback) -> None:
        def task() -> None:
            self._pull_tree(path)
            callback(None, self.store.get_node(path))

        self._schedule(task)

    def partial_sync(self, path: str, depth: int, callback: DoneCallback) -> None:
        def task() -> None:
            self._pull_tree(path, depth)
            callback()

        self._schedule(task)


class StaticWireClient:
    """Wire client with a fixed storage href; None means disconnected."""

    def __init__(self, href: Optional[str] = None) -> None:
        self._href = href

    def connect(self, href: str) -> None:
        self._href = href

    def disconnect(self) -> None:
        self._href = None

    def get_storage_href(self) -> Optional[str]:
        return self._href
