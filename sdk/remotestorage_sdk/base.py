"""
Base protocols and types shared by the scoped client and its collaborators.

The scoped client does not own the cache, the network or the remote
endpoint. It talks to them through the protocols defined here:

- LocalStore: tree of cached nodes, emits ``change`` events
- Synchronizer: fetches and pushes single paths, emits ``conflict`` events
- WireClient: knows the storage base URL of the connected account

Invariants:
    - LocalStore.get_node never returns None; unknown paths yield a
      default Node with timestamp 0
    - Directory paths end with "/" and their data maps child names to
      child metadata
    - Events always carry the absolute ``path`` they concern

How to change safely:
    - Protocol changes require updating the in-memory implementations
    - New methods must be optional for existing collaborators
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    Optional,
    Protocol,
    runtime_checkable,
)

ROOT_MODULE = "root"

EVENT_CHANGE = "change"
EVENT_CONFLICT = "conflict"
EVENT_ERROR = "error"

SyncOneCallback = Callable[["Node", Any], None]
FetchCallback = Callable[[Optional[Exception], Optional["Node"]], None]
DoneCallback = Callable[[], None]
EventHandler = Callable[[Any], None]


class AccessMode(str, Enum):
    """Access levels a module can claim on a subtree."""

    READ = "r"
    WRITE = "w"


class ChangeOrigin(str, Enum):
    """Where a change came from.

    WINDOW: this window made the change
    DEVICE: another window of the same app on this device
    REMOTE: the synchronizer pulled it from the server
    """

    WINDOW = "window"
    DEVICE = "device"
    REMOTE = "remote"


@dataclass
class Node:
    """A cached node of the local store.

    Attributes:
        data: Object, raw document, or child listing for directories
        mime_type: MIME type of the data
        timestamp: Last update (Unix ms), 0 if never seen
        diff: Child name -> dirty marker for unsynced local changes
        start_access: Access claimed at this path ("r", "rw"), if any
        start_force: Whether node data is forced to stay in sync
        start_force_tree: Whether the subtree shape is forced to stay in sync
    """

    data: Any = None
    mime_type: Optional[str] = None
    timestamp: int = 0
    diff: Dict[str, Any] = field(default_factory=dict)
    start_access: Optional[str] = None
    start_force: Optional[bool] = None
    start_force_tree: Optional[bool] = None


@dataclass
class ChangeEvent:
    """A change to a node, local or remote.

    Attributes:
        path: Absolute path of the node
        origin: Where the change came from
        old_value: Value before the change (None if newly created)
        new_value: Value after the change (None if removed)
        relative_path: Path relative to the module root; unset for the
            root module, which uses ``path`` instead
    """

    path: str
    origin: ChangeOrigin
    old_value: Any = None
    new_value: Any = None
    relative_path: Optional[str] = None


@dataclass
class ConflictEvent:
    """A conflict reported by the synchronizer.

    Attributes:
        path: Absolute path of the node
        type: "PUT" or "DELETE"
        local_value: Value in the local cache
        remote_value: Value on the server
        relative_path: Path relative to the module root
    """

    path: str
    type: str = "PUT"
    local_value: Any = None
    remote_value: Any = None
    relative_path: Optional[str] = None


@runtime_checkable
class LocalStore(Protocol):
    """Protocol for the local cache."""

    def get_node(self, path: str) -> Node:
        ...

    def get_node_data(self, path: str) -> Any:
        ...

    def set_node_data(
        self,
        path: str,
        value: Any,
        outgoing: bool,
        timestamp: Optional[int] = None,
        mime_type: Optional[str] = None,
    ) -> None:
        """Write a value. ``outgoing`` marks a local write not yet pushed."""
        ...

    def set_node_force(self, path: str, force_data: bool, force_tree: bool) -> None:
        ...

    def on(self, event_name: str, handler: EventHandler) -> None:
        ...


@runtime_checkable
class Synchronizer(Protocol):
    """Protocol for the component that talks to the remote storage."""

    def sync_one(self, path: str, callback: SyncOneCallback) -> None:
        ...

    def fetch_now(self, path: str, callback: FetchCallback) -> None:
        ...

    def partial_sync(self, path: str, depth: int, callback: DoneCallback) -> None:
        ...

    def on(self, event_name: str, handler: EventHandler) -> None:
        ...


@runtime_checkable
class WireClient(Protocol):
    """Protocol for the connection state of the remote storage account."""

    def get_storage_href(self) -> Optional[str]:
        ...
