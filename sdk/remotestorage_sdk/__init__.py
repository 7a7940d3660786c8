"""
remoteStorage Python SDK - module-scoped access to a personal data store.

This SDK lets an application read, write and synchronize JSON objects and
raw documents, serving reads from a local cache whenever possible:
- BaseClient: data access scoped to one module and visibility
- RemoteStorage: creates scoped clients, owns events and type registries
- TypeRegistry: type aliases and JSON schemas per module
- In-memory store, synchronizer and wire client for tests and development

Example:
    >>> from remotestorage_sdk import RemoteStorage
    >>> from remotestorage_sdk.memory import (
    ...     InMemoryStore, InMemorySynchronizer, StaticWireClient,
    ... )
    >>>
    >>> store = InMemoryStore()
    >>> store.set_node_access("/", "rw")
    >>> remote = RemoteStorage(store, InMemorySynchronizer(store), StaticWireClient())
    >>>
    >>> tasks = remote.scope("tasks")
    >>> tasks.on("change", lambda event: print(event.relative_path))
    >>> tasks.store_object("task", "first", {"title": "Write docs"})
    first

Invariants:
    - Every operation checks the access claim first
    - Change events fire on the owning module and on root
    - Stored objects always carry @type

Version: 1.0.0
"""

__version__ = "1.0.0"

from .base import (
    AccessMode,
    ChangeEvent,
    ChangeOrigin,
    ConflictEvent,
    LocalStore,
    Node,
    Synchronizer,
    WireClient,
)
from .client import BaseClient, RemoteStorage
from .config import ClientConfig, ObservabilityConfig
from .discovery import StorageInfo, guess_storage_info
from .errors import (
    DiscoveryError,
    InsufficientAccessError,
    InvalidArgumentError,
    RemoteStorageError,
)
from .events import EventFacade, EventRouter
from .memory import InMemoryStore, InMemorySynchronizer, StaticWireClient
from .paths import extract_module_name, make_path
from .registry import TypeRegistry
from .validate import ValidationResult, validate, validate_object

__all__ = [
    # Version
    "__version__",
    # Client
    "BaseClient",
    "RemoteStorage",
    # Types
    "AccessMode",
    "ChangeEvent",
    "ChangeOrigin",
    "ConflictEvent",
    "Node",
    # Collaborator protocols
    "LocalStore",
    "Synchronizer",
    "WireClient",
    # Events
    "EventFacade",
    "EventRouter",
    # In-memory collaborators
    "InMemoryStore",
    "InMemorySynchronizer",
    "StaticWireClient",
    # Paths
    "make_path",
    "extract_module_name",
    # Schemas
    "TypeRegistry",
    "ValidationResult",
    "validate",
    "validate_object",
    # Config
    "ClientConfig",
    "ObservabilityConfig",
    # Discovery
    "StorageInfo",
    "guess_storage_info",
    # Errors
    "RemoteStorageError",
    "InsufficientAccessError",
    "InvalidArgumentError",
    "DiscoveryError",
]
