"""
Scoped client for the remoteStorage SDK.

This module provides the main client interface:
- BaseClient: get, store and remove data within one module's namespace
- RemoteStorage: owner of the event router and type registries, hands out
  one BaseClient per (module, visibility)

Example:
    >>> remote = RemoteStorage(store, synchronizer, wire_client)
    >>> drinks = remote.scope("drinks")
    >>> drinks.declare_type("drink", {
    ...     "type": "object",
    ...     "properties": {"name": {"type": "string", "required": True}},
    ... })
    >>> drinks.store_object("drink", "cola", {"name": "cola"})
    >>> drinks.get_object("cola")["name"]
    'cola'

Sync vs. async reads:
    get_object, get_listing, get_document and get_all can be called with or
    without a callback. Without one, the value comes straight from the local
    cache. With one, the synchronizer is asked for fresh data first and the
    callback runs once it has answered. For a whole branch, call use() on the
    branch root and read without callbacks; for a single object, use the
    callback form.

Invariants:
    - Every operation checks access before touching the store
    - Local change events fire before synchronization is scheduled
    - Objects stored with store_object always carry @type
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from .access import ensure_access
from .base import (
    ROOT_MODULE,
    AccessMode,
    DoneCallback,
    LocalStore,
    Node,
    Synchronizer,
    WireClient,
)
from .config import ClientConfig
from .errors import InvalidArgumentError
from .events import EventFacade, EventRouter
from .paths import base_name, containing_dir, is_dir, make_path
from .registry import TypeRegistry
from .validate import validate_object

logger = logging.getLogger(__name__)


def _has_content(data: Any) -> bool:
    """Cached data counts as present unless missing or an empty object."""
    if data is None:
        return False
    return not (isinstance(data, dict) and not data)


def _after_sync(callback: Optional[DoneCallback]) -> Callable[..., None]:
    def done(*_args: Any) -> None:
        if callback is not None:
            callback()

    return done


class BaseClient:
    """Data access scoped to one module and visibility.

    Paths given to the methods are relative to the module root:
    ``/<module>/`` for private clients, ``/public/<module>/`` for public ones.
    The root module addresses the whole tree.

    Events:
        change   - ChangeEvent for data of this module, local or remote
        conflict - ConflictEvent reported by the synchronizer
        error    - InvalidArgumentError, e.g. a value written to a directory
    """

    def __init__(
        self,
        module_name: str,
        is_public: bool,
        *,
        store: LocalStore,
        synchronizer: Synchronizer,
        wire_client: WireClient,
        router: EventRouter,
        types: TypeRegistry,
        config: ClientConfig | None = None,
    ) -> None:
        """Initialize client.

        Args:
            module_name: Module namespace
            is_public: Whether to address the public subtree
            store: Local cache
            synchronizer: Remote synchronization
            wire_client: Connection state of the account
            router: Event router owning this client's facade
            types: Type registry of the module
            config: Client configuration
        """
        self.module_name = module_name
        self.is_public = is_public
        self.types = types
        self._store = store
        self._sync = synchronizer
        self._wire = wire_client
        self._router = router
        self._config = config or ClientConfig()
        self.events: EventFacade = router.register(module_name, is_public)

    def __repr__(self) -> str:
        return f"BaseClient(module_name={self.module_name!r}, is_public={self.is_public!r})"

    def make_path(self, path: str) -> str:
        """Absolute storage path for a module-relative path."""
        return make_path(self.module_name, self.is_public, path)

    def ensure_access(self, mode: AccessMode) -> None:
        """Raise InsufficientAccessError unless ``mode`` is claimed for this module."""
        ensure_access(self._store, self.module_name, self.is_public, mode)

    def on(self, event_name: str, handler: Callable[..., Any], context: Any = None) -> None:
        """Install an event handler.

        Args:
            event_name: "change", "conflict" or "error"
            handler: Called with the event
            context: If given, passed to the handler before the event
        """
        if context is not None:
            self.events.on(event_name, lambda event: handler(context, event))
        else:
            self.events.on(event_name, handler)

    def last_update_of(self, path: str) -> Optional[int]:
        """Timestamp (Unix ms) of the cached node, None if never seen."""
        node = self._store.get_node(self.make_path(path))
        return node.timestamp or None

    # Reading

    def get_object(
        self,
        path: str,
        callback: Optional[Callable[[Any], None]] = None,
    ) -> Any:
        """Get a JSON object from the given path.

        Args:
            path: Path relative to the module root
            callback: If given, called with the object once it is fresh

        Returns:
            The cached object (or None) without a callback, else None
        """
        self.ensure_access(AccessMode.READ)
        abs_path = self.make_path(path)
        data = self._store.get_node_data(abs_path)

        if callback is None:
            return data
        if _has_content(data):
            callback(data)
        else:
            self._sync.sync_one(abs_path, lambda node, synced: callback(synced))
        return None

    def _listing(self, abs_path: str) -> List[str]:
        data = self._store.get_node_data(abs_path)
        return list(data) if isinstance(data, dict) else []

    def get_listing(
        self,
        path: str,
        callback: Optional[Callable[[List[str]], None]] = None,
    ) -> Optional[List[str]]:
        """Get the names of the child nodes below a directory path.

        Names ending in "/" are directories, all others data nodes.

        Args:
            path: Directory path; must end with "/" (or be "" for the
                module root)
            callback: If given, the directory is fetched first
        """
        self.ensure_access(AccessMode.READ)
        abs_path = self.make_path(path)

        if callback is None:
            return self._listing(abs_path)

        def fetched(err: Optional[Exception], node: Optional[Node]) -> None:
            if err is not None:
                logger.warning(f"Fetching {abs_path} failed: {err}")
            callback(self._listing(abs_path))

        self._sync.fetch_now(abs_path, fetched)
        return None

    def get_all(
        self,
        path: str,
        callback: Optional[Callable[[Dict[str, Any]], None]] = None,
        *,
        type_alias: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Get all objects directly below a directory path.

        Subdirectories are not included.

        Args:
            path: Directory path, see get_listing
            callback: See get_listing
            type_alias: Only include objects whose @type ends with this name

        Returns:
            {relative path: object}
        """

        def make_map(listing: List[str]) -> Dict[str, Any]:
            result: Dict[str, Any] = {}
            for name in listing:
                if name.endswith("/"):
                    continue
                item = self.get_object(path + name)
                if item is None:
                    continue
                if type_alias is not None:
                    item_type = item.get("@type") if isinstance(item, dict) else None
                    if not item_type or item_type.split("/")[-1] != type_alias:
                        continue
                result[path + name] = item
            return result

        if callback is None:
            return make_map(self.get_listing(path) or [])
        self.get_listing(path, lambda listing: callback(make_map(listing)))
        return None

    def _document(self, abs_path: str) -> Optional[Dict[str, Any]]:
        data = self._store.get_node_data(abs_path)
        if data is None:
            return None
        return {"mime_type": self._store.get_node(abs_path).mime_type, "data": data}

    def get_document(
        self,
        path: str,
        callback: Optional[Callable[[Optional[Dict[str, Any]]], None]] = None,
    ) -> Optional[Dict[str, Any]]:
        """Get the raw document at the given path.

        Works like get_object, but returns {"mime_type", "data"} or None.
        """
        self.ensure_access(AccessMode.READ)
        abs_path = self.make_path(path)
        result = self._document(abs_path)

        if callback is None:
            return result
        if result is not None:
            callback(result)
        else:
            self._sync.sync_one(abs_path, lambda node, data: callback(self._document(abs_path)))
        return None

    # Writing

    def remove(self, path: str, callback: Optional[DoneCallback] = None) -> None:
        """Remove the node at the given path and synchronize the removal.

        Args:
            path: Path relative to the module root
            callback: Called when the removal has reached the server
        """
        self.ensure_access(AccessMode.WRITE)
        abs_path = self.make_path(path)
        if self._router.set_local(abs_path, None):
            self._sync.sync_one(abs_path, _after_sync(callback))

    def store_object(
        self,
        type_alias: str,
        path: str,
        obj: Dict[str, Any],
        callback: Optional[DoneCallback] = None,
    ) -> Optional[List[Dict[str, str]]]:
        """Validate an object, store it at the given path and synchronize it.

        The object's @type is set from ``type_alias`` (see declare_type).

        Args:
            type_alias: Type of the object within this module
            path: Path relative to the module root
            obj: JSON-serializable dict
            callback: Called when the object has reached the server

        Returns:
            None on success, else the validation errors (nothing is stored)

        Raises:
            InvalidArgumentError: If obj is not a dict
        """
        self.ensure_access(AccessMode.WRITE)
        if not isinstance(obj, dict):
            raise InvalidArgumentError("storeObject needs to get an object as value!")
        obj["@type"] = self.resolve_type(type_alias)

        errors = self.validate_object(obj)
        if errors:
            logger.error(
                f"Error saving this {type_alias}: {obj} {errors}",
                extra={"module_name": self.module_name},
            )
            return errors

        abs_path = self.make_path(path)
        if self._router.set_local(abs_path, obj, self._config.json_mime_type):
            self._sync.sync_one(abs_path, _after_sync(callback))
        return None

    def store_document(
        self,
        mime_type: str,
        path: str,
        data: Any,
        callback: Optional[DoneCallback] = None,
    ) -> None:
        """Store raw data at the given path and synchronize it.

        Args:
            mime_type: MIME type returned later by get_document
            path: Path relative to the module root; not a directory
            data: Raw data
            callback: Called when the document has reached the server
        """
        self.ensure_access(AccessMode.WRITE)
        abs_path = self.make_path(path)
        if self._router.set_local(abs_path, data, mime_type):
            self._sync.sync_one(abs_path, _after_sync(callback))

    # Sync control

    def use(self, path: str, tree_only: bool = False) -> None:
        """Keep a node synchronized.

        Args:
            path: Path relative to the module root
            tree_only: Only keep the listing current, not the data
        """
        self.ensure_access(AccessMode.READ)
        self._store.set_node_force(self.make_path(path), not tree_only, True)

    def release(self, path: str) -> None:
        """Stop keeping a node synchronized."""
        self.ensure_access(AccessMode.READ)
        self._store.set_node_force(self.make_path(path), False, False)

    def sync_once(self, path: str, callback: Optional[DoneCallback] = None) -> None:
        """Synchronize a node and its children once.

        The node's force flags are the same afterwards as before.
        """
        self.ensure_access(AccessMode.READ)
        abs_path = self.make_path(path)
        node = self._store.get_node(abs_path)
        was_forced, was_tree_forced = bool(node.start_force), bool(node.start_force_tree)
        self.use(path, True)

        def done() -> None:
            if was_forced and was_tree_forced:
                self.use(path, False)
            elif was_tree_forced:
                self.use(path, True)
            else:
                self.release(path)
            if callback is not None:
                callback()

        self._sync.partial_sync(abs_path, self._config.sync_once_depth, done)

    def has_diff(self, path: str) -> bool:
        """Whether the node has local changes not yet on the server.

        For directories: whether any child has.
        """
        self.ensure_access(AccessMode.READ)
        abs_path = self.make_path(path)
        if is_dir(abs_path):
            return bool(self._store.get_node(abs_path).diff)
        parent = self._store.get_node(containing_dir(abs_path))
        return bool(parent.diff.get(base_name(abs_path)))

    # Remote location

    def get_storage_href(self) -> Optional[str]:
        return self._wire.get_storage_href()

    def get_item_url(self, path: str) -> Optional[str]:
        """Full URL of the item, None while disconnected."""
        base = self.get_storage_href()
        if not base:
            return None
        return base.rstrip("/") + self.make_path(path)

    # Types

    def declare_type(
        self,
        alias: str,
        schema: Dict[str, Any],
        full_type: str | None = None,
    ) -> None:
        """Declare a type for this module, see TypeRegistry.declare_type."""
        self.types.declare_type(alias, schema, full_type)

    def resolve_type(self, alias: str) -> str:
        return self.types.resolve_type(alias)

    def resolve_schema(self, full_type: str) -> Dict[str, Any]:
        return self.types.resolve_schema(full_type)

    def validate_object(
        self,
        obj: Dict[str, Any],
        alias: Optional[str] = None,
    ) -> Optional[List[Dict[str, str]]]:
        """Validate an object with its schema.

        Returns:
            None if valid, else [{"property": ..., "message": ...}, ...]
        """
        return validate_object(self.types, obj, alias)


class RemoteStorage:
    """Owner of the scoped clients of one application.

    Holds the event router and one type registry per module, and creates
    each (module, visibility) client once.

    Example:
        >>> remote = RemoteStorage(store, synchronizer, wire_client)
        >>> remote.scope("tasks") is remote.scope("tasks")
        True
    """

    def __init__(
        self,
        store: LocalStore,
        synchronizer: Synchronizer,
        wire_client: WireClient,
        config: ClientConfig | None = None,
    ) -> None:
        """Initialize.

        Args:
            store: Local cache
            synchronizer: Remote synchronization
            wire_client: Connection state of the account
            config: Client configuration (read from environment if omitted)
        """
        self.store = store
        self.synchronizer = synchronizer
        self.wire_client = wire_client
        self.config = config or ClientConfig()
        self.router = EventRouter(store, synchronizer)
        self._registries: Dict[str, TypeRegistry] = {}
        self._clients: Dict[tuple[str, bool], BaseClient] = {}

    def types(self, module_name: str) -> TypeRegistry:
        """Type registry of a module."""
        registry = self._registries.get(module_name)
        if registry is None:
            registry = TypeRegistry(module_name, self.config.type_namespace)
            self._registries[module_name] = registry
        return registry

    def scope(self, module_name: str, public: bool = False) -> BaseClient:
        """Client for a module's private or public data."""
        key = (module_name, public)
        client = self._clients.get(key)
        if client is None:
            client = BaseClient(
                module_name,
                public,
                store=self.store,
                synchronizer=self.synchronizer,
                wire_client=self.wire_client,
                router=self.router,
                types=self.types(module_name),
                config=self.config,
            )
            self._clients[key] = client
            logger.debug(
                "Created scoped client",
                extra={"module_name": module_name, "public": public},
            )
        return client

    @property
    def root(self) -> BaseClient:
        """Client for the whole private tree."""
        return self.scope(ROOT_MODULE)
