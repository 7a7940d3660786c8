"""
Event routing for module-scoped clients.

Each (module, visibility) pair has one EventFacade that the module's client
hands out to application code. The EventRouter owns these facades and
decides who hears about what:

- store ``change`` and synchronizer ``conflict`` events go to the module
  named by the event path, and to ``root``
- local writes made through set_local fire ``change`` the same way,
  synchronously, with origin ``window``
- writes onto directory paths fire ``error`` on the path's module

Module facades receive a copy of the event with ``relative_path`` set.
Root receives the event as is and uses ``path``.

Invariants:
    - Facades are chosen from the event path, never from the caller
    - Events for modules without a facade are dropped silently
    - A local change event fires before the caller schedules any sync
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Dict, List, Optional

from .base import (
    EVENT_CHANGE,
    EVENT_CONFLICT,
    EVENT_ERROR,
    ROOT_MODULE,
    ChangeEvent,
    ChangeOrigin,
    EventHandler,
    LocalStore,
    Synchronizer,
)
from .errors import InvalidArgumentError
from .paths import PUBLIC_PREFIX, extract_module_name, is_dir, is_public

logger = logging.getLogger(__name__)

CLIENT_EVENTS = (EVENT_CHANGE, EVENT_CONFLICT, EVENT_ERROR)


class EventFacade:
    """Event emitter for a fixed set of event names.

    A handler that raises is logged and does not keep the remaining
    handlers from running.

    Example:
        >>> events = EventFacade("change", "error")
        >>> events.on("change", print)
        >>> events.emit("change", {"path": "/foo"})
    """

    def __init__(self, *event_names: str) -> None:
        self._handlers: Dict[str, List[EventHandler]] = {name: [] for name in event_names}

    @property
    def event_names(self) -> tuple[str, ...]:
        return tuple(self._handlers)

    def _handlers_for(self, event_name: str) -> List[EventHandler]:
        try:
            return self._handlers[event_name]
        except KeyError:
            raise ValueError(
                f"Unknown event '{event_name}', expected one of {sorted(self._handlers)}"
            ) from None

    def on(self, event_name: str, handler: EventHandler) -> None:
        """Register a handler."""
        self._handlers_for(event_name).append(handler)

    def off(self, event_name: str, handler: EventHandler) -> bool:
        """Remove a handler. Returns True if it was registered."""
        handlers = self._handlers_for(event_name)
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    def emit(self, event_name: str, payload: Any) -> None:
        for handler in list(self._handlers_for(event_name)):
            try:
                handler(payload)
            except Exception:
                logger.exception(f"Handler for '{event_name}' event failed")


class EventRouter:
    """Routes store, synchronizer and local events to module facades.

    The router subscribes to the store's ``change`` stream and the
    synchronizer's ``conflict`` stream when it is created. It lives as long
    as the RemoteStorage instance that owns it.

    Example:
        >>> router = EventRouter(store, synchronizer)
        >>> events = router.register("tasks", False)
        >>> events.on("change", lambda event: print(event.relative_path))
        >>> router.set_local("/tasks/a", {"title": "A"})
        a
    """

    def __init__(self, store: LocalStore, synchronizer: Synchronizer) -> None:
        self._store = store
        self._synchronizer = synchronizer
        self._facades: Dict[str, Dict[bool, EventFacade]] = {}

        store.on(EVENT_CHANGE, self._make_relay(EVENT_CHANGE))
        synchronizer.on(EVENT_CONFLICT, self._make_relay(EVENT_CONFLICT))

    def _make_relay(self, event_name: str) -> Callable[[Any], None]:
        def relay(event: Any) -> None:
            self.fire_module_event(event_name, extract_module_name(event.path), event)
            self.fire_module_event(event_name, ROOT_MODULE, event)

        return relay

    def register(self, module_name: str, is_public_scope: bool) -> EventFacade:
        """Get the facade of a module scope, creating it on first use."""
        scopes = self._facades.setdefault(module_name, {})
        facade = scopes.get(is_public_scope)
        if facade is None:
            facade = EventFacade(*CLIENT_EVENTS)
            scopes[is_public_scope] = facade
        return facade

    def facade(self, module_name: str, is_public_scope: bool) -> Optional[EventFacade]:
        return self._facades.get(module_name, {}).get(is_public_scope)

    def fire_module_event(self, event_name: str, module_name: Optional[str], event: Any) -> None:
        """Emit an event on a module's facade for the event path's visibility.

        Does nothing if the module has no facade.
        """
        path = getattr(event, "path", None)
        public = is_public(path) if path else False
        facade = self.facade(module_name, public) if module_name else None
        if facade is None:
            logger.debug(
                "No facade for event",
                extra={"event_name": event_name, "module_name": module_name, "path": path},
            )
            return

        if module_name != ROOT_MODULE and path and dataclasses.is_dataclass(event):
            prefix = (PUBLIC_PREFIX if public else "") + f"/{module_name}/"
            relative_path = path[len(prefix):] if path.startswith(prefix) else path
            event = dataclasses.replace(event, relative_path=relative_path)

        facade.emit(event_name, event)

    def fire_error(self, abs_path: str, error: Exception) -> None:
        """Emit an error on the facade of the module owning ``abs_path``."""
        module_name = extract_module_name(abs_path)
        facade = self.facade(module_name, is_public(abs_path)) if module_name else None
        if facade is None:
            logger.error(f"Unrouted error for {abs_path}: {error}")
            return
        facade.emit(EVENT_ERROR, error)

    def set_local(self, abs_path: str, value: Any, mime_type: Optional[str] = None) -> bool:
        """Write a value into the local store as an outgoing change.

        Fires ``change`` on the owning module and on root before returning.

        Args:
            abs_path: Absolute path of a data node
            value: New value, None to remove
            mime_type: MIME type to record with the value

        Returns:
            False if nothing was written because the path is a directory
        """
        if is_dir(abs_path):
            self.fire_error(
                abs_path,
                InvalidArgumentError(
                    f"attempt to set a value to a directory {abs_path}",
                    path=abs_path,
                ),
            )
            return False

        event = ChangeEvent(
            path=abs_path,
            origin=ChangeOrigin.WINDOW,
            old_value=self._store.get_node_data(abs_path),
            new_value=value,
        )
        self._store.set_node_data(abs_path, value, True, None, mime_type)
        self.fire_module_event(EVENT_CHANGE, extract_module_name(abs_path), event)
        self.fire_module_event(EVENT_CHANGE, ROOT_MODULE, event)
        return True
