"""
Type registry for module-scoped clients.

Every object stored with storeObject carries an ``@type`` attribute: a full
type identifier, usually ``<namespace><module>/<alias>``. A module declares
its types once, giving each a short alias and a JSON schema:

    >>> registry = TypeRegistry("drinks")
    >>> registry.declare_type("drink", {
    ...     "type": "object",
    ...     "properties": {"name": {"type": "string", "required": True}},
    ... })
    >>> registry.resolve_type("drink")
    'https://remotestoragejs.com/spec/modules/drinks/drink'

There is one registry per module, shared by the module's private and public
clients.

Invariants:
    - Aliases are unique within a module; re-declaring overwrites
    - ``extends`` is resolved at declaration time, never lazily
    - Unknown aliases and types degrade to synthesized identifiers and
      empty schemas; they are logged, never raised
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping

from .config import DEFAULT_TYPE_NAMESPACE

logger = logging.getLogger(__name__)


class TypeRegistry:
    """Alias -> type and type -> schema tables of one module.

    Example:
        >>> registry = TypeRegistry("tasks")
        >>> registry.declare_type("task", {"type": "object"})
        >>> registry.declare_type("todo", {"extends": "task"})
    """

    def __init__(self, module_name: str, namespace: str = DEFAULT_TYPE_NAMESPACE) -> None:
        """Initialize empty registry.

        Args:
            module_name: Module owning the types
            namespace: Prefix for synthesized type identifiers
        """
        self.module_name = module_name
        self.namespace = namespace
        self._types: Dict[str, str] = {}
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def types(self) -> Mapping[str, str]:
        """Alias -> full type identifier."""
        return MappingProxyType(self._types)

    @property
    def schemas(self) -> Mapping[str, Dict[str, Any]]:
        """Full type identifier -> schema."""
        return MappingProxyType(self._schemas)

    def __contains__(self, alias: object) -> bool:
        return alias in self._types

    def default_type(self, alias: str) -> str:
        return f"{self.namespace}{self.module_name}/{alias}"

    def declare_type(
        self,
        alias: str,
        schema: Dict[str, Any],
        full_type: str | None = None,
    ) -> None:
        """Declare a type and assign it a schema.

        Data stored with a declared type is validated against its schema
        before it is saved.

        Args:
            alias: Name of the type within this module
            schema: JSON schema; ``extends`` may name an earlier alias
            full_type: Identifier used as @type (generated from the module
                name if omitted)
        """
        if alias in self._types:
            logger.warning(
                f"Re-declaring already declared alias {alias}",
                extra={"module_name": self.module_name},
            )
        if full_type is None:
            full_type = self.default_type(alias)

        schema = dict(schema)
        if "extends" in schema:
            parent_alias = schema["extends"]
            extended_type = self._types.get(parent_alias)
            if extended_type is None:
                logger.error(
                    f"Type '{alias}' tries to extend unknown schema '{parent_alias}'",
                    extra={"module_name": self.module_name},
                )
                return
            schema["extends"] = self._schemas[extended_type]

        self._types[alias] = full_type
        self._schemas[full_type] = schema

    def resolve_type(self, alias: str) -> str:
        """Full type identifier for an alias.

        Falls back to a generated identifier if the alias was never declared.
        """
        full_type = self._types.get(alias)
        if full_type is None:
            full_type = self.default_type(alias)
            logger.warning(
                f"Type alias not declared: {alias}",
                extra={"module_name": self.module_name, "declared": sorted(self._types)},
            )
        return full_type

    def resolve_schema(self, full_type: str) -> Dict[str, Any]:
        """Schema for a full type identifier, or an empty schema."""
        schema = self._schemas.get(full_type)
        if schema is None:
            logger.warning(
                f"Can't find schema for type: {full_type}",
                extra={"module_name": self.module_name},
            )
            return {}
        return schema

