"""
Object validation for the remoteStorage SDK.

Schemas are JSON schemas. Unless a schema names its draft with ``$schema``,
it is read as Draft 3, whose ``"required": true`` property flag and
``extends`` keyword are what module type declarations use.

Errors are reported as data, one entry per problem:

    [{"property": "name", "message": "is missing and it is required"}]

Invariants:
    - Validation never raises for invalid data, it returns errors
    - Error order is deterministic (sorted by property path)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jsonschema import Draft3Validator
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError
from jsonschema.validators import validator_for

from .registry import TypeRegistry

MISSING_MESSAGE = "is missing and it is required"

_REQUIRED_RE = re.compile(r"^'(?P<name>.+)' is a required property$")


@dataclass
class ValidationResult:
    """Outcome of validating one instance.

    Attributes:
        valid: Whether the instance matches the schema
        errors: {"property", "message"} entries, empty when valid
    """

    valid: bool
    errors: List[Dict[str, str]] = field(default_factory=list)


def _error_entry(error: JsonSchemaValidationError) -> Dict[str, str]:
    """Convert a jsonschema error into a property/message entry."""
    location = [str(p) for p in error.absolute_path]
    if error.validator == "required":
        match = _REQUIRED_RE.match(error.message)
        if match:
            name = match.group("name")
            # Draft 3 may leave the keyword or the property on the error path
            if location and location[-1] in ("required", name):
                location.pop()
            location.append(name)
            return {"property": ".".join(location), "message": MISSING_MESSAGE}
    return {"property": ".".join(location), "message": error.message}


def validate(instance: Any, schema: Dict[str, Any]) -> ValidationResult:
    """Validate an instance against a JSON schema.

    Args:
        instance: Object to validate
        schema: JSON schema (Draft 3 unless ``$schema`` says otherwise)

    Returns:
        ValidationResult with the list of errors
    """
    validator_class = validator_for(schema, default=Draft3Validator)
    validator = validator_class(schema)
    errors = [_error_entry(e) for e in validator.iter_errors(instance)]
    errors.sort(key=lambda e: e["property"])
    return ValidationResult(valid=not errors, errors=errors)


def validate_object(
    registry: TypeRegistry,
    obj: Dict[str, Any],
    alias: Optional[str] = None,
) -> Optional[List[Dict[str, str]]]:
    """Validate an object against the schema of its type.

    Args:
        registry: Type registry of the module
        obj: Object to validate
        alias: Type alias to use when the object has no @type

    Returns:
        None if the object is valid, otherwise a list of errors
    """
    full_type = obj.get("@type")
    if not full_type:
        if not alias:
            return [{"property": "@type", "message": "missing"}]
        full_type = registry.resolve_type(alias)

    result = validate(obj, registry.resolve_schema(full_type))
    return None if result.valid else result.errors
