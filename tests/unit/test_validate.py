"""
Unit tests for object validation.

Tests cover:
- Missing required properties
- Type mismatches with property paths
- Inherited schemas
- @type resolution in validate_object
"""

import pytest

from sdk.remotestorage_sdk.registry import TypeRegistry
from sdk.remotestorage_sdk.validate import MISSING_MESSAGE, validate, validate_object

DRINK_SCHEMA = {
    "description": "A representation of a drink",
    "type": "object",
    "properties": {
        "name": {
            "type": "string",
            "description": "Human readable name of the drink",
            "required": True,
        },
        "volume": {"type": "number"},
    },
}


class TestValidate:
    """Tests for validate."""

    def test_valid(self):
        """Matching instance has no errors."""
        result = validate({"name": "cola"}, DRINK_SCHEMA)

        assert result.valid
        assert result.errors == []

    def test_missing_required(self):
        """Missing required property is reported by name."""
        result = validate({}, DRINK_SCHEMA)

        assert not result.valid
        assert result.errors == [{"property": "name", "message": MISSING_MESSAGE}]

    def test_wrong_type(self):
        """Type mismatch names the property."""
        result = validate({"name": "cola", "volume": "big"}, DRINK_SCHEMA)

        assert not result.valid
        assert len(result.errors) == 1
        assert result.errors[0]["property"] == "volume"
        assert "number" in result.errors[0]["message"]

    def test_nested_missing(self):
        """Nested required properties are reported with a dotted path."""
        schema = {
            "type": "object",
            "properties": {
                "address": {
                    "type": "object",
                    "properties": {"city": {"type": "string", "required": True}},
                },
            },
        }

        result = validate({"address": {}}, schema)

        assert result.errors == [{"property": "address.city", "message": MISSING_MESSAGE}]

    def test_extends(self):
        """Properties required by an extended schema are enforced."""
        schema = {"type": "object", "extends": DRINK_SCHEMA}

        result = validate({"volume": 0.33}, schema)

        assert {"property": "name", "message": MISSING_MESSAGE} in result.errors

    def test_empty_schema_accepts_anything(self):
        """Empty schema matches any instance."""
        assert validate({"anything": [1, 2, 3]}, {}).valid

    def test_explicit_draft(self):
        """$schema selects a newer draft with list-style required."""
        schema = {
            "$schema": "http://json-schema.org/draft-07/schema#",
            "type": "object",
            "required": ["name"],
        }

        result = validate({}, schema)

        assert result.errors == [{"property": "name", "message": MISSING_MESSAGE}]


class TestValidateObject:
    """Tests for validate_object."""

    @pytest.fixture
    def registry(self):
        registry = TypeRegistry("drinks")
        registry.declare_type("drink", DRINK_SCHEMA)
        return registry

    def test_uses_type_attribute(self, registry):
        """@type picks the schema."""
        obj = {"@type": registry.resolve_type("drink")}

        assert validate_object(registry, obj) == [
            {"property": "name", "message": MISSING_MESSAGE}
        ]

    def test_valid_returns_none(self, registry):
        obj = {"@type": registry.resolve_type("drink"), "name": "cola"}
        assert validate_object(registry, obj) is None

    def test_alias_when_no_type(self, registry):
        """Alias is used when the object has no @type."""
        assert validate_object(registry, {}, "drink") == [
            {"property": "name", "message": MISSING_MESSAGE}
        ]

    def test_missing_type_without_alias(self, registry):
        """No @type and no alias is a single error."""
        assert validate_object(registry, {"name": "cola"}) == [
            {"property": "@type", "message": "missing"}
        ]

    def test_unknown_type_passes(self, registry):
        """Unknown types validate against the empty schema."""
        assert validate_object(registry, {"@type": "urn:unknown"}) is None
