"""
Unit tests for access checks.

Tests cover:
- Claims on the node itself and on ancestors
- Read vs. write claims
- Root and public client roots
- Termination of the upward walk
"""

from unittest.mock import MagicMock

import pytest

from sdk.remotestorage_sdk.access import client_root, ensure_access, node_gives_access
from sdk.remotestorage_sdk.base import AccessMode, Node
from sdk.remotestorage_sdk.errors import InsufficientAccessError
from sdk.remotestorage_sdk.memory import InMemoryStore


class TestNodeGivesAccess:
    """Tests for node_gives_access."""

    @pytest.fixture
    def store(self):
        """Empty store."""
        return InMemoryStore()

    def test_claim_on_node(self, store):
        """A claim on the node itself grants access."""
        store.set_node_access("/tasks/", "rw")
        assert node_gives_access(store, "/tasks/", AccessMode.WRITE)

    def test_claim_on_ancestor(self, store):
        """A claim on an ancestor grants access."""
        store.set_node_access("/", "r")
        assert node_gives_access(store, "/tasks/lists/", AccessMode.READ)

    def test_read_claim_does_not_grant_write(self, store):
        """An "r" claim does not cover writes."""
        store.set_node_access("/tasks/", "r")
        assert not node_gives_access(store, "/tasks/", AccessMode.WRITE)

    def test_claim_on_sibling_ignored(self, store):
        """Claims on other subtrees do not count."""
        store.set_node_access("/notes/", "rw")
        assert not node_gives_access(store, "/tasks/", AccessMode.READ)

    def test_no_claims(self, store):
        """Without claims the walk ends at "" and fails."""
        assert not node_gives_access(store, "/tasks/", AccessMode.READ)

    def test_walk_visits_each_ancestor_once(self):
        """The walk checks the path, each ancestor, then "" and stops."""
        store = MagicMock()
        store.get_node.return_value = Node()

        assert not node_gives_access(store, "/a/b/", AccessMode.READ)

        visited = [call.args[0] for call in store.get_node.call_args_list]
        assert visited == ["/a/b/", "/a/", "/", ""]


class TestEnsureAccess:
    """Tests for ensure_access and client_root."""

    def test_client_roots(self):
        """Client roots follow the module namespace."""
        assert client_root("root", False) == "/"
        assert client_root("root", True) == "/public/"
        assert client_root("tasks", False) == "/tasks/"
        assert client_root("tasks", True) == "/public/tasks/"

    def test_granted(self):
        """No error when the claim covers the client root."""
        store = InMemoryStore()
        store.set_node_access("/tasks/", "rw")
        ensure_access(store, "tasks", False, AccessMode.WRITE)

    def test_denied_raises(self):
        """Missing claim raises InsufficientAccessError."""
        store = InMemoryStore()
        store.set_node_access("/tasks/", "r")

        with pytest.raises(InsufficientAccessError, match="/tasks/") as exc_info:
            ensure_access(store, "tasks", False, AccessMode.WRITE)

        assert exc_info.value.code == "INSUFFICIENT_ACCESS"
        assert exc_info.value.mode == "w"

    def test_public_client_needs_public_claim(self):
        """A claim on /tasks/ does not cover /public/tasks/."""
        store = InMemoryStore()
        store.set_node_access("/tasks/", "rw")

        with pytest.raises(InsufficientAccessError):
            ensure_access(store, "tasks", True, AccessMode.READ)
