"""
Unit tests for the in-memory store and synchronizer.

Tests cover:
- Directory listings and diff markers
- Remote change events
- Queued sync work (push, pull, depth-limited pull)
"""

import pytest

from sdk.remotestorage_sdk.base import ChangeOrigin
from sdk.remotestorage_sdk.memory import InMemoryStore, InMemorySynchronizer, StaticWireClient


class TestInMemoryStore:
    """Tests for InMemoryStore."""

    @pytest.fixture
    def store(self):
        return InMemoryStore()

    def test_unknown_node_is_default(self, store):
        node = store.get_node("/nothing")
        assert node.data is None
        assert node.start_access is None
        assert store.get_node_data("/nothing") is None

    def test_listings_updated(self, store):
        """Writing a document lists it in every ancestor."""
        store.set_node_data("/tasks/lists/a", {"title": "A"}, True, 100)

        assert store.get_node_data("/tasks/lists/") == {"a": 100}
        assert store.get_node_data("/tasks/") == {"lists/": 100}
        assert store.get_node_data("/") == {"tasks/": 100}

    def test_remove_drops_listing_entry(self, store):
        store.set_node_data("/tasks/a", "x", True, 100)
        store.set_node_data("/tasks/b", "y", True, 100)

        store.set_node_data("/tasks/a", None, True, 200)

        assert store.get_node_data("/tasks/") == {"b": 100}
        assert store.get_node("/tasks/a").mime_type is None

    def test_directory_write_rejected(self, store):
        with pytest.raises(ValueError):
            store.set_node_data("/tasks/", {}, True)

    def test_outgoing_marks_diff(self, store):
        """Local writes leave diff markers up to the root."""
        store.set_node_data("/tasks/a", "x", True, 100)

        assert store.is_outgoing("/tasks/a")
        assert store.get_node("/").diff == {"tasks/": 100}

    def test_mark_synced_clears_diff(self, store):
        store.set_node_data("/tasks/a", "x", True, 100)

        store.mark_synced("/tasks/a")

        assert not store.is_outgoing("/tasks/a")
        assert store.get_node("/tasks/").diff == {}
        assert store.get_node("/").diff == {}

    def test_mark_synced_keeps_sibling_markers(self, store):
        """Ancestors stay marked while a sibling still has changes."""
        store.set_node_data("/tasks/a", "x", True, 100)
        store.set_node_data("/tasks/b", "y", True, 100)

        store.mark_synced("/tasks/a")

        assert store.get_node("/tasks/").diff == {"b": 100}
        assert store.get_node("/").diff == {"tasks/": 100}

    def test_incoming_emits_change(self, store):
        events = []
        store.on("change", events.append)

        store.set_node_data("/tasks/a", "x", True)
        store.set_node_data("/tasks/a", "y", False)

        assert len(events) == 1
        assert events[0].origin == ChangeOrigin.REMOTE
        assert events[0].old_value == "x"
        assert events[0].new_value == "y"

    def test_force_flags(self, store):
        store.set_node_force("/tasks/", False, True)

        node = store.get_node("/tasks/")
        assert node.start_force is False
        assert node.start_force_tree is True


class TestInMemorySynchronizer:
    """Tests for InMemorySynchronizer."""

    @pytest.fixture
    def store(self):
        return InMemoryStore()

    @pytest.fixture
    def sync(self, store):
        return InMemorySynchronizer(store)

    def test_work_is_queued(self, store, sync):
        """Nothing happens until flush."""
        calls = []
        sync.put_remote("/tasks/a", "remote")

        sync.sync_one("/tasks/a", lambda node, data: calls.append(data))

        assert calls == []
        assert sync.pending == 1
        assert sync.flush() == 1
        assert calls == ["remote"]
        assert store.get_node_data("/tasks/a") == "remote"

    def test_auto_flush(self, store):
        sync = InMemorySynchronizer(store, auto_flush=True)
        calls = []

        sync.fetch_now("/tasks/", lambda err, node: calls.append(node))

        assert len(calls) == 1
        assert sync.pending == 0

    def test_push_outgoing(self, store, sync):
        """sync_one pushes a local change and clears its diff."""
        store.set_node_data("/tasks/a", {"title": "A"}, True, None, "application/json")

        sync.sync_one("/tasks/a", lambda node, data: None)
        sync.flush()

        assert sync.remote["/tasks/a"] == ({"title": "A"}, "application/json")
        assert not store.is_outgoing("/tasks/a")

    def test_push_removal(self, store, sync):
        sync.put_remote("/tasks/a", "x")
        store.set_node_data("/tasks/a", None, True)

        sync.sync_one("/tasks/a", lambda node, data: None)
        sync.flush()

        assert "/tasks/a" not in sync.remote

    def test_fetch_now_pulls_tree(self, store, sync):
        sync.put_remote("/tasks/a", "x")
        sync.put_remote("/tasks/lists/b", "y")
        sync.put_remote("/notes/c", "z")
        results = []

        sync.fetch_now("/tasks/", lambda err, node: results.append((err, node.data)))
        sync.flush()

        assert results == [(None, {"a": store.get_node("/tasks/a").timestamp,
                                   "lists/": store.get_node("/tasks/lists/").timestamp})]
        assert store.get_node_data("/tasks/lists/b") == "y"
        assert store.get_node_data("/notes/c") is None

    def test_fetch_keeps_outgoing(self, store, sync):
        """Pending local changes are not overwritten by a pull."""
        sync.put_remote("/tasks/a", "remote")
        store.set_node_data("/tasks/a", "local", True)

        sync.fetch_now("/tasks/", lambda err, node: None)
        sync.flush()

        assert store.get_node_data("/tasks/a") == "local"

    def test_partial_sync_depth(self, store, sync):
        """Depth 1 pulls direct children only."""
        sync.put_remote("/tasks/a", "x")
        sync.put_remote("/tasks/lists/b", "y")
        done = []

        sync.partial_sync("/tasks/", 1, lambda: done.append(True))
        sync.flush()

        assert done == [True]
        assert store.get_node_data("/tasks/a") == "x"
        assert store.get_node_data("/tasks/lists/b") is None


class TestStaticWireClient:
    """Tests for StaticWireClient."""

    def test_connect_disconnect(self):
        wire = StaticWireClient()
        assert wire.get_storage_href() is None

        wire.connect("https://example.com/storage/bob")
        assert wire.get_storage_href() == "https://example.com/storage/bob"

        wire.disconnect()
        assert wire.get_storage_href() is None
