"""
remoteStorage SDK Test Suite.

This package contains:
- unit/: Unit tests (no collaborators beyond in-memory doubles)
- integration/: Scoped clients wired to the in-memory store and synchronizer
"""
