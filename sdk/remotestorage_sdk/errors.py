"""
Error types for the remoteStorage SDK.

This module defines the exceptions raised by the SDK:
- RemoteStorageError: Base exception
- InsufficientAccessError: Access claim does not cover the path
- InvalidArgumentError: Argument has the wrong shape
- DiscoveryError: Storage discovery failed

Validation failures are never raised. storeObject returns them as a list of
{"property", "message"} entries instead.

Invariants:
    - All errors inherit from RemoteStorageError
    - Errors carry a code for programmatic handling
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class RemoteStorageError(Exception):
    """Base exception for all SDK errors.

    Attributes:
        message: Error message
        code: Error code for programmatic handling
        details: Additional error context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or "REMOTESTORAGE_ERROR"
        self.details = details or {}


class InsufficientAccessError(RemoteStorageError):
    """No node between the client root and "/" grants the requested mode.

    Raised before any read or write takes effect.
    """

    def __init__(self, path: str, mode: str) -> None:
        super().__init__(
            f"Not sufficient access claimed for node at {path}",
            code="INSUFFICIENT_ACCESS",
            details={"path": path, "mode": mode},
        )
        self.path = path
        self.mode = mode


class InvalidArgumentError(RemoteStorageError):
    """Argument has the wrong shape.

    Raised when:
    - storeObject gets a value that is not a JSON object

    Emitted as the payload of an ``error`` event when a value is
    written onto a directory path.
    """

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="INVALID_ARGUMENT",
            details={"path": path},
        )
        self.path = path


class DiscoveryError(RemoteStorageError):
    """Storage information could not be guessed for a user address."""

    def __init__(self, message: str, user_address: Optional[str] = None) -> None:
        super().__init__(
            message,
            code="DISCOVERY_ERROR",
            details={"user_address": user_address},
        )
        self.user_address = user_address
