"""
Custom exceptions for build number allocation.

Every fatal condition the allocator can hit is a subclass of
BuildNumberError, so the CLI can report them uniformly.

Exception Hierarchy:
    BuildNumberError (base)
    ├── ConfigurationError (required input missing)
    ├── RefStoreError (GitHub ref API failures)
    │   ├── TransportError (network/connection failures)
    │   └── UnexpectedStatusError (status outside the expected set)
    ├── InvariantViolationError (too many build-number markers)
    └── GarbageCollectionWarning (failed delete, never raised)

Example:
    >>> from buildnum.core.exceptions import UnexpectedStatusError
    >>> try:
    ...     raise UnexpectedStatusError("create", 422, {"message": "Reference already exists"})
    ... except UnexpectedStatusError as e:
    ...     print(e.status_code)
    422
"""

from __future__ import annotations

import json
from typing import Any


class BuildNumberError(Exception):
    """
    Base exception for all build number errors.

    Attributes:
        message: Human-readable error message
        context: Optional dictionary of additional context
    """

    def __init__(self, message: str, **context: object) -> None:
        """
        Initialize an error with message and context.

        Args:
            message: Human-readable error message
            **context: Additional context as keyword arguments
        """
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message


class ConfigurationError(BuildNumberError):
    """
    Raised when a required input is missing.

    Attributes:
        missing: Names of the environment variables that were not set
    """

    def __init__(self, missing: list[str], message: str | None = None) -> None:
        if message is None:
            names = ", ".join(missing)
            if len(missing) == 1:
                message = f"Environment variable {names} is not defined."
            else:
                message = f"Environment variables {names} are not defined."
        super().__init__(message, missing=missing)
        self.missing = missing


class RefStoreError(BuildNumberError):
    """
    Base exception for GitHub ref API failures.

    Attributes:
        operation: Ref operation that failed ("list", "create", "delete")
    """

    def __init__(self, operation: str, message: str, **context: object) -> None:
        super().__init__(message, operation=operation, **context)
        self.operation = operation


class TransportError(RefStoreError):
    """
    Raised when a request never produced an HTTP response.

    The underlying httpx exception is preserved via __cause__.
    """

    def __init__(self, operation: str, ref: str, reason: str) -> None:
        super().__init__(
            operation,
            f"Failed to {operation} ref {ref}: {reason}",
            ref=ref,
            reason=reason,
        )
        self.ref = ref
        self.reason = reason


class UnexpectedStatusError(RefStoreError):
    """
    Raised when GitHub answered with a status the operation does not accept.

    Attributes:
        status_code: HTTP status returned
        payload: Decoded response body (may be None)
    """

    def __init__(self, operation: str, status_code: int, payload: Any) -> None:
        super().__init__(
            operation,
            f"Failed to {operation} build-number ref: "
            f"http status {status_code}, error: {_render_payload(payload)}",
            status_code=status_code,
        )
        self.status_code = status_code
        self.payload = payload


class InvariantViolationError(BuildNumberError):
    """
    Raised when more markers exist than the allocator tolerates.

    The counter state must be repaired by hand; guessing which tags to
    drop could silently move the counter backwards.
    """

    def __init__(self, marker_stem: str, found: int, limit: int) -> None:
        super().__init__(
            f"Too many {marker_stem} refs in repository, found {found}, "
            f"expected at most {limit}. Check your tags!",
            found=found,
            limit=limit,
        )
        self.found = found
        self.limit = limit


class GarbageCollectionWarning(BuildNumberError):
    """
    Record of a stale marker that could not be deleted.

    Collected on the allocation result and logged; never raised.
    """

    def __init__(self, ref: str, reason: str) -> None:
        super().__init__(f"Failed to delete ref {ref}, {reason}", ref=ref)
        self.ref = ref
        self.reason = reason


def _render_payload(payload: Any) -> str:
    try:
        return json.dumps(payload, sort_keys=True)
    except (TypeError, ValueError):
        return repr(payload)


__all__ = [
    "BuildNumberError",
    "ConfigurationError",
    "RefStoreError",
    "TransportError",
    "UnexpectedStatusError",
    "InvariantViolationError",
    "GarbageCollectionWarning",
]
