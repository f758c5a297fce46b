"""Exception hierarchy for suidouble."""
from __future__ import annotations


class SuiDoubleError(Exception):
    """Base class for every error raised by this package."""


class InvalidIdentity(SuiDoubleError, ValueError):
    """An identifier cannot be normalized into a Sui address."""

    def __init__(self, value: object, reason: str = "") -> None:
        self.value = value
        message = f"Invalid Sui identifier: {value!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class IdentityMismatch(SuiDoubleError, RuntimeError):
    """Payload for one object was absorbed into a different object."""

    def __init__(self, expected: str, received: str) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Trying to fill object {expected} with data of {received}"
        )


class RemoteUnavailable(SuiDoubleError, RuntimeError):
    """Every configured RPC endpoint failed for a call."""

    def __init__(self, method: str, last_error: Exception | None = None) -> None:
        self.method = method
        self.last_error = last_error
        super().__init__(
            f"All RPC endpoints failed for {method}. Last error: {last_error}"
        )
