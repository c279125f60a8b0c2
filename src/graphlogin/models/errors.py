"""Exception hierarchy for the redirect login flow.

Expected negative outcomes of a callback (no code, state mismatch) are not
errors and never appear here. These classes cover local misuse, a broken
session backend, and failures reported by the token endpoint.
"""

from __future__ import annotations


class GraphLoginError(Exception):
    """Base exception for all login related errors.

    Args:
        message: Human readable description
        code: Optional numeric error code
    """

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.code = code


class InvalidArgumentError(GraphLoginError, ValueError):
    """Raised when a caller passes a malformed argument."""

    pass


class EntropyUnavailableError(GraphLoginError):
    """Raised when no random source could produce bytes."""

    pass


class StorageUnavailableError(GraphLoginError):
    """Raised when the state store is not ready for reads or writes.

    This is an operator facing configuration problem (for example the
    session backend was never started), not an authentication failure.
    """

    pass


class TokenExchangeError(GraphLoginError):
    """Raised when exchanging an authorization code for a token fails.

    Carries the provider's error type when the token endpoint reported one.
    """

    def __init__(
        self,
        message: str,
        code: int | None = None,
        error_type: str | None = None,
    ):
        super().__init__(message, code)
        self.error_type = error_type
