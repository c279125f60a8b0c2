"""CSRF state generation and validation."""

from __future__ import annotations

import secrets

from graphlogin.primitives.random import SecureRandom

STATE_BYTES = 16


def generate_state(secure_random: SecureRandom | None = None) -> str:
    """Generate a fresh CSRF state parameter.

    Returns:
        32 lowercase hex characters (16 random bytes)
    """
    return (secure_random or SecureRandom()).generate(STATE_BYTES)


def validate_state(expected: str | None, actual: str | None) -> bool:
    """Compare stored and received state in constant time.

    Both values must be present. Absence and mismatch give the same result.
    """
    if not expected or not actual:
        return False
    return secrets.compare_digest(expected.encode("utf-8"), actual.encode("utf-8"))
