"""Cryptographically strong random hex strings.

Bytes come from an ordered chain of entropy sources. The first source that
produces a full buffer wins; later sources trade strength for availability.
"""

from __future__ import annotations

import hashlib
import itertools
import logging
import os
import random
import time
import uuid
from typing import Protocol

from graphlogin.models.errors import EntropyUnavailableError, InvalidArgumentError

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """A single entropy source in the fallback chain."""

    name: str

    def read(self, byte_count: int) -> bytes | None:
        """Return exactly ``byte_count`` bytes, or None if unavailable."""
        ...


class DeviceRandomSource:
    """Reads from the operating system's random device."""

    name = "device"

    def __init__(self, path: str = "/dev/urandom"):
        self.path = path

    def read(self, byte_count: int) -> bytes | None:
        if not os.access(self.path, os.R_OK):
            return None

        try:
            with open(self.path, "rb") as device:
                data = device.read(byte_count)
        except OSError as e:
            logger.debug(f"Could not read {self.path}: {e}")
            return None

        if len(data) != byte_count:
            return None
        return data


class PlatformRandomSource:
    """Uses the platform's CSPRNG API."""

    name = "platform"

    def read(self, byte_count: int) -> bytes | None:
        try:
            return os.urandom(byte_count)
        except NotImplementedError:
            return None


class HashMixingSource:
    """Last resort: hashes a counter, PRNG output, clock and process id.

    Always succeeds. Output is unpredictable enough for CSRF tokens but
    should not be used for secrets.
    """

    name = "hash"

    def __init__(self):
        self._counter = itertools.count()
        self._node = uuid.uuid1().hex

    def read(self, byte_count: int) -> bytes | None:
        buffer = b""
        while len(buffer) < byte_count:
            seed = (
                f"{next(self._counter)}:{random.getrandbits(64)}:"
                f"{time.perf_counter_ns()}:{os.getpid()}:{self._node}"
            )
            buffer += hashlib.sha256(seed.encode("ascii")).digest()
        return buffer[:byte_count]


def default_sources() -> list[RandomSource]:
    return [DeviceRandomSource(), PlatformRandomSource(), HashMixingSource()]


class SecureRandom:
    """Generates hex-encoded random strings from a chain of sources.

    Args:
        sources: Sources to try in priority order. Defaults to the random
            device, then the platform API, then hash mixing.
    """

    def __init__(self, sources: list[RandomSource] | None = None):
        self.sources = sources if sources is not None else default_sources()

    def generate(self, byte_count: int) -> str:
        """Return ``byte_count`` random bytes as lowercase hex.

        Args:
            byte_count: Number of random bytes, must be a positive integer

        Returns:
            Hex string of length ``2 * byte_count``

        Raises:
            InvalidArgumentError: If byte_count is not a positive integer
            EntropyUnavailableError: If every source failed
        """
        if isinstance(byte_count, bool) or not isinstance(byte_count, int):
            raise InvalidArgumentError(
                f"generate() expects an integer, got {type(byte_count).__name__}"
            )
        if byte_count < 1:
            raise InvalidArgumentError(
                "generate() expects an integer greater than zero"
            )

        for source in self.sources:
            data = source.read(byte_count)
            if data is not None and len(data) == byte_count:
                return data.hex()
            logger.debug(f"Random source '{source.name}' unavailable, falling back")

        raise EntropyUnavailableError("No random source produced any bytes")
