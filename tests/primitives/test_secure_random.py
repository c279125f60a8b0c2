"""Tests for hex random generation and the entropy source chain."""

import re

import pytest

from graphlogin.models.errors import EntropyUnavailableError, InvalidArgumentError
from graphlogin.primitives.random import (
    DeviceRandomSource,
    HashMixingSource,
    PlatformRandomSource,
    SecureRandom,
)

HEX = re.compile(r"^[0-9a-f]+$")


class UnavailableSource:
    """Source that never produces bytes."""

    name = "unavailable"

    def __init__(self):
        self.calls = 0

    def read(self, byte_count: int) -> bytes | None:
        self.calls += 1
        return None


class FixedSource:
    """Source that returns a repeated known byte."""

    name = "fixed"

    def read(self, byte_count: int) -> bytes | None:
        return b"\xab" * byte_count


class TestGenerate:
    """Test the public generate contract."""

    def setup_method(self):
        self.secure_random = SecureRandom()

    @pytest.mark.parametrize("byte_count", [1, 16, 33, 100])
    def test_returns_lowercase_hex_of_twice_the_length(self, byte_count):
        """Test output is lowercase hex, two characters per byte."""
        # Act
        value = self.secure_random.generate(byte_count)

        # Assert
        assert len(value) == 2 * byte_count
        assert HEX.match(value)

    def test_successive_values_differ(self):
        """Test two calls give different values."""
        assert self.secure_random.generate(16) != self.secure_random.generate(16)

    @pytest.mark.parametrize("byte_count", [0, -1, 1.5, "16", None, True])
    def test_rejects_non_positive_or_non_integer_counts(self, byte_count):
        """Test zero, negative and non-integer counts are rejected."""
        with pytest.raises(InvalidArgumentError):
            self.secure_random.generate(byte_count)

    def test_invalid_argument_is_a_value_error(self):
        """Test callers can catch ValueError."""
        with pytest.raises(ValueError):
            self.secure_random.generate(0)


class TestSourceChain:
    """Test ordered fallback between sources."""

    def test_falls_back_to_next_source(self):
        """Test an unavailable source hands over to the next one."""
        # Arrange
        unavailable = UnavailableSource()
        secure_random = SecureRandom([unavailable, FixedSource()])

        # Act
        value = secure_random.generate(4)

        # Assert
        assert value == "abababab"
        assert unavailable.calls == 1

    def test_first_success_wins(self):
        """Test later sources are not consulted after a success."""
        # Arrange
        later = UnavailableSource()
        secure_random = SecureRandom([FixedSource(), later])

        # Act
        secure_random.generate(2)

        # Assert
        assert later.calls == 0

    def test_raises_when_every_source_fails(self):
        """Test an exhausted chain raises instead of returning a weak value."""
        secure_random = SecureRandom([UnavailableSource(), UnavailableSource()])

        with pytest.raises(EntropyUnavailableError):
            secure_random.generate(8)

    def test_invalid_argument_checked_before_sources(self):
        """Test argument validation happens before any source is read."""
        unavailable = UnavailableSource()

        with pytest.raises(InvalidArgumentError):
            SecureRandom([unavailable]).generate(0)
        assert unavailable.calls == 0


class TestSources:
    """Test each built-in source on its own."""

    def test_device_source_missing_path_is_unavailable(self, tmp_path):
        """Test a missing device is reported as unavailable."""
        source = DeviceRandomSource(str(tmp_path / "missing"))

        assert source.read(16) is None

    def test_device_source_short_read_is_unavailable(self, tmp_path):
        """Test a short read counts as failure."""
        # Arrange
        device = tmp_path / "device"
        device.write_bytes(b"abc")

        # Act & Assert
        assert DeviceRandomSource(str(device)).read(16) is None

    def test_device_source_reads_exact_count(self, tmp_path):
        """Test exactly the requested bytes are read."""
        # Arrange
        device = tmp_path / "device"
        device.write_bytes(bytes(range(32)))

        # Act
        data = DeviceRandomSource(str(device)).read(16)

        # Assert
        assert data == bytes(range(16))

    def test_platform_source_unavailable_when_urandom_missing(self, monkeypatch):
        """Test a missing platform API is reported as unavailable."""
        def no_urandom(byte_count):
            raise NotImplementedError

        monkeypatch.setattr("graphlogin.primitives.random.os.urandom", no_urandom)

        assert PlatformRandomSource().read(16) is None

    @pytest.mark.parametrize("byte_count", [1, 31, 32, 33, 70])
    def test_hash_mixing_truncates_to_exact_count(self, byte_count):
        """Test digests are truncated to the requested size."""
        data = HashMixingSource().read(byte_count)

        assert len(data) == byte_count

    def test_hash_mixing_values_differ(self):
        """Test successive hash mixing reads differ."""
        source = HashMixingSource()

        assert source.read(16) != source.read(16)
