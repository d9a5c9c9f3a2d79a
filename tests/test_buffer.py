"""
Tests for the metadata buffer and writer.
"""

import pytest

from tracemeta.errors import (
    FormatLimitExceededError,
    MetadataIOError,
    OutOfMemoryError,
    SectionNotHeldError,
)
from tracemeta.metadata import MAX_METADATA_SIZE, MetadataBuffer, get_count_order


class TestCountOrder:
    """Test power-of-two rounding."""

    def test_exact_powers(self):
        assert get_count_order(1) == 0
        assert get_count_order(2) == 1
        assert get_count_order(4096) == 12

    def test_rounds_up(self):
        assert get_count_order(3) == 2
        assert get_count_order(4097) == 13


class TestReserve:
    """Test reservation offsets and growth."""

    def test_offsets_are_gapless(self):
        """Each offset equals the sum of the previous reservations."""
        buf = MetadataBuffer()
        lengths = [5, 0, 17, 1, 300, 2]
        total = 0
        for length in lengths:
            assert buf.reserve(length) == total
            total += length
        assert buf.length == total

    def test_growth_rounds_to_power_of_two(self):
        buf = MetadataBuffer()
        buf.reserve(5)
        assert buf.capacity == 8
        buf.reserve(10)
        assert buf.capacity == 16

    def test_growth_at_least_doubles(self):
        buf = MetadataBuffer()
        buf.reserve(64)
        assert buf.capacity == 64
        buf.reserve(1)
        assert buf.capacity == 128

    def test_capacity_never_shrinks(self):
        buf = MetadataBuffer()
        previous = 0
        for length in (3, 100, 1, 0, 700, 5):
            buf.reserve(length)
            assert buf.capacity >= previous
            assert buf.length <= buf.capacity
            previous = buf.capacity

    def test_no_growth_when_space_left(self):
        buf = MetadataBuffer()
        buf.reserve(5)
        buf.reserve(3)
        assert buf.capacity == 8

    def test_new_space_is_zero_filled(self):
        buf = MetadataBuffer()
        offset = buf.reserve(3)
        buf.write(offset, b"abc")
        buf.reserve(10)
        assert buf.getvalue() == b"abc" + bytes(10)

    def test_write_outside_reservation(self):
        buf = MetadataBuffer()
        buf.reserve(2)
        with pytest.raises(ValueError):
            buf.write(0, b"abc")


class TestLimits:
    """Test buffer size limits."""

    def test_default_limit_is_31_bits(self):
        assert MAX_METADATA_SIZE == 0x7FFFFFFF

    def test_total_beyond_limit(self):
        buf = MetadataBuffer(max_size=100)
        with pytest.raises(FormatLimitExceededError):
            buf.reserve(101)
        assert buf.length == 0

    def test_growth_target_beyond_limit(self):
        """Doubling past the limit fails even if the data itself would fit."""
        buf = MetadataBuffer(max_size=100)
        buf.reserve(64)
        with pytest.raises(FormatLimitExceededError):
            buf.reserve(1)
        assert buf.length == 64

    def test_allocation_failure(self):
        class FailingStorage(bytearray):
            def extend(self, data):
                raise MemoryError()

        buf = MetadataBuffer()
        buf._data = FailingStorage()
        with pytest.raises(OutOfMemoryError):
            buf.reserve(16)


class TestWriter:
    """Test text emission through a dump section."""

    def test_append_and_tabs(self, registry):
        with registry.exclusive() as section:
            section.emit_tabs(2)
            section.emit("x;\n")
        assert registry.metadata == b"\t\tx;\n"

    def test_utf8_text(self, registry):
        with registry.exclusive() as section:
            section.emit("é")
        assert registry.metadata == "é".encode("utf-8")

    def test_mirror_matches_buffer(self, registry, tmp_path):
        path = tmp_path / "trace" / "metadata"
        registry.attach_mirror(path)
        with registry.exclusive() as section:
            section.emit("trace {\n")
            section.emit("};\n")
        registry.close()
        assert path.read_bytes() == b"trace {\n};\n"

    def test_mirror_refuses_existing_file(self, registry, tmp_path):
        path = tmp_path / "metadata"
        path.write_bytes(b"stale previous trace\n")
        with pytest.raises(MetadataIOError):
            registry.attach_mirror(path)
        assert registry.writer.mirror is None
        assert path.read_bytes() == b"stale previous trace\n"

    def test_late_mirror_gets_earlier_bytes(self, registry, tmp_path):
        path = tmp_path / "metadata"
        with registry.exclusive() as section:
            section.emit("trace {\n")
        registry.attach_mirror(path)
        with registry.exclusive() as section:
            section.emit("};\n")
        assert path.read_bytes() == registry.metadata == b"trace {\n};\n"
        registry.close()

    def test_empty_buffer_creates_empty_mirror(self, registry, tmp_path):
        path = tmp_path / "metadata"
        registry.attach_mirror(path)
        assert path.read_bytes() == b""
        registry.close()

    def test_short_mirror_write(self, registry):
        class ShortFile:
            def write(self, data):
                return len(data) - 1

            def close(self):
                pass

        registry.writer._mirror = ShortFile()
        with registry.exclusive() as section:
            with pytest.raises(MetadataIOError):
                section.emit("abc")
        # In-memory copy is kept
        assert registry.metadata == b"abc"

    def test_failed_mirror_write(self, registry):
        class BrokenFile:
            def write(self, data):
                raise OSError("disk full")

            def close(self):
                pass

        registry.writer._mirror = BrokenFile()
        with registry.exclusive() as section:
            with pytest.raises(MetadataIOError):
                section.emit("abc")

    def test_released_section(self, registry):
        with registry.exclusive() as section:
            pass
        with pytest.raises(SectionNotHeldError):
            section.emit("late")
        assert registry.metadata == b""


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
