"""
Metadata Buffer

Append-only byte storage backing a session's metadata document. Space is
handed out by reservation; the write cursor only moves forward.
"""

from typing import Optional

from tracemeta.errors import OutOfMemoryError, FormatLimitExceededError


# Top bit of the 31-bit length field is reserved by the format
MAX_METADATA_SIZE = 0xFFFFFFFF >> 1


def get_count_order(count: int) -> int:
    """Return the order of the smallest power of two >= count."""
    order = count.bit_length() - 1
    if count & (count - 1):
        order += 1
    return order


class MetadataBuffer:
    """
    Growable append buffer.

    Usage:
        buf = MetadataBuffer()
        offset = buf.reserve(len(data))
        buf.write(offset, data)

    Not thread-safe: callers serialize access through the session's
    exclusive dump section.
    """

    def __init__(self, max_size: int = MAX_METADATA_SIZE):
        self._data = bytearray()
        self._length = 0
        self.max_size = max_size

    @property
    def length(self) -> int:
        """Number of bytes handed out so far (the write cursor)."""
        return self._length

    @property
    def capacity(self) -> int:
        """Allocated size, always >= length."""
        return len(self._data)

    def reserve(self, length: int) -> int:
        """
        Reserve `length` bytes and return the offset at which to write them.

        Raises:
            FormatLimitExceededError: the buffer would outgrow the format limit
            OutOfMemoryError: the storage could not be grown
        """
        new_len = self._length + length
        old_alloc_len = len(self._data)

        if new_len > self.max_size:
            raise FormatLimitExceededError(
                f"Metadata would grow to {new_len} bytes (limit {self.max_size})"
            )

        if new_len > old_alloc_len:
            new_alloc_len = max(1 << get_count_order(new_len), old_alloc_len << 1)
            if new_alloc_len > self.max_size:
                raise FormatLimitExceededError(
                    f"Metadata allocation would grow to {new_alloc_len} bytes "
                    f"(limit {self.max_size})"
                )
            try:
                # Extension bytes are zero-filled
                self._data.extend(bytes(new_alloc_len - old_alloc_len))
            except MemoryError as e:
                raise OutOfMemoryError(
                    f"Cannot grow metadata buffer to {new_alloc_len} bytes"
                ) from e

        offset = self._length
        self._length = new_len
        return offset

    def write(self, offset: int, data: bytes) -> None:
        """Copy data into a previously reserved range."""
        end = offset + len(data)
        if offset < 0 or end > self._length:
            raise ValueError(f"Write [{offset}, {end}) outside reserved range")
        self._data[offset:end] = data

    def getvalue(self, start: int = 0, end: Optional[int] = None) -> bytes:
        """Return the written bytes (the zero-filled tail is excluded)."""
        if end is None or end > self._length:
            end = self._length
        return bytes(self._data[start:end])

    def __len__(self) -> int:
        return self._length
