"""
Metadata Writer

Appends text to a session's metadata buffer and mirrors the same bytes to
the persisted metadata file when one is attached. All higher-level emission
goes through MetadataWriter.append().
"""

import logging
from pathlib import Path
from typing import BinaryIO, Optional

from tracemeta.errors import MetadataIOError
from tracemeta.metadata.buffer import MetadataBuffer

logger = logging.getLogger(__name__)


class MetadataWriter:
    """Formatted append into a MetadataBuffer, with optional file mirror."""

    def __init__(self, buffer: MetadataBuffer, mirror: Optional[BinaryIO] = None):
        self.buffer = buffer
        self._mirror = mirror

    @property
    def mirror(self) -> Optional[BinaryIO]:
        return self._mirror

    def attach_mirror(self, path: Path) -> None:
        """
        Create `path` and mirror the metadata to it.

        The file must not exist yet. Bytes already in the buffer are written
        first, so the file always holds the whole document.

        Raises:
            MetadataIOError: the file exists or cannot be created or written
        """
        self.close_mirror()
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            # Unbuffered so that short writes are visible to us
            mirror = open(path, "xb", buffering=0)
        except OSError as e:
            logger.error(f"Failed to create metadata file {path}: {e}")
            raise MetadataIOError(f"Failed to create metadata file {path}: {e}") from e

        self._mirror = mirror
        try:
            self._mirror_append(self.buffer.getvalue())
        except MetadataIOError:
            self.close_mirror()
            raise
        logger.info(f"Mirroring metadata to {path}")

    def close_mirror(self) -> None:
        if self._mirror is not None:
            self._mirror.close()
            self._mirror = None

    def append(self, text: str) -> None:
        """
        Append text to the metadata.

        Raises:
            FormatLimitExceededError, OutOfMemoryError: from the buffer
            MetadataIOError: the mirror write failed or was short; the bytes
                stay in the in-memory buffer
        """
        data = text.encode("utf-8")
        offset = self.buffer.reserve(len(data))
        self.buffer.write(offset, data)
        self._mirror_append(data)
        logger.debug(f'Append to metadata: "{text}"')

    def print_tabs(self, nesting: int) -> None:
        for _ in range(nesting):
            self.append("\t")

    def _mirror_append(self, data: bytes) -> None:
        if self._mirror is None:
            return
        try:
            written = self._mirror.write(data)
        except OSError as e:
            logger.error(f"Error appending to metadata file: {e}")
            raise MetadataIOError(f"Error appending to metadata file: {e}") from e
        if written != len(data):
            logger.error(f"Short write to metadata file: {written}/{len(data)} bytes")
            raise MetadataIOError(
                f"Short write to metadata file: {written} of {len(data)} bytes"
            )
