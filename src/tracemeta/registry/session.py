"""
Session Registry

Per-session metadata state: the output buffer and its writer, the layout
properties of the traced application (byte order, alignments, long width),
the buffering scheme with its identity, and the channel and enum tables.

One registry exists per (tracing session, application) for per-pid
buffering, or per (tracing session, user) for per-uid buffering.
"""

import logging
import threading
import uuid as uuid_module
from contextlib import contextmanager
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional, Union

from tracemeta.metadata.buffer import MAX_METADATA_SIZE, MetadataBuffer
from tracemeta.metadata.writer import MetadataWriter
from tracemeta.registry.entities import Channel, EnumRegistration
from tracemeta.registry.sections import DumpSection, ReadMostlyTable

logger = logging.getLogger(__name__)


class ByteOrder(Enum):
    LITTLE = "le"
    BIG = "be"

    @property
    def reverse(self) -> "ByteOrder":
        return ByteOrder.BIG if self == ByteOrder.LITTLE else ByteOrder.LITTLE


class BufferingScheme(Enum):
    PER_PID = "pid"
    PER_UID = "uid"


@dataclass
class AlignmentTable:
    """Alignment, in bits, of the application's primitive types."""
    uint8: int = 8
    uint16: int = 8
    uint32: int = 8
    uint64: int = 8
    long: int = 8
    bits_per_long: int = 64


@dataclass
class ProcessIdentity:
    """Identity of the traced application (per-pid buffering)."""
    vpid: int
    procname: str
    creation_time: float            # Unix timestamp
    tracer_patch_level: int = 0


@dataclass
class UserIdentity:
    """Identity of the traced user (per-uid buffering)."""
    uid: int


class SessionRegistry:
    """
    Metadata registry of one tracing session buffer.

    Usage:
        registry = SessionRegistry(tracing_id=1, identity=UserIdentity(uid=1000))
        with registry.exclusive() as section:
            session_statedump(section, sessions)
    """

    def __init__(
        self,
        tracing_id: int,
        identity: Union[ProcessIdentity, UserIdentity],
        uuid: Optional[uuid_module.UUID] = None,
        byte_order: ByteOrder = ByteOrder.LITTLE,
        alignments: Optional[AlignmentTable] = None,
        tracer_major: int = 2,
        tracer_minor: int = 13,
        max_metadata_size: int = MAX_METADATA_SIZE,
    ):
        self.tracing_id = tracing_id
        self.identity = identity
        self.uuid = uuid or uuid_module.uuid4()
        self.byte_order = byte_order
        self.alignments = alignments or AlignmentTable()
        self.tracer_major = tracer_major
        self.tracer_minor = tracer_minor

        self.buffer = MetadataBuffer(max_size=max_metadata_size)
        self.writer = MetadataWriter(self.buffer)
        self.enums: ReadMostlyTable = ReadMostlyTable()
        self.channels: ReadMostlyTable = ReadMostlyTable()

        self._lock = threading.Lock()
        self._session_dumped = False

    @property
    def buffering_scheme(self) -> BufferingScheme:
        if isinstance(self.identity, ProcessIdentity):
            return BufferingScheme.PER_PID
        return BufferingScheme.PER_UID

    @property
    def buffering_id(self) -> int:
        if isinstance(self.identity, ProcessIdentity):
            return self.identity.vpid
        return self.identity.uid

    @property
    def metadata(self) -> bytes:
        """The metadata document emitted so far."""
        return self.buffer.getvalue()

    @property
    def session_dumped(self) -> bool:
        """True once the session-level metadata has been emitted."""
        return self._session_dumped

    def _latch_session_dumped(self) -> None:
        self._session_dumped = True

    # =========================================================================
    # Sections
    # =========================================================================

    @contextmanager
    def exclusive(self) -> Iterator[DumpSection]:
        """Hold the session's exclusive dump section."""
        with self._lock:
            section = DumpSection(self)
            try:
                yield section
            finally:
                section.release()

    # =========================================================================
    # Registration (done by the surrounding daemon)
    # =========================================================================

    def register_enum(self, registration: EnumRegistration) -> EnumRegistration:
        self.enums.publish(registration.key, registration)
        return registration

    def lookup_enum(self, name: str, enum_id: int) -> Optional[EnumRegistration]:
        with self.enums.read_section() as enums:
            return enums.get((name, enum_id))

    def register_channel(self, channel: Channel) -> Channel:
        self.channels.publish(channel.chan_id, channel)
        return channel

    def get_channel(self, chan_id: int) -> Optional[Channel]:
        with self.channels.read_section() as channels:
            return channels.get(chan_id)

    # =========================================================================
    # Mirror file and teardown
    # =========================================================================

    def attach_mirror(self, path: Path) -> None:
        self.writer.attach_mirror(path)

    def close(self) -> None:
        """Tear down: close the mirror and drop the buffer."""
        self.writer.close_mirror()
        self.buffer = MetadataBuffer(max_size=self.buffer.max_size)
        self.writer = MetadataWriter(self.buffer)
        logger.debug(f"Closed metadata registry of session {self.tracing_id}")
