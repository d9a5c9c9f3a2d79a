"""
tracemeta.registry - Per-session metadata state

Session registry, channels, events, enumerations, the session directory,
and the sections guarding concurrent access to them.
"""

from tracemeta.registry.sections import DumpSection, ReadMostlyTable
from tracemeta.registry.entities import (
    METADATA_CHANNEL_ID,
    EventState,
    ChannelState,
    HeaderType,
    EnumValue,
    EnumEntry,
    EnumRegistration,
    Event,
    Channel,
)
from tracemeta.registry.session import (
    ByteOrder,
    BufferingScheme,
    AlignmentTable,
    ProcessIdentity,
    UserIdentity,
    SessionRegistry,
)
from tracemeta.registry.sessions import (
    DEFAULT_SESSION_NAME,
    SessionInfo,
    SessionDirectory,
)

__all__ = [
    # Sections
    "DumpSection",
    "ReadMostlyTable",
    # Entities
    "METADATA_CHANNEL_ID",
    "EventState",
    "ChannelState",
    "HeaderType",
    "EnumValue",
    "EnumEntry",
    "EnumRegistration",
    "Event",
    "Channel",
    # Session registry
    "ByteOrder",
    "BufferingScheme",
    "AlignmentTable",
    "ProcessIdentity",
    "UserIdentity",
    "SessionRegistry",
    # Session directory
    "DEFAULT_SESSION_NAME",
    "SessionInfo",
    "SessionDirectory",
]
