"""
tracemeta.statedump - Metadata document generation

Session, channel and event statedumps, and the field type walker they
share. Every entry point takes the DumpSection of the session registry.
"""

from tracemeta.statedump.fields import FieldStatedump
from tracemeta.statedump.event import event_statedump
from tracemeta.statedump.channel import channel_statedump
from tracemeta.statedump.session import CTF_VERSION_MAJOR, CTF_VERSION_MINOR, session_statedump

__all__ = [
    "FieldStatedump",
    "event_statedump",
    "channel_statedump",
    "session_statedump",
    "CTF_VERSION_MAJOR",
    "CTF_VERSION_MINOR",
]
