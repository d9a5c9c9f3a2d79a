"""
tracemeta - Trace metadata generation

Generates the CTF trace-schema document that trace readers use to decode
the raw records of a tracing session, from the channels, events and field
type descriptors registered by instrumented applications.
"""

__version__ = "0.1.0"
__author__ = "tracemeta contributors"

from tracemeta.registry import SessionRegistry, SessionDirectory
from tracemeta.statedump import session_statedump, channel_statedump, event_statedump
