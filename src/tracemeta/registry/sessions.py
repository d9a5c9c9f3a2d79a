"""
Tracing session directory.

Minimal view of the daemon's session list: the statedump only needs to look
a session up by id to print its name, creation time and hostname.
"""

from dataclasses import dataclass
from typing import Optional

from tracemeta.registry.sections import ReadMostlyTable


# Printed instead of generated names, which embed the creation time
DEFAULT_SESSION_NAME = "auto"


@dataclass
class SessionInfo:
    id: int
    name: str
    creation_time: float            # Unix timestamp
    hostname: str = ""
    has_auto_generated_name: bool = False


class SessionDirectory:
    """Tracing sessions by id."""

    def __init__(self):
        self._sessions: ReadMostlyTable = ReadMostlyTable()

    def add(self, session: SessionInfo) -> SessionInfo:
        self._sessions.publish(session.id, session)
        return session

    def remove(self, session_id: int) -> None:
        self._sessions.remove(session_id)

    def find_by_id(self, session_id: int) -> Optional[SessionInfo]:
        with self._sessions.read_section() as sessions:
            return sessions.get(session_id)
