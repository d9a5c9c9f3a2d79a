"""
Pytest configuration and shared fixtures.
"""

import sys
import uuid
from pathlib import Path

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from tracemeta.clock import ClockAttributes
from tracemeta.registry import (
    ByteOrder,
    Channel,
    HeaderType,
    ProcessIdentity,
    SessionDirectory,
    SessionInfo,
    SessionRegistry,
    UserIdentity,
)


TRACE_UUID = uuid.UUID("12345678-9abc-def0-1234-56789abcdef0")
CLOCK_UUID = uuid.UUID("0f0e0d0c-0b0a-0908-0706-050403020100")
SESSION_ID = 7
CREATION_TIME = 1_700_000_000.0


# =============================================================================
# REGISTRY FIXTURES
# =============================================================================

@pytest.fixture
def registry():
    """Per-uid, little-endian session registry."""
    return SessionRegistry(
        tracing_id=SESSION_ID,
        identity=UserIdentity(uid=1000),
        uuid=TRACE_UUID,
    )


@pytest.fixture
def big_endian_registry():
    return SessionRegistry(
        tracing_id=SESSION_ID,
        identity=UserIdentity(uid=1000),
        uuid=TRACE_UUID,
        byte_order=ByteOrder.BIG,
    )


@pytest.fixture
def pid_registry():
    """Per-pid session registry."""
    return SessionRegistry(
        tracing_id=SESSION_ID,
        identity=ProcessIdentity(
            vpid=4242,
            procname="my-app",
            creation_time=CREATION_TIME,
            tracer_patch_level=3,
        ),
        uuid=TRACE_UUID,
    )


@pytest.fixture
def section(registry):
    """Held dump section of `registry`."""
    with registry.exclusive() as held:
        yield held


@pytest.fixture
def channel(registry):
    return registry.register_channel(Channel(chan_id=0, header_type=HeaderType.COMPACT))


# =============================================================================
# COLLABORATOR FIXTURES
# =============================================================================

@pytest.fixture
def sessions():
    directory = SessionDirectory()
    directory.add(SessionInfo(
        id=SESSION_ID,
        name="my-session",
        creation_time=CREATION_TIME,
        hostname="tracehost",
    ))
    return directory


def fixed_clock() -> ClockAttributes:
    return ClockAttributes(
        name="monotonic",
        description="Monotonic Clock",
        frequency=1_000_000_000,
        offset=1_699_999_000_000_000_000,
        uuid=CLOCK_UUID,
    )


@pytest.fixture
def clock_source():
    return fixed_clock
