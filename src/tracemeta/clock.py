"""
Trace Clock

Attributes of the clock that timestamps trace records, as written to the
metadata `clock {}` block.
"""

import time
import uuid as uuid_module
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from tracemeta.errors import ClockSampleError


BOOT_ID_PATH = Path("/proc/sys/kernel/random/boot_id")
CLOCK_NAME = "monotonic"
CLOCK_DESCRIPTION = "Monotonic Clock"
CLOCK_FREQUENCY = 1_000_000_000     # Hz
OFFSET_SAMPLES = 10


@dataclass
class ClockAttributes:
    name: str
    description: str
    frequency: int                  # Hz
    offset: int                     # cycles from Epoch to clock origin
    uuid: Optional[uuid_module.UUID] = None


ClockSource = Callable[[], ClockAttributes]


def _read_boot_id() -> Optional[uuid_module.UUID]:
    try:
        return uuid_module.UUID(BOOT_ID_PATH.read_text().strip())
    except (OSError, ValueError):
        return None


def measure_clock_offset(samples: int = OFFSET_SAMPLES) -> int:
    """
    Offset of the monotonic clock from Epoch, in nanoseconds.

    The realtime clock is read between two monotonic reads; the sample with
    the tightest monotonic window wins.
    """
    best_delay = None
    best_offset = 0
    for _ in range(samples):
        before = time.monotonic_ns()
        realtime = time.time_ns()
        after = time.monotonic_ns()
        delay = after - before
        if best_delay is None or delay < best_delay:
            best_delay = delay
            best_offset = realtime - (before + delay // 2)
    return best_offset


def sample_clock_attributes() -> ClockAttributes:
    """
    Snapshot the trace clock attributes.

    Raises:
        ClockSampleError: the clocks could not be read
    """
    try:
        offset = measure_clock_offset()
    except OSError as e:
        raise ClockSampleError(f"Failed to sample clock offset: {e}") from e
    return ClockAttributes(
        name=CLOCK_NAME,
        description=CLOCK_DESCRIPTION,
        frequency=CLOCK_FREQUENCY,
        offset=offset,
        uuid=_read_boot_id(),
    )


def format_iso8601(timestamp: float) -> str:
    """Format a Unix timestamp as local time, e.g. 20240131T154500+0100."""
    return time.strftime("%Y%m%dT%H%M%S%z", time.localtime(timestamp))
