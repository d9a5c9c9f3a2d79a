"""
Registry Entities

Channels, events and enumerations registered by the surrounding session
daemon. Registration happens outside tracemeta; the statedump code only
reads these objects and advances their dump state.

Dump state is one-way: an event goes REGISTERED -> DUMPED and a channel
goes REGISTERED -> READY, and neither is ever reset.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional

from tracemeta.registry.sections import ReadMostlyTable
from tracemeta.types.descriptors import FieldDescriptor


# Channel id of the metadata channel itself (-1U); it never gets a stream block
METADATA_CHANNEL_ID = 0xFFFFFFFF

_UINT64_MASK = 0xFFFFFFFFFFFFFFFF


class EventState(Enum):
    REGISTERED = auto()
    DUMPED = auto()


class ChannelState(Enum):
    REGISTERED = auto()
    READY = auto()


class HeaderType(Enum):
    """Event header layout of a channel."""
    COMPACT = "struct event_header_compact"
    LARGE = "struct event_header_large"


@dataclass
class EnumValue:
    """A 64-bit enum bound, rendered signed or unsigned."""
    value: int
    signed: bool = False

    @property
    def raw(self) -> int:
        """The value as stored in 64 bits."""
        return self.value & _UINT64_MASK

    def to_ctf(self) -> str:
        raw = self.raw
        if self.signed and raw >= 1 << 63:
            return str(raw - (1 << 64))
        return str(raw)


@dataclass
class EnumEntry:
    """One labelled value or range of an enumeration."""
    label: str
    start: EnumValue = field(default_factory=lambda: EnumValue(0))
    end: EnumValue = field(default_factory=lambda: EnumValue(0))
    is_auto: bool = False

    @property
    def is_single_value(self) -> bool:
        return self.start.signed == self.end.signed and self.start.raw == self.end.raw


@dataclass
class EnumRegistration:
    """A named enumeration, keyed by (name, id) in the session registry."""
    name: str
    id: int
    entries: List[EnumEntry] = field(default_factory=list)

    @property
    def key(self):
        return (self.name, self.id)


@dataclass
class Event:
    """An event of a channel."""
    name: str
    id: int
    loglevel: int = 0
    fields: List[FieldDescriptor] = field(default_factory=list)
    model_emf_uri: Optional[str] = None
    _state: EventState = field(default=EventState.REGISTERED, init=False, repr=False)

    @property
    def state(self) -> EventState:
        return self._state

    @property
    def dumped(self) -> bool:
        return self._state == EventState.DUMPED

    def _latch_dumped(self) -> None:
        self._state = EventState.DUMPED


@dataclass
class Channel:
    """
    A channel (stream) and its events.

    `ctx_fields` is None when the channel has no context; an empty list
    still produces an (empty) event.context block.
    """
    chan_id: int
    header_type: Optional[HeaderType] = None
    ctx_fields: Optional[List[FieldDescriptor]] = None
    events: ReadMostlyTable = field(default_factory=ReadMostlyTable, repr=False)
    _state: ChannelState = field(default=ChannelState.REGISTERED, init=False, repr=False)

    @property
    def state(self) -> ChannelState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state == ChannelState.READY

    @property
    def is_metadata(self) -> bool:
        return self.chan_id == METADATA_CHANNEL_ID

    def register_event(self, event: Event) -> Event:
        self.events.publish(event.id, event)
        return event

    def _latch_ready(self) -> None:
        self._state = ChannelState.READY
