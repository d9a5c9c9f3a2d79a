"""
Channel Statedump

Emits the `stream {}` block of a channel, marks the channel ready, then
emits every event already registered on it, ordered by event id so the
document does not depend on table iteration order.
"""

import logging

from tracemeta.errors import InvalidFormatError, NotFoundError, TruncatedDescriptorsError
from tracemeta.registry.entities import Channel
from tracemeta.registry.sections import DumpSection
from tracemeta.statedump.event import event_statedump
from tracemeta.statedump.fields import FieldStatedump

logger = logging.getLogger(__name__)


def channel_statedump(section: DumpSection, channel: Channel) -> bool:
    """
    Emit the metadata of a channel and of its pending events.

    Returns True if the stream block was emitted by this call. A channel that
    is already ready only gets its pending events dumped. An event with
    malformed descriptors is logged and left undumped; output errors
    (buffer limits, mirror writes) propagate.

    Raises:
        InvalidFormatError: the channel has no event header type
    """
    # Don't dump metadata events
    if channel.is_metadata:
        return False

    emitted = False
    if not channel.ready:
        _emit_stream(section, channel)
        emitted = True

    # Snapshot, then sort by id for a predictable order in the metadata file
    with channel.events.read_section() as events:
        pending = sorted(events.values(), key=lambda e: e.id)

    for event in pending:
        try:
            event_statedump(section, channel, event)
        except (InvalidFormatError, TruncatedDescriptorsError, NotFoundError) as e:
            logger.warning(f"Skipping event '{event.name}' (id {event.id}) of "
                           f"stream {channel.chan_id}: {e}")

    return emitted


def _emit_stream(section: DumpSection, channel: Channel) -> None:
    if channel.header_type is None:
        raise InvalidFormatError(f"Channel {channel.chan_id} has no event header type")

    section.emit(
        "stream {\n"
        f"\tid = {channel.chan_id};\n"
        f"\tevent.header := {channel.header_type.value};\n"
        "\tpacket.context := struct packet_context;\n"
    )

    if channel.ctx_fields is not None:
        section.emit("\tevent.context := struct {\n")
        FieldStatedump(section).dump_fields(channel.ctx_fields, nesting=2)
        section.emit("\t};\n")

    section.emit("};\n\n")

    # Flag success of metadata dump
    channel._latch_ready()
    logger.info(f"Dumped metadata of stream {channel.chan_id}")
