"""
Event Statedump

Emits the `event {}` block of one event. An event is only emitted after its
channel's `stream {}` block; until then the call is a silent no-op and the
event is picked up by the channel statedump.
"""

import logging

from tracemeta.registry.entities import Channel, Event
from tracemeta.registry.sections import DumpSection
from tracemeta.statedump.fields import FieldStatedump

logger = logging.getLogger(__name__)


def event_statedump(section: DumpSection, channel: Channel, event: Event) -> bool:
    """
    Emit the metadata of an event of `channel`.

    Returns True if the event block was emitted by this call, False if it
    was skipped (channel not ready yet, event already emitted, or metadata
    channel). On error the event stays undumped so a later pass can retry.
    """
    # Don't dump metadata events
    if channel.is_metadata:
        return False

    if not channel.ready or event.dumped:
        return False

    section.emit(
        "event {\n"
        f'\tname = "{event.name}";\n'
        f"\tid = {event.id};\n"
        f"\tstream_id = {channel.chan_id};\n"
    )
    section.emit(f"\tloglevel = {event.loglevel};\n")
    if event.model_emf_uri:
        section.emit(f'\tmodel.emf.uri = "{event.model_emf_uri}";\n')

    section.emit("\tfields := struct {\n")
    FieldStatedump(section).dump_fields(event.fields, nesting=2)
    section.emit(
        "\t};\n"
        "};\n\n"
    )

    event._latch_dumped()
    logger.debug(f"Dumped metadata of event '{event.name}' (id {event.id}, "
                 f"stream {channel.chan_id})")
    return True
