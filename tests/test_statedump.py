"""
Tests for channel and event statedumps.
"""

import pytest

from tracemeta.errors import InvalidFormatError
from tracemeta.registry import (
    METADATA_CHANNEL_ID,
    Channel,
    ChannelState,
    Event,
    EventState,
    HeaderType,
)
from tracemeta.statedump import channel_statedump, event_statedump
from tracemeta.types import (
    ArrayNestableType,
    EnumType,
    FieldDescriptor,
    FloatType,
    IntegerType,
    StringType,
)


INT32 = "integer { size = 32; align = 8; signed = 0; encoding = none; base = 10; }"

STREAM_0 = (
    "stream {\n"
    "\tid = 0;\n"
    "\tevent.header := struct event_header_compact;\n"
    "\tpacket.context := struct packet_context;\n"
    "};\n\n"
)


def event_block(name, event_id, stream_id=0, loglevel=13, body=""):
    return (
        "event {\n"
        f'\tname = "{name}";\n'
        f"\tid = {event_id};\n"
        f"\tstream_id = {stream_id};\n"
        f"\tloglevel = {loglevel};\n"
        "\tfields := struct {\n"
        f"{body}"
        "\t};\n"
        "};\n\n"
    )


class TestEventStatedump:
    """Event blocks and their gating."""

    def test_channel_not_ready(self, registry, channel):
        event = channel.register_event(Event("ev", 1, loglevel=13))
        with registry.exclusive() as section:
            assert event_statedump(section, channel, event) is False
        assert registry.metadata == b""
        assert event.state == EventState.REGISTERED

    def test_event_block(self, registry, channel):
        with registry.exclusive() as section:
            channel_statedump(section, channel)
            event = channel.register_event(Event(
                "app:ev", 1, loglevel=13,
                fields=[FieldDescriptor("x", IntegerType()), FieldDescriptor("s", StringType())],
            ))
            assert event_statedump(section, channel, event) is True
        expected = event_block("app:ev", 1, body=f"\t\t{INT32} _x;\n\t\tstring _s;\n")
        assert registry.metadata.decode() == STREAM_0 + expected
        assert event.state == EventState.DUMPED

    def test_model_emf_uri(self, registry, channel):
        event = channel.register_event(Event("ev", 2, loglevel=4,
                                             model_emf_uri="http://example.com/model"))
        with registry.exclusive() as section:
            channel_statedump(section, channel)
        text = registry.metadata.decode()
        assert '\tloglevel = 4;\n\tmodel.emf.uri = "http://example.com/model";\n' in text

    def test_dumped_once(self, registry, channel):
        with registry.exclusive() as section:
            channel_statedump(section, channel)
            event = channel.register_event(Event("ev", 1))
            event_statedump(section, channel, event)
            length = len(registry.metadata)
            assert event_statedump(section, channel, event) is False
        assert len(registry.metadata) == length
        assert registry.metadata.decode().count("event {") == 1

    def test_failed_event_stays_registered(self, registry, channel):
        with registry.exclusive() as section:
            channel_statedump(section, channel)
            event = channel.register_event(Event("ev", 1, fields=[
                FieldDescriptor("arr", ArrayNestableType(length=2)),
                FieldDescriptor("", FloatType()),
            ]))
            with pytest.raises(InvalidFormatError):
                event_statedump(section, channel, event)
        assert event.state == EventState.REGISTERED

    def test_metadata_channel(self, registry):
        channel = registry.register_channel(
            Channel(chan_id=METADATA_CHANNEL_ID, header_type=HeaderType.COMPACT))
        event = channel.register_event(Event("ev", 1))
        with registry.exclusive() as section:
            assert channel_statedump(section, channel) is False
            assert event_statedump(section, channel, event) is False
        assert registry.metadata == b""


class TestChannelStatedump:
    """Stream blocks, readiness and event ordering."""

    def test_stream_block(self, registry, channel):
        with registry.exclusive() as section:
            assert channel_statedump(section, channel) is True
        assert registry.metadata.decode() == STREAM_0
        assert channel.state == ChannelState.READY

    def test_large_header(self, registry):
        channel = registry.register_channel(Channel(chan_id=3, header_type=HeaderType.LARGE))
        with registry.exclusive() as section:
            channel_statedump(section, channel)
        assert "\tevent.header := struct event_header_large;\n" in registry.metadata.decode()

    def test_missing_header_type(self, registry):
        channel = registry.register_channel(Channel(chan_id=1))
        with registry.exclusive() as section:
            with pytest.raises(InvalidFormatError):
                channel_statedump(section, channel)
        assert channel.state == ChannelState.REGISTERED
        assert registry.metadata == b""

    def test_context_fields(self, registry):
        channel = registry.register_channel(Channel(
            chan_id=0,
            header_type=HeaderType.COMPACT,
            ctx_fields=[FieldDescriptor("_vtid", IntegerType())],
        ))
        with registry.exclusive() as section:
            channel_statedump(section, channel)
        assert registry.metadata.decode() == (
            "stream {\n"
            "\tid = 0;\n"
            "\tevent.header := struct event_header_compact;\n"
            "\tpacket.context := struct packet_context;\n"
            "\tevent.context := struct {\n"
            f"\t\t{INT32} __vtid;\n"
            "\t};\n"
            "};\n\n"
        )

    def test_empty_context_list(self, registry):
        channel = registry.register_channel(
            Channel(chan_id=0, header_type=HeaderType.COMPACT, ctx_fields=[]))
        with registry.exclusive() as section:
            channel_statedump(section, channel)
        assert "\tevent.context := struct {\n\t};\n" in registry.metadata.decode()

    def test_events_sorted_by_id(self, registry, channel):
        for event_id in (5, 1, 3):
            channel.register_event(Event(f"ev{event_id}", event_id))
        with registry.exclusive() as section:
            channel_statedump(section, channel)
        expected = STREAM_0 + "".join(event_block(f"ev{i}", i, loglevel=0) for i in (1, 3, 5))
        assert registry.metadata.decode() == expected

    def test_dumped_twice(self, registry, channel):
        channel.register_event(Event("ev1", 1))
        with registry.exclusive() as section:
            channel_statedump(section, channel)
            channel.register_event(Event("ev2", 2))
            assert channel_statedump(section, channel) is False
        text = registry.metadata.decode()
        assert text.count("stream {") == 1
        assert text.count('name = "ev1"') == 1
        assert text.count('name = "ev2"') == 1

    def test_bad_event_does_not_block_others(self, registry, channel):
        bad = channel.register_event(Event("bad", 1, fields=[
            FieldDescriptor("e", EnumType(name="missing", id=0, container=IntegerType())),
        ]))
        good = channel.register_event(Event("good", 2))
        with registry.exclusive() as section:
            assert channel_statedump(section, channel) is True
        assert bad.state == EventState.REGISTERED
        assert good.state == EventState.DUMPED
        assert channel.state == ChannelState.READY

    def test_separate_sections(self, registry, channel):
        with registry.exclusive() as section:
            channel_statedump(section, channel)
        event = channel.register_event(Event("late", 9))
        with registry.exclusive() as section:
            event_statedump(section, channel, event)
        assert registry.metadata.decode() == STREAM_0 + event_block("late", 9, loglevel=0)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
