"""
Session Statedump

Emits the session-wide part of the metadata document, once per session
registry, before any channel or event:

1. CTF version comment and primitive type aliases
2. trace {} block with the packet header
3. env {} block: tracer, buffering scheme, session and application identity
4. clock {} block and clock-mapped integer aliases
5. packet context and the compact/large event header structures

Any failure is fatal for the session: the caller must not emit channels
into a document whose preamble is incomplete.
"""

import logging

from tracemeta.clock import ClockSource, format_iso8601, sample_clock_attributes
from tracemeta.errors import ClockSampleError, NotFoundError
from tracemeta.metadata.escape import escape_ctf_string
from tracemeta.registry.session import BufferingScheme, ProcessIdentity, SessionRegistry
from tracemeta.registry.sections import DumpSection
from tracemeta.registry.sessions import DEFAULT_SESSION_NAME, SessionDirectory

logger = logging.getLogger(__name__)


CTF_VERSION_MAJOR = 1
CTF_VERSION_MINOR = 8


def session_statedump(
    section: DumpSection,
    sessions: SessionDirectory,
    clock_source: ClockSource = sample_clock_attributes,
    default_session_name: str = DEFAULT_SESSION_NAME,
) -> bool:
    """
    Emit the session-level metadata of the section's registry.

    Returns True if the preamble was emitted by this call, False if the
    registry already has one. A failed dump leaves the registry undumped.

    Raises:
        NotFoundError: the registry's tracing session is not in `sessions`
        ClockSampleError: the clock attributes could not be sampled
    """
    registry = section.registry
    if registry.session_dumped:
        return False
    align = registry.alignments

    # Version comment
    section.emit(f"/* CTF {CTF_VERSION_MAJOR}.{CTF_VERSION_MINOR} */\n\n")

    section.emit(
        f"typealias integer {{ size = 8; align = {align.uint8}; signed = false; }} := uint8_t;\n"
        f"typealias integer {{ size = 16; align = {align.uint16}; signed = false; }} := uint16_t;\n"
        f"typealias integer {{ size = 32; align = {align.uint32}; signed = false; }} := uint32_t;\n"
        f"typealias integer {{ size = 64; align = {align.uint64}; signed = false; }} := uint64_t;\n"
        f"typealias integer {{ size = {align.bits_per_long}; align = {align.long}; "
        "signed = false; } := unsigned long;\n"
        "typealias integer { size = 5; align = 1; signed = false; } := uint5_t;\n"
        "typealias integer { size = 27; align = 1; signed = false; } := uint27_t;\n"
        "\n"
        "trace {\n"
        f"\tmajor = {CTF_VERSION_MAJOR};\n"
        f"\tminor = {CTF_VERSION_MINOR};\n"
        f'\tuuid = "{registry.uuid}";\n'
        f"\tbyte_order = {registry.byte_order.value};\n"
        "\tpacket.header := struct {\n"
        "\t\tuint32_t magic;\n"
        "\t\tuint8_t  uuid[16];\n"
        "\t\tuint32_t stream_id;\n"
        "\t\tuint64_t stream_instance_id;\n"
        "\t};\n"
        "};\n\n"
    )

    section.emit(
        "env {\n"
        '\tdomain = "ust";\n'
        '\ttracer_name = "lttng-ust";\n'
        f"\ttracer_major = {registry.tracer_major};\n"
        f"\ttracer_minor = {registry.tracer_minor};\n"
        f'\ttracer_buffering_scheme = "{registry.buffering_scheme.value}";\n'
        f"\ttracer_buffering_id = {registry.buffering_id};\n"
        f"\tarchitecture_bit_width = {align.bits_per_long};\n"
    )

    _emit_session_information(section, registry, sessions, default_session_name)

    # Per-application registries can describe the application itself
    _emit_app_information(section, registry)

    section.emit("};\n\n")

    _emit_clock(section, registry, clock_source)
    _emit_packet_context(section)
    _emit_event_headers(section, registry)

    registry._latch_session_dumped()
    logger.info(f"Dumped session metadata of session {registry.tracing_id} "
                f"({registry.buffering_scheme.value} {registry.buffering_id})")
    return True


def _emit_session_information(section: DumpSection, registry: SessionRegistry,
                              sessions: SessionDirectory,
                              default_session_name: str) -> None:
    session = sessions.find_by_id(registry.tracing_id)
    if session is None:
        raise NotFoundError(f"Tracing session {registry.tracing_id} not found")

    # Generated names embed the creation time, which is printed separately
    if session.has_auto_generated_name:
        name = default_session_name
    else:
        name = session.name

    section.emit(f'\ttrace_name = "{escape_ctf_string(name)}";\n')
    section.emit(
        f'\ttrace_creation_datetime = "{format_iso8601(session.creation_time)}";\n'
        f'\thostname = "{session.hostname}";\n'
    )


def _emit_app_information(section: DumpSection, registry: SessionRegistry) -> None:
    if registry.buffering_scheme != BufferingScheme.PER_PID:
        return

    app: ProcessIdentity = registry.identity
    section.emit(
        f"\ttracer_patchlevel = {app.tracer_patch_level};\n"
        f"\tvpid = {app.vpid};\n"
        f'\tprocname = "{app.procname}";\n'
        f'\tvpid_datetime = "{format_iso8601(app.creation_time)}";\n'
    )


def _emit_clock(section: DumpSection, registry: SessionRegistry,
                clock_source: ClockSource) -> None:
    try:
        clock = clock_source()
    except ClockSampleError as e:
        logger.error(f"Failed to serialize clock description: {e}")
        raise
    except Exception as e:
        logger.error(f"Failed to serialize clock description: {e}")
        raise ClockSampleError(f"Failed to sample clock attributes: {e}") from e

    section.emit(
        "clock {\n"
        f'\tname = "{clock.name}";\n'
    )
    if clock.uuid is not None:
        section.emit(f'\tuuid = "{clock.uuid}";\n')
    section.emit(
        f'\tdescription = "{clock.description}";\n'
        f"\tfreq = {clock.frequency}; /* Frequency, in Hz */\n"
        "\t/* clock value offset from Epoch is: offset * (1/freq) */\n"
        f"\toffset = {clock.offset};\n"
        "};\n\n"
    )

    align = registry.alignments
    section.emit(
        "typealias integer {\n"
        "\tsize = 27; align = 1; signed = false;\n"
        f"\tmap = clock.{clock.name}.value;\n"
        "} := uint27_clock_monotonic_t;\n"
        "\n"
        "typealias integer {\n"
        f"\tsize = 32; align = {align.uint32}; signed = false;\n"
        f"\tmap = clock.{clock.name}.value;\n"
        "} := uint32_clock_monotonic_t;\n"
        "\n"
        "typealias integer {\n"
        f"\tsize = 64; align = {align.uint64}; signed = false;\n"
        f"\tmap = clock.{clock.name}.value;\n"
        "} := uint64_clock_monotonic_t;\n\n"
    )


def _emit_packet_context(section: DumpSection) -> None:
    section.emit(
        "struct packet_context {\n"
        "\tuint64_clock_monotonic_t timestamp_begin;\n"
        "\tuint64_clock_monotonic_t timestamp_end;\n"
        "\tuint64_t content_size;\n"
        "\tuint64_t packet_size;\n"
        "\tuint64_t packet_seq_num;\n"
        "\tunsigned long events_discarded;\n"
        "\tuint32_t cpu_id;\n"
        "};\n\n"
    )


def _emit_event_headers(section: DumpSection, registry: SessionRegistry) -> None:
    """
    Compact header: ids 0 - 30, id 31 flags an extended header.
    Large header: ids 0 - 65534, id 65535 flags an extended header.
    """
    align = registry.alignments
    section.emit(
        "struct event_header_compact {\n"
        "\tenum : uint5_t { compact = 0 ... 30, extended = 31 } id;\n"
        "\tvariant <id> {\n"
        "\t\tstruct {\n"
        "\t\t\tuint27_clock_monotonic_t timestamp;\n"
        "\t\t} compact;\n"
        "\t\tstruct {\n"
        "\t\t\tuint32_t id;\n"
        "\t\t\tuint64_clock_monotonic_t timestamp;\n"
        "\t\t} extended;\n"
        "\t} v;\n"
        f"}} align({align.uint32});\n"
        "\n"
        "struct event_header_large {\n"
        "\tenum : uint16_t { compact = 0 ... 65534, extended = 65535 } id;\n"
        "\tvariant <id> {\n"
        "\t\tstruct {\n"
        "\t\t\tuint32_clock_monotonic_t timestamp;\n"
        "\t\t} compact;\n"
        "\t\tstruct {\n"
        "\t\t\tuint32_t id;\n"
        "\t\t\tuint64_clock_monotonic_t timestamp;\n"
        "\t\t} extended;\n"
        "\t} v;\n"
        f"}} align({align.uint16});\n\n"
    )
