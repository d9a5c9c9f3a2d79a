"""
tracemeta.metadata - Metadata output primitives

Growable buffer, text emission with file mirroring, and string escaping.
"""

from tracemeta.metadata.buffer import MetadataBuffer, MAX_METADATA_SIZE, get_count_order
from tracemeta.metadata.writer import MetadataWriter
from tracemeta.metadata.escape import (
    escape_ctf_string,
    escape_enum_label,
    sanitize_identifier,
)

__all__ = [
    "MetadataBuffer",
    "MAX_METADATA_SIZE",
    "get_count_order",
    "MetadataWriter",
    "escape_ctf_string",
    "escape_enum_label",
    "sanitize_identifier",
]
