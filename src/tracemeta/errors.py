"""
Metadata Errors

Every failure raised while generating trace metadata derives from
MetadataError. None of them are retried inside tracemeta; output already
appended to the session buffer is kept as-is.
"""

from typing import Optional


class MetadataError(Exception):
    """Base class for metadata generation errors."""
    def __init__(self, message: str, field_name: Optional[str] = None):
        self.message = message
        self.field_name = field_name
        if field_name:
            super().__init__(f"{message} (field '{field_name}')")
        else:
            super().__init__(message)


class OutOfMemoryError(MetadataError):
    """The metadata buffer could not be grown."""
    pass


class FormatLimitExceededError(MetadataError):
    """The metadata buffer would exceed the 31-bit length limit of the format."""
    pass


class InvalidFormatError(MetadataError):
    """A descriptor has a shape the metadata format cannot express."""
    pass


class TruncatedDescriptorsError(MetadataError):
    """The field descriptor list ran out while a field still needed slots."""
    pass


class NotFoundError(MetadataError):
    """A referenced enumeration or tracing session does not exist."""
    pass


class MetadataIOError(MetadataError):
    """Writing the mirrored metadata file failed or was short."""
    pass


class ClockSampleError(MetadataError):
    """The clock attributes could not be sampled."""
    pass


class SectionNotHeldError(MetadataError):
    """Emission was attempted through a released dump section."""
    pass
