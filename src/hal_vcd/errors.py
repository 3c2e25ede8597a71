"""Errors raised while reading and writing VCD files.

I/O faults of the underlying stream are not wrapped: they propagate as the
``OSError`` raised by the stream itself.
"""


class VcdError(Exception):
    """Base class for all errors raised by hal_vcd."""
    pass


class HeaderParseError(VcdError):
    """The VCD header is malformed."""
    pass


class MissingTimescale(HeaderParseError):
    """The VCD header does not declare a ``$timescale``."""

    def __init__(self, msg: str = "VCD header does not declare a timescale"):
        super().__init__(msg)


class TimestampConversionError(VcdError, ValueError):
    """A duration can't be represented as whole nanoseconds."""
    pass
