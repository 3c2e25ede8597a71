"""Read and write VCD (Value Change Dump) files through digital pins.

A ``VcdReader`` turns the variables of a VCD file into input pins that
follow the trace as it is iterated. A ``VcdWriterBuilder`` creates output
pins whose states are written to a VCD file each time the resulting
``VcdWriter`` samples them. Pins share their state safely between threads,
so a driver under test can run on its own thread.
"""
from .errors import VcdError, HeaderParseError, MissingTimescale, TimestampConversionError
from .header import Header, Scope, Var, id_code
from .pins import (
    PinState, AtomicPinState, InputPin, PushPullPin, OpenDrainPin, OpenGainPin)
from .timescale import (
    Duration, nanoseconds, microseconds, milliseconds, seconds, resolve_timescale)
from .vcd_reader import VcdReader
from .vcd_writer import VcdWriterBuilder, VcdWriter
from . import hal


__all__ = [
    'VcdReader',
    'VcdWriterBuilder',
    'VcdWriter',
    'PinState',
    'AtomicPinState',
    'InputPin',
    'PushPullPin',
    'OpenDrainPin',
    'OpenGainPin',
    'Duration',
    'nanoseconds',
    'microseconds',
    'milliseconds',
    'seconds',
    'resolve_timescale',
    'Header',
    'Scope',
    'Var',
    'id_code',
    'VcdError',
    'HeaderParseError',
    'MissingTimescale',
    'TimestampConversionError',
    'hal',
]
