"""VCD (Value Change Dump) writer driven by output pins.

A ``VcdWriterBuilder`` declares the header: one scope per module and one
single-bit wire per pin. ``build()`` finishes the header and returns a
``VcdWriter``, which writes timestamps on request and the state of every
pin whenever it is sampled.
"""
import logging
from typing import BinaryIO, List, Tuple

from vcd.common import ScopeType, Timescale, TimescaleMagnitude, TimescaleUnit, VarType

from .errors import VcdError
from .header import Header, HeaderBuilder, IdCodeGenerator, Var
from .pins import AtomicPinState, OpenDrainPin, PinState, PushPullPin
from .timescale import to_nanoseconds

logger = logging.getLogger(__name__)

TIMESCALE = Timescale(TimescaleMagnitude.one, TimescaleUnit.nanosecond)


def _write_line(stream: BinaryIO, line: str):
    stream.write(line.encode('ascii') + b'\n')


def _check_name(name: str):
    """VCD names are single tokens of printable ASCII."""
    if not name or not all('!' <= c <= '~' for c in name):
        raise VcdError(f"Invalid VCD name {name!r}")


class VcdWriterBuilder:
    """Builder for a ``VcdWriter``.

    The timescale and the root module are written as soon as the builder
    is created; every pin added writes its variable declaration.

    Usage:
        builder = VcdWriterBuilder(stream, "logic")
        led = builder.add_push_pull_pin("led")
        writer = builder.build()
        writer.timestamp(0)
        led.set_high()
        writer.sample()
    """

    def __init__(self, stream: BinaryIO, module: str = "top"):
        """Start a VCD header.

        Args:
            stream: Binary file-like object to write to
            module: Name of the root module holding the pins
        """
        _check_name(module)
        self._stream = stream
        self._builder = HeaderBuilder(Header(timescale=TIMESCALE))
        self._id_codes = IdCodeGenerator()
        self._pins: List[Tuple[str, AtomicPinState]] = []
        self._built = False

        _write_line(stream, f"$timescale {TIMESCALE} $end")
        self.add_module(module)

    @property
    def header(self) -> Header:
        return self._builder.header

    def add_push_pull_pin(self, reference: str) -> PushPullPin:
        """Add a push pull pin with a corresponding named VCD variable.

        ========= =========
        Pin state VCD value
        ========= =========
        high      1
        low       0
        ========= =========

        The initial pin state is low.
        """
        state = self._add_wire(reference, PinState.LOW)
        return PushPullPin(state)

    def add_open_drain_pin(self, reference: str) -> OpenDrainPin:
        """Add an open drain pin with a corresponding named VCD variable.

        ========= =========
        Pin state VCD value
        ========= =========
        high      0
        low       z
        ========= =========

        The initial pin state is floating.
        """
        state = self._add_wire(reference, PinState.FLOATING)
        return OpenDrainPin(state)

    # Older name for add_open_drain_pin
    add_open_gain_pin = add_open_drain_pin

    def add_module(self, name: str):
        """Open a module scope for the pins added hereafter.

        The new module is nested in the current one.
        """
        self._check_open()
        _check_name(name)
        scope = self._builder.add_scope(name, ScopeType.module)
        _write_line(self._stream, scope.declaration())

    def upscope(self):
        """Close the current module scope.

        Raises:
            VcdError: only the root module is open
        """
        self._check_open()
        if self._builder.depth <= 1:
            raise VcdError("Can't close the root module")
        self._builder.upscope()
        _write_line(self._stream, "$upscope $end")

    def build(self) -> 'VcdWriter':
        """Finish the header and return the writer.

        All open scopes are closed. The builder can't be used afterwards.
        """
        self._check_open()
        while self._builder.depth:
            self._builder.upscope()
            _write_line(self._stream, "$upscope $end")
        _write_line(self._stream, "$enddefinitions $end")
        self._built = True

        logger.debug("Finished VCD header with %d pins", len(self._pins))
        return VcdWriter(self._stream, self._pins)

    def _add_wire(self, reference: str, initial: PinState) -> AtomicPinState:
        self._check_open()
        _check_name(reference)
        var = self._builder.add_var(Var(
            var_type=VarType.wire,
            size=1,
            id_code=next(self._id_codes),
            reference=reference))
        _write_line(self._stream, var.declaration())

        state = AtomicPinState(initial)
        self._pins.append((var.id_code, state))
        return state

    def _check_open(self):
        if self._built:
            raise VcdError("VcdWriterBuilder has already been built")


class VcdWriter:
    """Writes timestamps and sampled pin states to a VCD stream."""

    def __init__(self, stream: BinaryIO, pins: List[Tuple[str, AtomicPinState]]):
        self._stream = stream
        self._pins = pins

    def timestamp(self, timestamp):
        """Write a timestamp.

        The timestamp is the point in time for the samples that follow. It
        may be a ``Duration``, a ``datetime.timedelta`` or an integer number
        of nanoseconds. Timestamps are written as given; keeping them
        increasing is up to the caller.

        Raises:
            TimestampConversionError: the timestamp is not a whole number of
                nanoseconds
        """
        ns = to_nanoseconds(timestamp)
        _write_line(self._stream, f"#{ns}")

    def sample(self):
        """Sample all pins and write their state.

        Every pin is written on every sample, changed or not, in the order
        the pins were added.
        """
        for id_code, state in self._pins:
            _write_line(self._stream, f"{state.load().to_vcd()}{id_code}")

    def flush(self):
        self._stream.flush()
