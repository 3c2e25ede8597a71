"""VCD (Value Change Dump) reader that drives input pins.

The header is parsed up front. The body is consumed lazily: each step of
iteration applies value changes to the registered pins until the next
timestamp is found, then returns that timestamp.

Note that a returned timestamp marks the instant *before* the changes the
next step applies. To pair a timestamp with the pin states valid at it,
keep the previous timestamp and read the pins after advancing:

    reader = VcdReader(stream)
    pin = reader.get_pin(["top", "clk"])
    last = None
    for t in reader:
        if last is not None:
            print(last, pin.is_high())
        last = t
"""
import io
import logging
import re
from typing import BinaryIO, Dict, Iterator, List, Optional, Sequence, Union

from vcd.reader import TokenKind, VCDParseError, tokenize

from .errors import HeaderParseError
from .header import Header, HeaderBuilder, Var
from .pins import AtomicPinState, InputPin, PinState
from .timescale import Duration, resolve_timescale

logger = logging.getLogger(__name__)

_ENDDEFINITIONS = re.compile(rb'\$enddefinitions\s+\$end(?=\s|$)')

# Body tokens followed by a separate identifier token
_VALUE_PREFIXES = 'bBrRsS'
_SCALAR_VALUES = '01xXzZ'


class VcdReader:
    """Reader for VCD streams.

    Iterating the reader yields the body's timestamps as ``Duration``s and
    updates every pin obtained from ``get_pin`` along the way. Iteration is
    single pass. Body content that isn't a timestamp or a scalar change is
    skipped, so unknown or malformed tokens never end the iteration.
    """

    def __init__(self, stream: BinaryIO):
        """Parse the header of a VCD stream.

        Args:
            stream: Binary file-like object positioned at the start of the VCD

        Raises:
            HeaderParseError: the header is malformed
            MissingTimescale: the header declares no timescale
        """
        self._stream = stream
        header_bytes, rest = self._read_header()
        self._header = self._parse_header(header_bytes)
        self._scale = resolve_timescale(self._header.timescale)
        self._body = self._body_tokens(rest)
        self._pins: Dict[str, List[AtomicPinState]] = {}
        self._timestamp: Optional[Duration] = None
        self._done = False

        logger.debug(
            "Parsed VCD header: %d variables, timescale %s",
            sum(1 for _ in self._header.variables()), self._header.timescale)

    def _read_header(self):
        """Split the stream at the end of ``$enddefinitions $end``."""
        buf = bytearray()
        start = -1
        for line in iter(self._stream.readline, b''):
            buf += line
            if start < 0:
                start = buf.find(b'$enddefinitions')
                if start < 0:
                    continue
            m = _ENDDEFINITIONS.search(buf, start)
            if m:
                return bytes(buf[:m.end()]), bytes(buf[m.end():])

        raise HeaderParseError("VCD header ended without $enddefinitions")

    def _parse_header(self, data: bytes) -> Header:
        builder = HeaderBuilder()
        header = builder.header

        try:
            for token in tokenize(io.BytesIO(data)):
                if token.kind is TokenKind.ENDDEFINITIONS:
                    return header
                elif token.kind is TokenKind.TIMESCALE:
                    header.timescale = token.data
                elif token.kind is TokenKind.SCOPE:
                    builder.add_scope(token.data.ident, token.data.type_)
                elif token.kind is TokenKind.UPSCOPE:
                    builder.upscope()
                elif token.kind is TokenKind.VAR:
                    var = token.data
                    builder.add_var(Var(
                        var_type=var.type_,
                        size=var.size,
                        id_code=var.id_code,
                        reference=var.reference))
        except (VCDParseError, ValueError) as e:
            raise HeaderParseError(f"Malformed VCD header: {e}") from e

        raise HeaderParseError("VCD header ended without $enddefinitions")

    def _body_tokens(self, rest: bytes) -> Iterator[str]:
        yield from rest.decode('ascii', errors='replace').split()
        for line in iter(self._stream.readline, b''):
            yield from line.decode('ascii', errors='replace').split()

    @property
    def header(self) -> Header:
        return self._header

    @property
    def timestamp(self) -> Optional[Duration]:
        """The timestamp most recently returned by iteration."""
        return self._timestamp

    def scale(self) -> Duration:
        """Return the duration of one tick as declared by the timescale."""
        return self._scale

    def get_pin(self, path: Union[str, Sequence[str]]) -> Optional[InputPin]:
        """Create an input pin for a variable in the VCD header.

        Args:
            path: Scope names followed by the variable name, either as a
                sequence or dot-separated

        Returns:
            An ``InputPin`` that starts out floating, or None if the header
            declares no such variable. Changes the body already went past
            are not replayed to the new pin.
        """
        if isinstance(path, str):
            path = path.split('.')

        var = self._header.find_var(path)
        if var is None:
            return None

        if var.size != 1:
            logger.debug(
                "%s is %d bits wide; only scalar changes are applied",
                '.'.join(path), var.size)

        state = AtomicPinState(PinState.FLOATING)
        self._pins.setdefault(var.id_code, []).append(state)
        logger.debug("Registered pin %s (id %r)", '.'.join(path), var.id_code)
        return InputPin(state)

    def __iter__(self) -> Iterator[Duration]:
        return self

    def __next__(self) -> Duration:
        if self._done:
            raise StopIteration

        for token in self._body:
            c = token[0]
            if c == '#':
                ticks = token[1:]
                if ticks.isdigit():
                    self._timestamp = self._scale.scaled(int(ticks))
                    return self._timestamp
            elif c in _SCALAR_VALUES:
                if len(token) > 1:
                    self._apply(token[1:], c)
            elif c in _VALUE_PREFIXES:
                # Vector, real and string changes: drop the identifier too
                next(self._body, None)
            elif token == '$comment':
                self._skip_to_end()

        self._done = True
        raise StopIteration

    def _skip_to_end(self):
        for token in self._body:
            if token == '$end':
                return

    def _apply(self, id_code: str, value: str):
        states = self._pins.get(id_code)
        if not states:
            return
        state = PinState.from_vcd(value)
        for s in states:
            s.store(state)
