"""Timescale resolution and exact durations.

VCD bodies count time in ticks; the header's ``$timescale`` declares how
long one tick lasts. Durations are kept as ``count`` ticks of ``fraction``
seconds each so that no precision is lost on conversion.
"""
import datetime
import functools
from dataclasses import dataclass
from fractions import Fraction
from typing import Optional, Union

from vcd.common import Timescale, TimescaleUnit

from .errors import HeaderParseError, MissingTimescale, TimestampConversionError

UNIT_DIVISORS = {
    TimescaleUnit.second: 1,
    TimescaleUnit.millisecond: 10**3,
    TimescaleUnit.microsecond: 10**6,
    TimescaleUnit.nanosecond: 10**9,
    TimescaleUnit.picosecond: 10**12,
    TimescaleUnit.femtosecond: 10**15,
}

NS_PER_SECOND = 10**9
MAX_NANOSECONDS = 2**64 - 1


@functools.total_ordering
@dataclass(frozen=True, eq=False)
class Duration:
    """An exact duration of ``count`` units of ``fraction`` seconds."""
    count: int
    fraction: Fraction = Fraction(1, NS_PER_SECOND)

    @property
    def seconds(self) -> Fraction:
        return self.count * self.fraction

    def scaled(self, ticks: int) -> 'Duration':
        """Return the duration of ``ticks`` units of this scale."""
        return Duration(self.count * ticks, self.fraction)

    def to_nanoseconds(self) -> int:
        """Convert to whole nanoseconds.

        Raises:
            TimestampConversionError: the value is not a whole, non-negative
                number of nanoseconds that fits in 64 bits
        """
        ns = self.seconds * NS_PER_SECOND
        if ns.denominator != 1:
            raise TimestampConversionError(
                f"{self} is not a whole number of nanoseconds")
        ns = ns.numerator
        if ns < 0 or ns > MAX_NANOSECONDS:
            raise TimestampConversionError(f"{self} is out of range")
        return ns

    def __eq__(self, other):
        if not isinstance(other, Duration):
            return NotImplemented
        return self.seconds == other.seconds

    def __lt__(self, other):
        if not isinstance(other, Duration):
            return NotImplemented
        return self.seconds < other.seconds

    def __hash__(self):
        return hash(self.seconds)

    def __str__(self):
        return f"{self.count} x {self.fraction} s"


def nanoseconds(n: int) -> Duration:
    return Duration(n, Fraction(1, 10**9))


def microseconds(n: int) -> Duration:
    return Duration(n, Fraction(1, 10**6))


def milliseconds(n: int) -> Duration:
    return Duration(n, Fraction(1, 10**3))


def seconds(n: int) -> Duration:
    return Duration(n, Fraction(1))


def resolve_timescale(timescale: Optional[Timescale]) -> Duration:
    """Resolve a header timescale into the duration of one tick.

    The magnitude may be a ``TimescaleMagnitude`` or a plain integer,
    depending on the pyvcd release that parsed the header.

    Args:
        timescale: Timescale declared by the header, or None

    Raises:
        MissingTimescale: the header declared no timescale
        HeaderParseError: the magnitude is not a positive integer
    """
    if timescale is None:
        raise MissingTimescale()
    magnitude = getattr(timescale.magnitude, "value", timescale.magnitude)
    if isinstance(magnitude, bool) or not isinstance(magnitude, int) or magnitude <= 0:
        raise HeaderParseError(f"Invalid timescale magnitude {magnitude!r}")
    unit = TimescaleUnit(getattr(timescale.unit, "value", timescale.unit))
    return Duration(magnitude, Fraction(1, UNIT_DIVISORS[unit]))


def to_nanoseconds(value: Union[Duration, datetime.timedelta, int]) -> int:
    """Convert a caller supplied timestamp to whole nanoseconds.

    Plain integers are taken to be nanoseconds already.
    """
    if isinstance(value, Duration):
        return value.to_nanoseconds()
    if isinstance(value, datetime.timedelta):
        # timedelta is exact to the microsecond
        us = (value.days * 86400 + value.seconds) * 10**6 + value.microseconds
        return microseconds(us).to_nanoseconds()
    if isinstance(value, int) and not isinstance(value, bool):
        return nanoseconds(value).to_nanoseconds()
    raise TimestampConversionError(
        f"can't convert {value!r} to nanoseconds")
