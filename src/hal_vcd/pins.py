"""Pin states and pins that share them between threads.

An ``AtomicPinState`` is the one piece of shared mutable state in hal_vcd.
A VCD reader or writer holds one end, any number of pins hold the other,
and each side may live on its own thread. Every load and store on a cell is
serialized, so all threads observe the same order of states.
"""
import enum
import threading


class PinState(enum.Enum):
    """A digital pin state."""
    HIGH = 1
    LOW = 2
    # Not connected / High-Z
    FLOATING = 3

    @classmethod
    def from_vcd(cls, value: str) -> 'PinState':
        """Map a VCD scalar value to a pin state.

        The unknown value ``x`` has no pin state of its own and reads as
        floating.
        """
        try:
            return _FROM_VCD[value.lower()]
        except (KeyError, AttributeError):
            raise ValueError(f"Not a VCD scalar value: {value!r}")

    def to_vcd(self) -> str:
        return _TO_VCD[self]


_FROM_VCD = {
    '0': PinState.LOW,
    '1': PinState.HIGH,
    'z': PinState.FLOATING,
    'x': PinState.FLOATING,
}

_TO_VCD = {
    PinState.HIGH: '1',
    PinState.LOW: '0',
    PinState.FLOATING: 'z',
}


class AtomicPinState:
    """A pin state that can be safely shared between threads."""

    def __init__(self, state: PinState = PinState.FLOATING):
        self._lock = threading.Lock()
        self._state = state

    def load(self) -> PinState:
        with self._lock:
            return self._state

    def store(self, state: PinState):
        if not isinstance(state, PinState):
            raise TypeError(f"Expected PinState, got {type(state).__name__}")
        with self._lock:
            self._state = state

    def __repr__(self):
        return f"AtomicPinState({self.load().name})"


class InputPin:
    """A read-only pin over a shared state.

    Example:
        state = AtomicPinState(PinState.LOW)
        pin = InputPin(state)
        assert pin.is_low()
        state.store(PinState.HIGH)
        assert pin.is_high()
    """
    __slots__ = ('state',)

    def __init__(self, state: AtomicPinState):
        self.state = state

    def is_high(self) -> bool:
        return self.state.load() is PinState.HIGH

    def is_low(self) -> bool:
        return self.state.load() is PinState.LOW

    def __repr__(self):
        return f"InputPin({self.state.load().name})"


class PushPullPin:
    """An output pin that actively drives both levels.

    Driving high stores ``HIGH``, driving low stores ``LOW``. The pin can
    also be read back.
    """
    __slots__ = ('state',)

    def __init__(self, state: AtomicPinState):
        self.state = state

    def is_high(self) -> bool:
        return self.state.load() is PinState.HIGH

    def is_low(self) -> bool:
        return self.state.load() is PinState.LOW

    def set_high(self):
        self.state.store(PinState.HIGH)

    def set_low(self):
        self.state.store(PinState.LOW)

    def set_state(self, high: bool):
        if high:
            self.set_high()
        else:
            self.set_low()

    def is_set_high(self) -> bool:
        return self.state.load() is PinState.HIGH

    def is_set_low(self) -> bool:
        return self.state.load() is PinState.LOW

    def toggle(self):
        if self.is_set_low():
            self.set_high()
        else:
            self.set_low()

    def __repr__(self):
        return f"PushPullPin({self.state.load().name})"


class OpenDrainPin:
    """An output pin in open drain configuration.

    Driving high pulls the line to ground (``LOW``); driving low releases it
    (``FLOATING``). Reading the pin back therefore never reports high.
    """
    __slots__ = ('state',)

    def __init__(self, state: AtomicPinState):
        self.state = state

    def is_high(self) -> bool:
        return self.state.load() is PinState.HIGH

    def is_low(self) -> bool:
        return self.state.load() is PinState.LOW

    def set_high(self):
        self.state.store(PinState.LOW)

    def set_low(self):
        self.state.store(PinState.FLOATING)

    def set_state(self, high: bool):
        if high:
            self.set_high()
        else:
            self.set_low()

    def is_set_high(self) -> bool:
        return self.state.load() is PinState.LOW

    def is_set_low(self) -> bool:
        return self.state.load() is PinState.FLOATING

    def toggle(self):
        if self.is_set_low():
            self.set_high()
        else:
            self.set_low()

    def __repr__(self):
        return f"OpenDrainPin({self.state.load().name})"


# Older name for the same electrical behavior
OpenGainPin = OpenDrainPin
