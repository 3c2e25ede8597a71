import threading

import pytest

from hal_vcd import hal
from hal_vcd.pins import (
    AtomicPinState, InputPin, OpenDrainPin, OpenGainPin, PinState, PushPullPin)


def test_pin_state_vcd_mapping():
    """Pin states map onto VCD scalar values and back."""
    assert PinState.LOW.to_vcd() == '0'
    assert PinState.HIGH.to_vcd() == '1'
    assert PinState.FLOATING.to_vcd() == 'z'

    assert PinState.from_vcd('0') is PinState.LOW
    assert PinState.from_vcd('1') is PinState.HIGH
    assert PinState.from_vcd('z') is PinState.FLOATING
    assert PinState.from_vcd('Z') is PinState.FLOATING

    for state in PinState:
        assert PinState.from_vcd(state.to_vcd()) is state


def test_pin_state_unknown_is_floating():
    """'x' reads as floating, and floating is never written as 'x'."""
    assert PinState.from_vcd('x') is PinState.FLOATING
    assert PinState.from_vcd('X') is PinState.FLOATING
    assert PinState.FLOATING.to_vcd() != 'x'


def test_pin_state_invalid_value():
    with pytest.raises(ValueError):
        PinState.from_vcd('2')


def test_atomic_pin_state():
    state = AtomicPinState()
    assert state.load() is PinState.FLOATING
    # Loading a second time still returns the value
    assert state.load() is PinState.FLOATING
    state.store(PinState.HIGH)
    assert state.load() is PinState.HIGH

    state = AtomicPinState(PinState.LOW)
    assert state.load() is PinState.LOW

    with pytest.raises(TypeError):
        state.store(1)


def test_input_pin():
    state = AtomicPinState()
    pin = InputPin(state)
    assert not pin.is_high()
    assert not pin.is_low()

    state.store(PinState.HIGH)
    assert pin.is_high()
    assert not pin.is_low()

    state.store(PinState.LOW)
    assert not pin.is_high()
    assert pin.is_low()

    assert isinstance(pin, hal.InputPin)
    assert not isinstance(pin, hal.OutputPin)


def test_push_pull_pin():
    state = AtomicPinState()
    pin = PushPullPin(state)
    assert state.load() is PinState.FLOATING

    pin.set_high()
    assert state.load() is PinState.HIGH
    assert pin.is_high()
    assert not pin.is_low()
    assert pin.is_set_high()
    assert not pin.is_set_low()

    pin.set_low()
    assert state.load() is PinState.LOW
    assert not pin.is_high()
    assert pin.is_low()
    assert not pin.is_set_high()
    assert pin.is_set_low()

    pin.toggle()
    assert pin.is_set_high()
    pin.toggle()
    assert pin.is_set_low()

    pin.set_state(True)
    assert pin.is_high()

    for proto in (hal.InputPin, hal.OutputPin, hal.StatefulOutputPin,
                  hal.ToggleableOutputPin):
        assert isinstance(pin, proto)


def test_open_drain_pin():
    state = AtomicPinState()
    pin = OpenDrainPin(state)
    assert state.load() is PinState.FLOATING

    pin.set_high()
    assert state.load() is PinState.LOW
    assert not pin.is_high()
    assert pin.is_low()
    assert pin.is_set_high()
    assert not pin.is_set_low()

    pin.set_low()
    assert state.load() is PinState.FLOATING
    assert not pin.is_high()
    assert not pin.is_low()
    assert not pin.is_set_high()
    assert pin.is_set_low()

    pin.toggle()
    assert state.load() is PinState.LOW

    assert isinstance(pin, hal.OutputPin)


def test_open_gain_is_open_drain():
    assert OpenGainPin is OpenDrainPin


def test_pins_share_state():
    """Pins over one state see each other's writes."""
    state = AtomicPinState(PinState.LOW)
    out = PushPullPin(state)
    inp = InputPin(state)

    out.set_high()
    assert inp.is_high()
    out.set_low()
    assert inp.is_low()


def test_state_shared_between_threads():
    """A store on one thread is visible to loads on another."""
    state = AtomicPinState(PinState.LOW)
    out = PushPullPin(state)
    inp = InputPin(state)
    seen = []

    driven = threading.Event()
    checked = threading.Event()

    def driver():
        out.set_high()
        driven.set()
        checked.wait(5)
        out.set_low()

    t = threading.Thread(target=driver)
    t.start()
    assert driven.wait(5)
    seen.append(inp.is_high())
    checked.set()
    t.join(5)
    seen.append(inp.is_low())

    assert seen == [True, True]


def test_pin_repr():
    pin = PushPullPin(AtomicPinState(PinState.LOW))
    assert repr(pin) == "PushPullPin(LOW)"
