"""Digital pin capability interfaces.

One protocol per capability. Pins implement these structurally, so a driver
written against e.g. ``InputPin`` accepts any object that can report its
level, whether it comes from a VCD file or from real hardware.
"""
from typing import Protocol, runtime_checkable


@runtime_checkable
class InputPin(Protocol):
    """A pin whose logic level can be read."""

    def is_high(self) -> bool:
        ...

    def is_low(self) -> bool:
        ...


@runtime_checkable
class OutputPin(Protocol):
    """A pin that can be driven high or low."""

    def set_high(self) -> None:
        ...

    def set_low(self) -> None:
        ...

    def set_state(self, high: bool) -> None:
        ...


@runtime_checkable
class StatefulOutputPin(Protocol):
    """An output pin that remembers the level it was driven to."""

    def is_set_high(self) -> bool:
        ...

    def is_set_low(self) -> bool:
        ...


@runtime_checkable
class ToggleableOutputPin(Protocol):

    def toggle(self) -> None:
        ...
