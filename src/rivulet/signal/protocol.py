"""Step protocol shared by every signal.

A signal is a stateful step machine.  The driver calls ``step()`` once with
no meaningful input, then keeps calling it:

- ``NeedsInput`` — the next call must carry a genuine input, and exactly one
  input is consumed by that call.
- ``Emits(value)`` — an output was produced without consuming the passed
  value; the caller may step again (with any value) to see further output or
  a request for input.
- ``Done(value)`` — terminal.  A terminated signal must not be stepped again.

One input may therefore produce zero, one, or many outputs, and a signal may
demand several inputs before producing anything.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Final


class _Sentinel:
    """Named marker object compared by identity."""

    __slots__ = ("_name",)

    def __init__(self, name: str) -> None:
        self._name = name

    def __repr__(self) -> str:
        return self._name


# Passed to step() when the call carries no meaningful input
NO_INPUT: Final = _Sentinel("NO_INPUT")

# Slot value of an over() member that has not emitted yet
NO_VALUE: Final = _Sentinel("NO_VALUE")


class NeedsInput:
    """Step outcome: the next call must supply a genuine input."""

    __slots__ = ()
    _instance: NeedsInput | None = None

    def __new__(cls) -> NeedsInput:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NeedsInput()"


NEEDS_INPUT: Final = NeedsInput()


@dataclass(frozen=True, slots=True)
class Emits:
    """Step outcome: an output value, produced without consuming input."""

    value: Any


@dataclass(frozen=True, slots=True)
class Done:
    """Step outcome: the signal terminated with a final value."""

    value: Any = None


type StepResult = NeedsInput | Emits | Done


class Signal(ABC):
    """Base class for every signal variant.

    ``sources`` lists the signals this one owns and steps internally.  It is
    only read when checking composites for shared upstream state; data never
    flows through it.

    """

    __slots__ = ()

    sources: tuple[Any, ...] = ()

    @abstractmethod
    def step(self, value: Any = NO_INPUT) -> StepResult:
        """Advance the signal by one call."""


def is_signal(obj: object) -> bool:
    """Return True if *obj* exposes a callable ``step`` operation."""
    return callable(getattr(obj, "step", None))
