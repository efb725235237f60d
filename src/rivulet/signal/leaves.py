"""Leaf signal constructors.

Each leaf is a small explicit state machine.  Apart from ``never()``, leaves
alternate between requesting an input and emitting a value derived from it;
a leaf stepped while it sits between an emission and its next request
ignores the value it is given.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Any

from rivulet.signal.protocol import NEEDS_INPUT, NO_INPUT, Done, Emits, Signal

if TYPE_CHECKING:
    from rivulet._types import Combine, Predicate, ValueFunc
    from rivulet.signal.protocol import StepResult


class _InputLeaf(Signal):
    """Shared request/receive cycle for leaves that react to one input.

    ``_awaiting`` is True while the last result handed out was
    ``NeedsInput``, i.e. the next call carries a genuine input.

    """

    __slots__ = ("_awaiting",)

    def __init__(self) -> None:
        self._awaiting = False

    def step(self, value: Any = NO_INPUT) -> StepResult:
        if not self._awaiting:
            self._awaiting = True
            return NEEDS_INPUT
        result = self._receive(value)
        if result is not NEEDS_INPUT:
            self._awaiting = False
        return result

    @abstractmethod
    def _receive(self, value: Any) -> StepResult:
        """React to a genuine input; ``NEEDS_INPUT`` keeps the leaf waiting."""


class Never(Signal):
    """Requests input forever and never emits."""

    __slots__ = ()

    def step(self, value: Any = NO_INPUT) -> StepResult:
        return NEEDS_INPUT

    def __repr__(self) -> str:
        return "never()"


class ConstFrom(_InputLeaf):
    __slots__ = ("_value",)

    def __init__(self, value: Any) -> None:
        super().__init__()
        self._value = value

    def _receive(self, value: Any) -> StepResult:
        return Emits(self._value)

    def __repr__(self) -> str:
        return f"const_from({self._value!r})"


class Identity(_InputLeaf):
    __slots__ = ()

    def _receive(self, value: Any) -> StepResult:
        return Emits(value)

    def __repr__(self) -> str:
        return "identity()"


class Transform(_InputLeaf):
    __slots__ = ("_func",)

    def __init__(self, func: ValueFunc) -> None:
        super().__init__()
        self._func = func

    def _receive(self, value: Any) -> StepResult:
        return Emits(self._func(value))

    def __repr__(self) -> str:
        return f"transform({getattr(self._func, '__name__', self._func)!r})"


class Filter(_InputLeaf):
    """Keeps requesting until an input satisfies the predicate, then emits it."""

    __slots__ = ("_predicate",)

    def __init__(self, predicate: Predicate) -> None:
        super().__init__()
        self._predicate = predicate

    def _receive(self, value: Any) -> StepResult:
        if self._predicate(value):
            return Emits(value)
        return NEEDS_INPUT


class Until(_InputLeaf):
    """Keeps requesting until an input satisfies the predicate, then terminates."""

    __slots__ = ("_predicate",)

    def __init__(self, predicate: Predicate) -> None:
        super().__init__()
        self._predicate = predicate

    def _receive(self, value: Any) -> StepResult:
        if self._predicate(value):
            return Done(value)
        return NEEDS_INPUT


class Accumulate(_InputLeaf):
    """Left fold over the inputs, emitting every intermediate state."""

    __slots__ = ("_combine", "state")

    def __init__(self, seed: Any, combine: Combine) -> None:
        super().__init__()
        self.state = seed
        self._combine = combine

    def _receive(self, value: Any) -> StepResult:
        self.state = self._combine(self.state, value)
        return Emits(self.state)


# ---------------------------------------------------------------------------
# Constructors
# ---------------------------------------------------------------------------


def never() -> Signal:
    """Signal that always needs input and never emits."""
    return Never()


def const_from(value: Any) -> Signal:
    """Signal that emits *value* once per input, ignoring the input itself."""
    return ConstFrom(value)


def identity() -> Signal:
    """Signal that emits each input unchanged."""
    return Identity()


def transform(func: ValueFunc) -> Signal:
    """Signal that emits ``func(input)`` for each input."""
    return Transform(func)


def filter(predicate: Predicate) -> Signal:  # noqa: A001
    """Signal that emits exactly the inputs satisfying *predicate*, in order."""
    return Filter(predicate)


def until(predicate: Predicate) -> Signal:
    """Signal that terminates with the first input satisfying *predicate*."""
    return Until(predicate)


def accumulate(seed: Any, combine: Combine) -> Signal:
    """Signal emitting ``combine(state, input)`` prefixes, starting from *seed*.

    Over inputs ``[i1, i2, ...]`` it emits ``[c(s, i1), c(c(s, i1), i2), ...]``.

    """
    return Accumulate(seed, combine)
