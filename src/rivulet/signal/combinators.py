"""Structural combinators — map, serial connect, parallel over.

All three check their arguments at construction time:

- every argument must expose a ``step()`` operation
  (``InvalidSignalArgument``);
- no two composed signals may trace back to a common source through their
  ``sources`` chains (``SharedSourceConflict``).  Shared upstream state would
  otherwise be stepped by two owners at once.

"""

from __future__ import annotations

from collections.abc import Sequence
from itertools import combinations
from typing import TYPE_CHECKING, Any

from rivulet._errors import InvalidSignalArgument, SharedSourceConflict, SignalProtocolError
from rivulet.signal.leaves import identity, never
from rivulet.signal.protocol import NEEDS_INPUT, NO_INPUT, NO_VALUE, Emits, Signal, is_signal

if TYPE_CHECKING:
    from rivulet._types import ValueFunc
    from rivulet.signal.protocol import StepResult

# Rounds one over().step() may spend stepping members that have not requested.
MAX_JOIN_PASSES = 10_000


# ---------------------------------------------------------------------------
# Construction checks
# ---------------------------------------------------------------------------


def gather_sources(signal: Any) -> set[int]:
    """Return the ids of *signal* and every signal reachable via ``sources``."""
    seen: set[int] = set()
    stack = [signal]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        stack.extend(getattr(current, "sources", ()) or ())
    return seen


def share_source(first: Any, second: Any) -> bool:
    """Return True if the two signals have any transitive source in common."""
    return not gather_sources(first).isdisjoint(gather_sources(second))


def _normalize(signals: tuple[Any, ...], combinator: str) -> list[Any]:
    """Accept ``f(a, b)`` as well as ``f([a, b])`` and validate each member."""
    if len(signals) == 1 and not is_signal(signals[0]) and _is_iterable(signals[0]):
        members = list(signals[0])
    else:
        members = list(signals)

    for member in members:
        if not is_signal(member):
            msg = f"{combinator}() expects signals, got {type(member).__name__}: {member!r}"
            raise InvalidSignalArgument(msg)
    return members


def _is_iterable(obj: object) -> bool:
    try:
        iter(obj)  # type: ignore[call-overload]
    except TypeError:
        return False
    return True


def _check_disjoint(members: list[Any], combinator: str) -> None:
    """Raise SharedSourceConflict if any two members share a source."""
    gathered = [gather_sources(member) for member in members]
    for i, j in combinations(range(len(members)), 2):
        if not gathered[i].isdisjoint(gathered[j]):
            msg = (
                f"Signals that share sources may not be combined via "
                f"{combinator}(): {members[i]!r} and {members[j]!r}"
            )
            raise SharedSourceConflict(msg)


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------


class Mapped(Signal):
    """Applies a pure function to every emission of the wrapped signal."""

    __slots__ = ("_func", "_signal", "sources")

    def __init__(self, signal: Any, func: ValueFunc) -> None:
        self._signal = signal
        self._func = func
        self.sources = (signal,)

    def step(self, value: Any = NO_INPUT) -> StepResult:
        result = self._signal.step(value)
        if isinstance(result, Emits):
            return Emits(self._func(result.value))
        return result

    def __repr__(self) -> str:
        return f"map({self._signal!r})"


def map_signal(signal: Any, func: ValueFunc) -> Signal:
    """Wrap *signal* so that ``Emits(v)`` becomes ``Emits(func(v))``.

    ``NeedsInput`` and ``Done`` pass through unchanged.

    Raises:
        InvalidSignalArgument: If *signal* has no ``step()``.

    """
    if not is_signal(signal):
        msg = f"map() expects a signal, got {type(signal).__name__}: {signal!r}"
        raise InvalidSignalArgument(msg)
    return Mapped(signal, func)


# ---------------------------------------------------------------------------
# Connect
# ---------------------------------------------------------------------------


class Connected(Signal):
    """Serial pipe: upstream emissions become downstream inputs.

    The composite needs outside input exactly when the upstream signal does
    and emits exactly what the downstream signal emits.  Upstream emissions
    are handed downstream one at a time, in order.

    """

    __slots__ = ("_downstream", "_downstream_requested", "_upstream", "sources")

    def __init__(self, upstream: Any, downstream: Any) -> None:
        self._upstream = upstream
        self._downstream = downstream
        self._downstream_requested = False
        self.sources = (upstream, downstream)

    def step(self, value: Any = NO_INPUT) -> StepResult:
        if self._downstream_requested:
            result = self._upstream.step(value)
            if not isinstance(result, Emits):
                return result
            feed = result.value
        else:
            # Downstream may still be emitting from its previous input.
            feed = NO_INPUT

        while True:
            emitted = self._downstream.step(feed)
            self._downstream_requested = emitted is NEEDS_INPUT
            if not self._downstream_requested:
                return emitted

            result = self._upstream.step(value)
            if not isinstance(result, Emits):
                return result
            feed = result.value

    def __repr__(self) -> str:
        return f"connect({self._upstream!r}, {self._downstream!r})"


def connect(*signals: Any) -> Signal:
    """Compose signals serially, left to right.

    Accepts ``connect(a, b, c)`` or ``connect([a, b, c])``.  Zero signals
    yield ``identity()``; a single signal is returned unchanged.

    Raises:
        InvalidSignalArgument: If an argument has no ``step()``.
        SharedSourceConflict: If two of the signals share a transitive source.

    """
    members = _normalize(signals, "connect")
    if not members:
        return identity()

    total = members[0]
    for member in members[1:]:
        if share_source(total, member):
            msg = f"Signals that share sources may not be connected: {total!r} and {member!r}"
            raise SharedSourceConflict(msg)
        total = Connected(total, member)
    return total


# ---------------------------------------------------------------------------
# Over
# ---------------------------------------------------------------------------


class Joined(Signal):
    """Parallel barrier join of N signals into one tuple-valued signal.

    Outside input is a tuple with one slot per member.  A tuple of each
    member's latest emission is released once every member has emitted
    since the previous release; a faster member's intermediate emissions
    are overwritten (last value wins).

    Members that have not requested input are stepped again until the
    barrier releases or every member requests.  A member that never stops
    emitting would keep that loop going, so one ``step()`` call gives up
    with ``SignalProtocolError`` after *max_passes* rounds.

    """

    __slots__ = ("_fresh", "_max_passes", "_requested", "_total", "sources")

    def __init__(self, members: list[Any], max_passes: int = MAX_JOIN_PASSES) -> None:
        self.sources = tuple(members)
        self._max_passes = max_passes
        self._requested = [False] * len(members)
        self._fresh = [False] * len(members)
        self._total: list[Any] = [NO_VALUE] * len(members)

    def step(self, value: Any = NO_INPUT) -> StepResult:
        if all(self._requested):
            if (
                not isinstance(value, Sequence)
                or isinstance(value, str | bytes)
                or len(value) != len(self.sources)
            ):
                msg = (
                    f"over() of {len(self.sources)} signals stepped with "
                    f"{value!r} instead of a {len(self.sources)}-tuple"
                )
                raise SignalProtocolError(msg)
            for index in range(len(self.sources)):
                done = self._advance(index, value[index])
                if done is not None:
                    return done

        for _ in range(self._max_passes):
            if all(self._fresh):
                self._fresh = [False] * len(self.sources)
                return Emits(tuple(self._total))
            if all(self._requested):
                return NEEDS_INPUT
            for index, requested in enumerate(self._requested):
                if not requested:
                    done = self._advance(index, NO_INPUT)
                    if done is not None:
                        return done

        msg = (
            f"{self!r} made no progress in {self._max_passes} passes: "
            "a member keeps emitting without the barrier releasing"
        )
        raise SignalProtocolError(msg)

    def _advance(self, index: int, value: Any) -> StepResult | None:
        """Step one member and record its outcome; return it only if terminal."""
        result = self.sources[index].step(value)
        if isinstance(result, Emits):
            self._requested[index] = False
            self._fresh[index] = True
            self._total[index] = result.value
            return None
        if result is NEEDS_INPUT:
            self._requested[index] = True
            return None
        return result

    def __repr__(self) -> str:
        return f"over({', '.join(repr(s) for s in self.sources)})"


def over(*signals: Any, max_passes: int = MAX_JOIN_PASSES) -> Signal:
    """Join signals in parallel into one tuple-valued signal.

    Accepts ``over(a, b)`` or ``over([a, b])``.  Zero signals yield
    ``never()``; a single signal is returned unchanged.
    *max_passes* bounds the work of a single ``step()`` call; see ``Joined``.

    Raises:
        InvalidSignalArgument: If an argument has no ``step()``.
        SharedSourceConflict: If two members share a transitive source.

    """
    members = _normalize(signals, "over")
    _check_disjoint(members, "over")
    if not members:
        return never()
    if len(members) == 1:
        return members[0]
    return Joined(members, max_passes)

