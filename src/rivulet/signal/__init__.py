"""Signals — pull-driven stream transformers and their combinators.

Leaves produce values from inputs; ``map_signal``, ``connect`` and ``over``
compose signals into larger ones.  Every signal obeys the step protocol in
``rivulet.signal.protocol``.
"""

from rivulet.signal.combinators import connect, gather_sources, map_signal, over, share_source
from rivulet.signal.leaves import (
    accumulate,
    const_from,
    filter,  # noqa: A004
    identity,
    never,
    transform,
    until,
)
from rivulet.signal.protocol import (
    NEEDS_INPUT,
    NO_INPUT,
    NO_VALUE,
    Done,
    Emits,
    NeedsInput,
    Signal,
    StepResult,
    is_signal,
)

map = map_signal  # noqa: A001

__all__ = [
    "NEEDS_INPUT",
    "NO_INPUT",
    "NO_VALUE",
    "Done",
    "Emits",
    "NeedsInput",
    "Signal",
    "StepResult",
    "accumulate",
    "connect",
    "const_from",
    "filter",
    "gather_sources",
    "identity",
    "is_signal",
    "map",
    "map_signal",
    "never",
    "over",
    "share_source",
    "transform",
    "until",
]
