"""Event model for flow observability.

Defines the events emitted by the flow compiler and the driving harness.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

"""

import time
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Compiler events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FlowCompiled:
    """A flow description was compiled into a signal.

    Attributes:
        name: Qualified name of the description function.
        nodes: Nodes in the arena after levelling (forwarders included).
        levels: Number of levels, level 0 (input slots) included.
        forwarders: Forwarder nodes inserted by the leveller.
        used_inputs: Input slots the compiled signal reads.
        compile_ms: Wall time spent compiling in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    name: str
    nodes: int
    levels: int
    forwarders: int
    used_inputs: int
    compile_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class FlowProfile:
    """Per-stage timing of one compilation.

    Attributes:
        name: Qualified name of the description function.
        levels: Number of levels produced.
        describe_ms: Running the description and resolving the sink.
        link_ms: Back-linking destinations and collecting used inputs.
        level_ms: Levelling and forwarder insertion.
        assemble_ms: Building the connect/over/map chain.
        total_ms: End-to-end compile time.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    name: str
    levels: int
    describe_ms: float
    link_ms: float
    level_ms: float
    assemble_ms: float
    total_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Harness events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SignalDriven:
    """The harness finished driving a signal over an input sequence.

    Attributes:
        inputs_consumed: Inputs fed to the signal.
        outputs: Values the signal emitted.
        done: True if the signal terminated (``Done``).
        steps: Total ``step()`` calls made.
        duration_ms: Wall time spent driving in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    inputs_consumed: int
    outputs: int
    done: bool
    steps: int
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type FlowEvent = FlowCompiled | FlowProfile | SignalDriven


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
