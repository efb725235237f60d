"""Driving harness — feed a finite input sequence to a signal.

``drive`` steps a signal the way any caller must: once with no input, then
one input per ``NeedsInput``, collecting every ``Emits`` value in arrival
order.  It stops when the inputs run out (after draining pending
emissions) or when the signal reaches ``Done``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from rivulet._errors import DriveLimitExceeded, SignalProtocolError
from rivulet.signal.protocol import NEEDS_INPUT, NO_INPUT, Done, Emits

if TYPE_CHECKING:
    from rivulet._types import InputSequence
    from rivulet.observability.collector import FlowCollector


@dataclass(slots=True)
class DriveResult:
    """Outcome of one ``drive()`` run.

    Attributes:
        outputs: Every emitted value, in order.
        rest: Inputs not consumed because the signal terminated first.
        done: True if the signal returned ``Done``.
        result: The final value carried by ``Done`` (``None`` otherwise).
        steps: Number of ``step()`` calls made.

    """

    outputs: list[Any] = field(default_factory=list)
    rest: list[Any] = field(default_factory=list)
    done: bool = False
    result: Any = None
    steps: int = 0


def drive(
    signal: Any,
    inputs: InputSequence,
    *,
    max_steps: int | None = None,
    collector: FlowCollector | None = None,
) -> DriveResult:
    """Drive *signal* over *inputs* and collect what it emits.

    Args:
        signal: Any object obeying the step protocol.
        inputs: Finite ordered input sequence, one item per ``NeedsInput``.
        max_steps: Upper bound on ``step()`` calls; ``None`` or 0 for no bound.
        collector: Optional collector receiving a ``SignalDriven`` event.

    Raises:
        DriveLimitExceeded: If *max_steps* calls were made without finishing.

    """
    items = list(inputs)
    report = DriveResult()
    consumed = 0
    t0 = time.perf_counter()

    def step(value: Any = NO_INPUT) -> Any:
        if max_steps and report.steps >= max_steps:
            msg = (
                f"Signal did not finish within {max_steps} steps "
                f"({consumed} inputs consumed, {len(report.outputs)} outputs)"
            )
            raise DriveLimitExceeded(msg)
        report.steps += 1
        return signal.step(value)

    result = step()
    while True:
        if isinstance(result, Done):
            report.done = True
            report.result = result.value
            report.rest = items[consumed:]
            break
        if isinstance(result, Emits):
            report.outputs.append(result.value)
            result = step()
            continue
        if result is not NEEDS_INPUT:
            msg = f"{signal!r} returned {result!r}, which is not a step result"
            raise SignalProtocolError(msg)
        if consumed >= len(items):
            break
        result = step(items[consumed])
        consumed += 1

    if collector is not None:
        collector.record_drive(
            inputs_consumed=consumed,
            outputs=len(report.outputs),
            done=report.done,
            steps=report.steps,
            duration_ms=(time.perf_counter() - t0) * 1000,
        )
    return report
