"""Flow collector — records compiler and harness events into an event log.

Passed to ``compile_flow(..., collector=...)`` and ``drive(..., collector=...)``.
The collector delegates storage to ``EventLog``.

"""

from __future__ import annotations

from rivulet.observability.events import FlowCompiled, SignalDriven, now_ns
from rivulet.observability.log import EventLog


class FlowCollector:
    """Event collector for flow compilation and signal driving.

    Args:
        log: The EventLog to store events in.  A fresh log is created when
            omitted.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Compiler events -----

    def record_compile(
        self,
        name: str,
        *,
        nodes: int = 0,
        levels: int = 0,
        forwarders: int = 0,
        used_inputs: int = 0,
        compile_ms: float = 0.0,
    ) -> None:
        """Record a completed compilation."""
        self._log.append(
            FlowCompiled(
                name=name,
                nodes=nodes,
                levels=levels,
                forwarders=forwarders,
                used_inputs=used_inputs,
                compile_ms=compile_ms,
                timestamp_ns=now_ns(),
            )
        )

    # ----- Harness events -----

    def record_drive(
        self,
        *,
        inputs_consumed: int = 0,
        outputs: int = 0,
        done: bool = False,
        steps: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record one run of the driving harness."""
        self._log.append(
            SignalDriven(
                inputs_consumed=inputs_consumed,
                outputs=outputs,
                done=done,
                steps=steps,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )
