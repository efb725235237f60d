"""Flow observability — events from compilation and signal driving.

Records:
- **Compiler**: compiled-flow summaries and per-stage timings
- **Harness**: one event per ``drive()`` run

All events are frozen dataclasses with nanosecond timestamps.

Quick Start:
    >>> from rivulet.observability import EventLog, FlowCollector
    >>> collector = FlowCollector(EventLog())
    >>> # signal = compile_flow(describe, collector=collector)
    >>> # collector.log.query(event_type=FlowCompiled)

"""

from rivulet.observability.collector import FlowCollector
from rivulet.observability.events import (
    FlowCompiled,
    FlowEvent,
    FlowProfile,
    SignalDriven,
    now_ns,
)
from rivulet.observability.log import EventLog
from rivulet.observability.profiler import CompileProfiler, compute_aggregate_stats

__all__ = [
    "CompileProfiler",
    "EventLog",
    "FlowCollector",
    "FlowCompiled",
    "FlowEvent",
    "FlowProfile",
    "SignalDriven",
    "compute_aggregate_stats",
    "now_ns",
]
