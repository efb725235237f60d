"""Compile profiler — wall-clock time spent in each compiler stage.

``compile_flow`` wraps its four stages in ``CompileProfiler.stage`` blocks
and closes with ``finish()``, which stores a ``FlowProfile`` in the event
log and, when verbose, prints one summary line to stderr.

"""

from __future__ import annotations

import sys
import time
from contextlib import contextmanager
from statistics import fmean
from typing import TYPE_CHECKING, Any

from rivulet.observability.events import FlowProfile, now_ns

if TYPE_CHECKING:
    from collections.abc import Iterator

    from rivulet.observability.log import EventLog

STAGES = ("describe", "link", "level", "assemble")


class CompileProfiler:
    """Stage timings for one ``compile_flow`` call.

    Usage::

        profiler = CompileProfiler(log, verbose=False)
        profiler.begin("describe_pricing")
        with profiler.stage("describe"):
            ...
        profile = profiler.finish(levels=3)

    """

    __slots__ = ("_elapsed", "_log", "_name", "_t0", "_verbose")

    def __init__(self, log: EventLog | None, *, verbose: bool = True) -> None:
        self._log = log
        self._verbose = verbose
        self.begin("")

    def begin(self, name: str) -> None:
        """Reset the timers for compiling description *name*."""
        self._name = name
        self._t0 = time.perf_counter()
        self._elapsed = dict.fromkeys(STAGES, 0.0)

    @contextmanager
    def stage(self, stage: str) -> Iterator[None]:
        """Add the time spent in the ``with`` block to *stage*."""
        if stage not in self._elapsed:
            msg = f"Unknown compile stage {stage!r}, expected one of {', '.join(STAGES)}"
            raise ValueError(msg)
        t0 = time.perf_counter()
        try:
            yield
        finally:
            self._elapsed[stage] += (time.perf_counter() - t0) * 1000

    def finish(self, *, levels: int) -> FlowProfile:
        """Record the profile of the compilation started by ``begin()``."""
        profile = FlowProfile(
            name=self._name,
            levels=levels,
            describe_ms=self._elapsed["describe"],
            link_ms=self._elapsed["link"],
            level_ms=self._elapsed["level"],
            assemble_ms=self._elapsed["assemble"],
            total_ms=(time.perf_counter() - self._t0) * 1000,
            timestamp_ns=now_ns(),
        )
        if self._log is not None:
            self._log.append(profile)
        if self._verbose:
            timings = ", ".join(f"{stage} {self._elapsed[stage]:.1f}ms" for stage in STAGES)
            print(
                f"  [{profile.total_ms:.1f}ms] {self._name} -> {levels} levels ({timings})",
                file=sys.stderr,
            )
        return profile


def compute_aggregate_stats(log: EventLog, *, name: str | None = None) -> dict[str, Any]:
    """Summarize the ``FlowProfile`` events in *log*, optionally for one description.

    Returns ``{"count": 0}`` when nothing matches.  Otherwise the mean and
    maximum total compile time, the mean per stage (all in milliseconds), and
    the name of the slowest compilation.

    """
    profiles: list[FlowProfile] = log.query(event_type=FlowProfile, name=name)  # type: ignore[assignment]
    if not profiles:
        return {"count": 0}

    slowest = max(profiles, key=lambda p: p.total_ms)
    return {
        "count": len(profiles),
        "mean_ms": fmean(p.total_ms for p in profiles),
        "max_ms": slowest.total_ms,
        "slowest": slowest.name,
        "stages_ms": {
            stage: fmean(getattr(p, f"{stage}_ms") for p in profiles) for stage in STAGES
        },
    }
