"""Shared test fixtures and helper signals for rivulet."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from rivulet.harness import drive
from rivulet.observability import EventLog, FlowCollector
from rivulet.signal.protocol import NEEDS_INPUT, NO_INPUT, Emits, Signal


class Burst(Signal):
    """Emits each input ``times`` times before requesting the next one."""

    def __init__(self, times: int) -> None:
        self._times = times
        self._pending: list[Any] = []
        self._awaiting = False

    def step(self, value: Any = NO_INPUT) -> Any:
        if self._awaiting:
            self._awaiting = False
            self._pending = [value] * self._times
        if self._pending:
            return Emits(self._pending.pop(0))
        self._awaiting = True
        return NEEDS_INPUT


class Chatter(Signal):
    """Emits a counter forever without ever requesting input."""

    def __init__(self) -> None:
        self.count = 0

    def step(self, value: Any = NO_INPUT) -> Any:
        self.count += 1
        return Emits(self.count)


class Spy(Signal):
    """Wraps a signal and counts how often it is stepped."""

    def __init__(self, inner: Any) -> None:
        self.inner = inner
        self.calls = 0
        self.sources = (inner,)

    def step(self, value: Any = NO_INPUT) -> Any:
        self.calls += 1
        return self.inner.step(value)


def outputs(signal: Any, inputs: list[Any]) -> list[Any]:
    """Drive *signal* over *inputs* and return what it emitted."""
    return drive(signal, inputs).outputs


@pytest.fixture
def collector() -> FlowCollector:
    """A collector backed by a fresh event log."""
    return FlowCollector(EventLog())


@pytest.fixture
def flow_file(tmp_path: Path) -> Path:
    """Write a module with a few flow descriptions and return its path."""
    path = tmp_path / "flows.py"
    path.write_text(
        "from rivulet import transform, until\n"
        "\n"
        "\n"
        "def chain(apply, inputs):\n"
        "    doubled = apply(transform(lambda x: x * 2), inputs[0])\n"
        "    return apply(transform(lambda x: x + 1), doubled)\n"
        "\n"
        "\n"
        "def pair_sum(apply, inputs):\n"
        "    return apply(transform(sum), [inputs[0], inputs[1]])\n"
        "\n"
        "\n"
        "def stop_at_three(apply, inputs):\n"
        "    return apply(until(lambda x: x >= 3), inputs[0])\n"
        "\n"
        "\n"
        "not_callable = 42\n"
    )
    return path
