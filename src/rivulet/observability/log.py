"""Event log — bounded store for compiler and harness events.

Once ``max_events`` is reached, each new event pushes out the oldest one.
Compilation and driving happen on the caller's thread, so the log is a
plain ring buffer without locking.

"""

from collections import deque
from collections.abc import Iterator

from rivulet.observability.events import FlowEvent


class EventLog:
    """Ring buffer of ``FlowEvent`` objects, oldest first.

    Args:
        max_events: Capacity of the buffer.

    """

    __slots__ = ("_events",)

    def __init__(self, max_events: int = 10_000) -> None:
        self._events: deque[FlowEvent] = deque(maxlen=max_events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[FlowEvent]:
        return iter(self._events)

    @property
    def max_events(self) -> int:
        return self._events.maxlen  # type: ignore[return-value]

    def append(self, event: FlowEvent) -> None:
        self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        name: str | None = None,
        limit: int | None = None,
    ) -> list[FlowEvent]:
        """Return matching events, newest first.

        *name* selects compile events of one description (its ``__qualname__``);
        harness events carry no name and never match it.

        """
        matches: list[FlowEvent] = []
        for event in reversed(self._events):
            if limit is not None and len(matches) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if name is not None and getattr(event, "name", None) != name:
                continue
            matches.append(event)
        return matches

    def recent(self, n: int = 20) -> list[FlowEvent]:
        """The last *n* events, oldest first."""
        if n <= 0:
            return []
        return list(self._events)[-n:]
