"""Tests for rivulet.signal.combinators — map, connect, over."""

from __future__ import annotations

import operator

import pytest

from rivulet._errors import InvalidSignalArgument, SharedSourceConflict, SignalProtocolError
from rivulet.harness import drive
from rivulet.signal.combinators import connect, gather_sources, map_signal, over, share_source
from rivulet.signal.leaves import (
    Identity,
    Never,
    accumulate,
    filter,
    identity,
    never,
    transform,
    until,
)
from rivulet.signal.protocol import NEEDS_INPUT, Done, Emits
from tests.conftest import Burst, Chatter, Spy, outputs


# ---------------------------------------------------------------------------
# Map
# ---------------------------------------------------------------------------


class TestMap:
    """map_signal — transform each emission."""

    def test_maps_emissions(self) -> None:
        signal = map_signal(transform(lambda x: x + 1), lambda x: x * 2)
        assert outputs(signal, [1, 2, 3]) == [4, 6, 8]

    def test_needs_input_passes_through(self) -> None:
        signal = map_signal(identity(), str)
        assert signal.step() is NEEDS_INPUT
        assert signal.step(4) == Emits("4")

    def test_done_passes_through_unchanged(self) -> None:
        signal = map_signal(until(lambda x: x > 1), lambda x: x * 100)
        signal.step()
        signal.step(1)
        assert signal.step(2) == Done(2)

    def test_composition_law(self) -> None:
        f = lambda x: x + 3  # noqa: E731
        g = lambda x: x * 5  # noqa: E731
        data = [0, 1, -4, 10]
        nested = map_signal(map_signal(identity(), f), g)
        fused = map_signal(identity(), lambda x: g(f(x)))
        assert outputs(nested, data) == outputs(fused, data)

    def test_rejects_non_signal(self) -> None:
        with pytest.raises(InvalidSignalArgument, match="map"):
            map_signal(42, str)


# ---------------------------------------------------------------------------
# Connect
# ---------------------------------------------------------------------------


class TestConnect:
    """connect — serial composition."""

    def test_identity_pipe_behaves_like_identity(self) -> None:
        data = [3, "x", None, 3.5]
        assert outputs(connect(identity(), identity()), data) == outputs(identity(), data)

    def test_upstream_emissions_feed_downstream(self) -> None:
        signal = connect(filter(lambda x: x % 2 == 0), transform(lambda x: x * 10))
        assert outputs(signal, [1, 2, 3, 4, 5, 6]) == [20, 40, 60]

    def test_three_stage_fold(self) -> None:
        signal = connect(
            transform(lambda x: x + 1),
            accumulate(0, operator.add),
            transform(lambda x: -x),
        )
        assert outputs(signal, [1, 2, 3]) == [-2, -5, -9]

    def test_list_form(self) -> None:
        signal = connect([transform(lambda x: x * 2), transform(lambda x: x + 1)])
        assert outputs(signal, [1, 2, 3]) == [3, 5, 7]

    def test_several_emissions_per_input_arrive_in_order(self) -> None:
        signal = connect(Burst(3), accumulate(0, operator.add))
        assert outputs(signal, [1, 2]) == [1, 2, 3, 5, 7, 9]

    def test_downstream_bursts_are_drained(self) -> None:
        signal = connect(transform(lambda x: x * 2), Burst(2))
        assert outputs(signal, [1, 2]) == [2, 2, 4, 4]

    def test_upstream_swallowing_input_requests_more(self) -> None:
        signal = connect(Burst(0), identity())
        result = drive(signal, [1, 2, 3])
        assert result.outputs == []
        assert result.done is False

    def test_downstream_done_is_returned(self) -> None:
        signal = connect(identity(), until(lambda x: x >= 3))
        result = drive(signal, [1, 2, 3, 4])
        assert result.done is True
        assert result.result == 3
        assert result.rest == [4]

    def test_upstream_done_is_returned(self) -> None:
        signal = connect(until(lambda x: x == "end"), identity())
        result = drive(signal, ["a", "end", "b"])
        assert result.done is True
        assert result.result == "end"
        assert result.rest == ["b"]

    def test_zero_signals_is_identity(self) -> None:
        assert isinstance(connect(), Identity)
        assert isinstance(connect([]), Identity)

    def test_single_signal_returned_unchanged(self) -> None:
        signal = transform(abs)
        assert connect(signal) is signal

    def test_rejects_non_signal(self) -> None:
        with pytest.raises(InvalidSignalArgument, match="connect"):
            connect(identity(), "not a signal")

    def test_shared_source_rejected_before_stepping(self) -> None:
        shared = Spy(identity())
        left = map_signal(shared, abs)
        right = map_signal(shared, str)
        with pytest.raises(SharedSourceConflict):
            connect(left, right)
        assert shared.calls == 0

    def test_same_signal_twice_rejected(self) -> None:
        signal = identity()
        with pytest.raises(SharedSourceConflict):
            connect(signal, signal)

    def test_conflict_with_earlier_stage(self) -> None:
        first = identity()
        with pytest.raises(SharedSourceConflict):
            connect(first, identity(), map_signal(first, abs))


# ---------------------------------------------------------------------------
# Over
# ---------------------------------------------------------------------------


class TestOver:
    """over — parallel barrier join."""

    def test_joins_lockstep_members(self) -> None:
        signal = over(identity(), transform(operator.neg))
        assert outputs(signal, [(1, 2), (3, 4)]) == [(1, -2), (3, -4)]

    def test_list_form(self) -> None:
        signal = over([identity(), identity(), identity()])
        assert outputs(signal, [(1, 2, 3)]) == [(1, 2, 3)]

    def test_barrier_releases_one_tuple_per_two_inputs(self) -> None:
        # Second member emits on every second input only.
        signal = over(identity(), filter(lambda x: x % 2 == 0))
        data = [(1, 1), (2, 2), (3, 3), (4, 4), (5, 5), (6, 6)]
        assert outputs(signal, data) == [(2, 2), (4, 4), (6, 6)]

    def test_faster_member_last_value_wins(self) -> None:
        signal = over(identity(), filter(lambda x: x == "go"))
        data = [("a", "-"), ("b", "-"), ("c", "go")]
        assert outputs(signal, data) == [("c", "go")]

    def test_member_bursts_are_stepped_without_input(self) -> None:
        signal = over(Burst(2), identity())
        assert outputs(signal, [(1, "a"), (2, "b")]) == [(1, "a"), (2, "b")]

    def test_first_step_needs_input(self) -> None:
        signal = over(identity(), identity())
        assert signal.step() is NEEDS_INPUT

    def test_done_propagates_immediately(self) -> None:
        signal = over(identity(), until(lambda x: x > 1))
        result = drive(signal, [(1, 1), (2, 2), (3, 3)])
        assert result.done is True
        assert result.result == 2
        assert result.rest == [(3, 3)]

    def test_zero_signals_is_never(self) -> None:
        assert isinstance(over(), Never)

    def test_single_signal_returned_unchanged(self) -> None:
        signal = identity()
        assert over(signal) is signal
        assert over([signal]) is signal

    def test_wrong_tuple_length_raises(self) -> None:
        signal = over(identity(), identity())
        signal.step()
        with pytest.raises(SignalProtocolError, match="2-tuple"):
            signal.step((1,))

    @pytest.mark.parametrize("joined", ["ab", {0: 1, 1: 2}, 12])
    def test_non_tuple_input_raises(self, joined: object) -> None:
        signal = over(identity(), identity())
        signal.step()
        with pytest.raises(SignalProtocolError, match="2-tuple"):
            signal.step(joined)

    def test_list_input_accepted(self) -> None:
        signal = over(identity(), identity())
        signal.step()
        assert signal.step([1, 2]) == Emits((1, 2))

    def test_endless_member_gives_up(self) -> None:
        signal = over(Chatter(), never(), max_passes=50)
        with pytest.raises(SignalProtocolError, match="50 passes"):
            signal.step()

    def test_endless_member_stops_drive(self) -> None:
        signal = over(Chatter(), never(), max_passes=50)
        with pytest.raises(SignalProtocolError):
            drive(signal, [], max_steps=50)

    def test_long_burst_within_limit(self) -> None:
        signal = over(Burst(40), filter(lambda x: x == "go"), max_passes=50)
        assert outputs(signal, [(1, "-"), (2, "go")]) == [(2, "go")]

    def test_shared_source_rejected(self) -> None:
        shared = identity()
        with pytest.raises(SharedSourceConflict, match="over"):
            over(identity(), map_signal(shared, abs), connect(shared, identity()))

    def test_rejects_non_signal(self) -> None:
        with pytest.raises(InvalidSignalArgument, match="over"):
            over(identity(), None)


class TestSources:
    """Transitive source tracking."""

    def test_gather_includes_self_and_ancestors(self) -> None:
        inner = identity()
        mapped = map_signal(inner, abs)
        gathered = gather_sources(mapped)
        assert id(inner) in gathered
        assert id(mapped) in gathered

    def test_connect_tracks_both_stages(self) -> None:
        upstream = identity()
        downstream = identity()
        pipe = connect(upstream, downstream)
        assert share_source(pipe, downstream)
        assert share_source(pipe, upstream)

    def test_disjoint_signals_do_not_share(self) -> None:
        assert not share_source(identity(), identity())
