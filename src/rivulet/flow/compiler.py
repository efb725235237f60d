"""Flow compiler — turns a graph description into one runnable signal.

A description is a plain function::

    def describe(apply, inputs):
        doubled = apply(transform(lambda x: x * 2), inputs[0])
        return apply(transform(lambda x: x + 1), doubled)

    signal = compile_flow(describe)

Compilation runs the description once to build the node graph, levels it
(see ``rivulet.flow.levels``), synthesizes one merge function per level that
routes the previous level's values to each node's inputs, and folds the
levels into a single signal::

    total = connect(transform(merge_1), over(level_1_signals))
    total = connect(map_signal(total, merge_i), over(level_i_signals))  # i >= 2

The compiled signal takes a tuple indexed by the used input slots in
ascending order (unused slots are omitted; a single used slot takes the bare
value) and emits whatever the sink node emits.

"""

from __future__ import annotations

import sys
import time
from collections.abc import Sequence
from contextlib import nullcontext
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from rivulet._errors import FlowGraphError
from rivulet.flow.graph import FlowGraph, Inputs, NodeRef
from rivulet.flow.levels import build_levels, count_forwarders, link_destinations, used_inputs
from rivulet.signal.combinators import connect, map_signal, over
from rivulet.signal.leaves import identity, transform

if TYPE_CHECKING:
    from collections.abc import Callable
    from contextlib import AbstractContextManager

    from rivulet._types import FlowDescription, MergeFunc, NodeId
    from rivulet.config import RivuletConfig
    from rivulet.observability.collector import FlowCollector
    from rivulet.observability.profiler import CompileProfiler
    from rivulet.signal.protocol import Signal


@dataclass(frozen=True, slots=True)
class FlowPlan:
    """The levelled graph of a flow description, before assembly.

    Attributes:
        graph: The node arena, with destinations linked and forwarders added.
        sink: Id of the node whose emissions form the flow's output.
        levels: Node ids per level; ``levels[0]`` holds the used input slots.

    """

    graph: FlowGraph
    sink: NodeId
    levels: tuple[tuple[NodeId, ...], ...]

    @property
    def used_slots(self) -> tuple[int, ...]:
        """Input positions the compiled signal reads, in input-tuple order."""
        return tuple(self.graph[node_id].slot for node_id in self.levels[0])  # type: ignore[misc]

    @property
    def forwarders(self) -> int:
        return count_forwarders(self.graph)

    def describe(self) -> list[str]:
        """Return one human-readable line per level."""
        lines: list[str] = []
        for depth, level in enumerate(self.levels):
            entries = []
            for node_id in level:
                node = self.graph[node_id]
                if node.is_input:
                    entries.append(node.label())
                    continue
                reads = ", ".join(str(self.graph[s].index) for s in node.sources)
                entries.append(f"{node.label()} <- [{reads}]")
            lines.append(f"level {depth}: " + "; ".join(entries))
        return lines


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


def plan_flow(
    description: FlowDescription,
    *,
    arity: int | None = None,
    profiler: CompileProfiler | None = None,
) -> FlowPlan:
    """Run *description* once and level the resulting graph.

    Raises:
        InvalidInputSlot: If the description addresses an invalid input slot.
        InvalidSignalArgument: If ``apply`` receives something without ``step()``.
        FlowGraphError: If the description returns no node or a malformed graph.

    """
    graph = FlowGraph(arity)

    with _stage(profiler, "describe"):
        output = description(graph.apply, Inputs(graph))
        sink = _resolve_sink(graph, output)

    with _stage(profiler, "link"):
        link_destinations(graph, sink)
        inputs = used_inputs(graph)

    with _stage(profiler, "level"):
        levels = build_levels(graph, inputs)

    return FlowPlan(graph=graph, sink=sink, levels=tuple(tuple(level) for level in levels))


def _resolve_sink(graph: FlowGraph, output: Any) -> NodeId:
    """Reduce the description's return value to a single sink node."""
    if isinstance(output, NodeRef):
        refs = [output]
    elif isinstance(output, Sequence) and not isinstance(output, str):
        refs = list(output)
    else:
        msg = (
            "A flow description must return a node or a sequence of nodes, "
            f"got {type(output).__name__}"
        )
        raise FlowGraphError(msg)

    if not refs:
        msg = "A flow description returned no output nodes"
        raise FlowGraphError(msg)
    for ref in refs:
        if not isinstance(ref, NodeRef) or ref.graph is not graph:
            msg = f"Flow outputs must be nodes of this flow, got {ref!r}"
            raise FlowGraphError(msg)

    if len(refs) == 1:
        return refs[0].node_id
    return graph.apply(identity(), refs).node_id


# ---------------------------------------------------------------------------
# Merge functions
# ---------------------------------------------------------------------------


def _node_input(positions: list[int], merge: MergeFunc | None) -> Callable[[Sequence[Any]], Any]:
    """Build the function picking one node's input out of the previous level's values."""
    if merge is not None:
        return lambda values: merge(*(values[p] for p in positions))
    if len(positions) == 1:
        (position,) = positions
        return lambda values: values[position]
    return lambda values: tuple(values[p] for p in positions)


def make_level_function(
    graph: FlowGraph,
    level: Sequence[NodeId],
    source_count: int,
) -> Callable[[Any], Any]:
    """Synthesize the merge function feeding *level* from the level below.

    The function receives the previous level's output (a bare value when that
    level has a single node, else a tuple) and returns this level's input (a
    bare value when this level has a single node, else a tuple).

    """
    node_inputs = [
        _node_input([graph[s].index for s in graph[node_id].sources], graph[node_id].merge)
        for node_id in level
    ]
    single_source = source_count == 1
    single_node = len(node_inputs) == 1

    def level_input(values: Any) -> Any:
        if single_source:
            values = (values,)
        if single_node:
            return node_inputs[0](values)
        return tuple(node_input(values) for node_input in node_inputs)

    return level_input


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def assemble(plan: FlowPlan) -> Signal:
    """Fold a levelled plan into one signal via connect / over / map."""
    if len(plan.levels) == 1:
        return identity()

    graph = plan.graph
    previous = plan.levels[0]
    total: Signal | None = None

    for level in plan.levels[1:]:
        level_fn = make_level_function(graph, level, len(previous))
        group = over([graph[node_id].signal for node_id in level])
        if total is None:
            total = connect(transform(level_fn), group)
        else:
            total = connect(map_signal(total, level_fn), group)
        previous = level

    return total  # type: ignore[return-value]


def compile_flow(
    description: FlowDescription,
    *,
    arity: int | None = None,
    config: RivuletConfig | None = None,
    collector: FlowCollector | None = None,
) -> Signal:
    """Compile a flow description into a single signal.

    Args:
        description: Function ``(apply, inputs) -> node | [nodes]``.
        arity: Number of input slots; ``None`` allocates slots on demand.
        config: Optional configuration (``verbose``, ``default_arity``).
        collector: Optional collector receiving ``FlowCompiled`` and
            ``FlowProfile`` events.

    Raises:
        InvalidInputSlot: On a non-integer or out-of-range slot reference.
        InvalidSignalArgument: If ``apply`` receives something without ``step()``.
        SharedSourceConflict: If two nodes share a signal or upstream state.
        FlowGraphError: If the description's graph is malformed.

    """
    if arity is None and config is not None:
        arity = config.default_arity
    verbose = config.verbose if config is not None else False

    profiler = None
    if collector is not None or verbose:
        from rivulet.observability.profiler import CompileProfiler

        log = collector.log if collector is not None else None
        profiler = CompileProfiler(log, verbose=verbose)

    t0 = time.perf_counter()
    if profiler is not None:
        profiler.begin(_description_name(description))

    plan = plan_flow(description, arity=arity, profiler=profiler)

    with _stage(profiler, "assemble"):
        signal = assemble(plan)

    compile_ms = (time.perf_counter() - t0) * 1000
    if profiler is not None:
        profiler.finish(levels=len(plan.levels))
    if collector is not None:
        collector.record_compile(
            _description_name(description),
            nodes=len(plan.graph),
            levels=len(plan.levels),
            forwarders=plan.forwarders,
            used_inputs=len(plan.levels[0]),
            compile_ms=compile_ms,
        )
    if verbose:
        for line in plan.describe():
            print(f"  {line}", file=sys.stderr)

    return signal


flow = compile_flow


def _description_name(description: Any) -> str:
    return getattr(description, "__qualname__", None) or repr(description)


def _stage(profiler: CompileProfiler | None, stage: str) -> AbstractContextManager[None]:
    return profiler.stage(stage) if profiler is not None else nullcontext()
