"""Compile-time node arena for flow descriptions.

A flow description receives ``apply`` and ``inputs``; both hand out
``NodeRef`` handles into a ``FlowGraph`` arena.  Nodes address each other by
integer id, so back-links (``destinations``) and forwarder rewiring can be
filled in after construction without cyclic ownership.

The arena lives only for the duration of one compilation.
"""

from __future__ import annotations

import operator
from collections.abc import Iterator
from dataclasses import dataclass, field
from itertools import count
from typing import TYPE_CHECKING, Any

from rivulet._errors import FlowGraphError, InvalidInputSlot, InvalidSignalArgument
from rivulet.signal.leaves import identity
from rivulet.signal.protocol import is_signal

if TYPE_CHECKING:
    from rivulet._types import MergeFunc, NodeId, SlotIndex


@dataclass(slots=True)
class FlowNode:
    """One vertex of the flow graph.

    Attributes:
        signal: The user signal run for this node; ``None`` for input slots.
        sources: Ids of the nodes this node reads, in argument order.
        destinations: Ids of the nodes reading this one, one entry per edge.
        merge: Optional combiner called as ``merge(*source_values)``.
        slot: Input position for input-slot nodes, else ``None``.
        forwarder: True for identity nodes inserted by the leveller.
        index: Position within the node's level, assigned after levelling.

    """

    signal: Any
    sources: list[NodeId]
    destinations: list[NodeId] = field(default_factory=list)
    merge: MergeFunc | None = None
    slot: SlotIndex | None = None
    forwarder: bool = False
    index: int = -1

    @property
    def is_input(self) -> bool:
        return self.slot is not None

    def label(self) -> str:
        if self.slot is not None:
            return f"input[{self.slot}]"
        if self.forwarder:
            return "forward"
        return repr(self.signal)


@dataclass(frozen=True, slots=True)
class NodeRef:
    """Opaque handle to a node, as returned by ``apply`` and ``inputs[i]``."""

    graph: FlowGraph = field(repr=False, compare=False)
    node_id: NodeId

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NodeRef):
            return NotImplemented
        return self.graph is other.graph and self.node_id == other.node_id

    def __hash__(self) -> int:
        return hash((id(self.graph), self.node_id))


class FlowGraph:
    """Arena of ``FlowNode`` objects addressed by index.

    Args:
        arity: Number of input slots, or ``None`` to allocate slots on demand.

    """

    __slots__ = ("_slot_nodes", "arity", "nodes")

    def __init__(self, arity: int | None = None) -> None:
        if arity is not None and (not isinstance(arity, int) or arity < 0):
            msg = f"Flow arity must be a non-negative integer, got {arity!r}"
            raise InvalidInputSlot(msg)
        self.arity = arity
        self.nodes: list[FlowNode] = []
        self._slot_nodes: dict[SlotIndex, NodeId] = {}

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, node_id: NodeId) -> FlowNode:
        return self.nodes[node_id]

    # ----- Construction -----

    def slot(self, index: object) -> NodeRef:
        """Return the node for input position *index*, allocating it lazily.

        The same index always yields the same node.

        Raises:
            InvalidInputSlot: If *index* is not a non-negative integer within
                the declared arity.

        """
        position = _slot_position(index)
        if self.arity is not None and position >= self.arity:
            msg = f"Input slot {position} is out of range for a flow of arity {self.arity}"
            raise InvalidInputSlot(msg)

        node_id = self._slot_nodes.get(position)
        if node_id is None:
            node_id = self._add(FlowNode(signal=None, sources=[], slot=position))
            self._slot_nodes[position] = node_id
        return NodeRef(self, node_id)

    def apply(
        self,
        signal: Any,
        sources: NodeRef | list[NodeRef] | tuple[NodeRef, ...],
        merge: MergeFunc | None = None,
    ) -> NodeRef:
        """Declare a node running *signal* over the values of *sources*.

        With several sources the node receives ``merge(*values)``, or the
        ordered tuple of values when no merge function is given.

        Raises:
            InvalidSignalArgument: If *signal* has no ``step()``.
            FlowGraphError: If *sources* is not a node or a list/tuple of
                nodes, is empty, or holds foreign objects.

        """
        if not is_signal(signal):
            msg = f"apply() expects a signal, got {type(signal).__name__}: {signal!r}"
            raise InvalidSignalArgument(msg)
        if merge is not None and not callable(merge):
            msg = f"apply() merge must be callable, got {type(merge).__name__}"
            raise FlowGraphError(msg)

        if isinstance(sources, NodeRef):
            refs = [sources]
        elif isinstance(sources, list | tuple):
            refs = list(sources)
        else:
            msg = (
                "apply() sources must be a node or a list/tuple of nodes, "
                f"got {type(sources).__name__}"
            )
            raise FlowGraphError(msg)
        if not refs:
            msg = f"apply({signal!r}) needs at least one source"
            raise FlowGraphError(msg)
        for ref in refs:
            if not isinstance(ref, NodeRef) or ref.graph is not self:
                msg = f"apply() sources must be nodes of this flow, got {ref!r}"
                raise FlowGraphError(msg)

        node = FlowNode(signal=signal, sources=[ref.node_id for ref in refs], merge=merge)
        return NodeRef(self, self._add(node))

    def add_forwarder(self, source_id: NodeId, destination_id: NodeId) -> NodeId:
        """Create an identity node carrying one edge ``source -> destination``."""
        node = FlowNode(
            signal=identity(),
            sources=[source_id],
            destinations=[destination_id],
            forwarder=True,
        )
        return self._add(node)

    def _add(self, node: FlowNode) -> NodeId:
        self.nodes.append(node)
        return len(self.nodes) - 1

    # ----- Queries -----

    @property
    def slot_nodes(self) -> dict[SlotIndex, NodeId]:
        """Allocated input slots mapped to their node ids."""
        return dict(self._slot_nodes)

    @property
    def highest_slot(self) -> SlotIndex | None:
        """Highest input index referenced by the description, if any."""
        return max(self._slot_nodes, default=None)


class Inputs:
    """The ``inputs`` argument of a flow description.

    Indexable by non-negative integer to obtain that position's slot, and
    iterable to enumerate slots lazily in ascending order from zero (bounded
    by the flow's arity when one was declared).

    """

    __slots__ = ("_graph",)

    def __init__(self, graph: FlowGraph) -> None:
        self._graph = graph

    def __getitem__(self, index: object) -> NodeRef:
        return self._graph.slot(index)

    def __iter__(self) -> Iterator[NodeRef]:
        positions = count() if self._graph.arity is None else range(self._graph.arity)
        for position in positions:
            yield self._graph.slot(position)

    def __len__(self) -> int:
        if self._graph.arity is None:
            msg = "inputs has no length unless the flow declares an arity"
            raise TypeError(msg)
        return self._graph.arity


def _slot_position(index: object) -> SlotIndex:
    """Validate an input index and return it as a plain int."""
    if isinstance(index, bool):
        msg = f"Input slots are addressed by integer, got {index!r}"
        raise InvalidInputSlot(msg)
    try:
        position = operator.index(index)  # type: ignore[arg-type]
    except TypeError:
        msg = f"Input slots are addressed by integer, got {type(index).__name__}: {index!r}"
        raise InvalidInputSlot(msg) from None
    if position < 0:
        msg = f"Input slot index must be non-negative, got {position}"
        raise InvalidInputSlot(msg)
    return position
