"""Dependency levelling for flow graphs.

After the description has run, the compiler:

1. back-links ``destinations`` by walking from the sink through ``sources``;
2. collects the *used* input slots (those with at least one destination);
3. groups nodes breadth first into levels, level 0 being the used slots.
   A node joins the next level once all of its sources sit in the current
   one.  An edge that would skip a level is routed through a forwarder
   (identity node) so that every node's sources lie exactly one level below
   it.

"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rivulet._types import NodeId
    from rivulet.flow.graph import FlowGraph


def link_destinations(graph: FlowGraph, sink: NodeId) -> set[NodeId]:
    """Fill in ``destinations`` for every node the sink depends on.

    Each reachable node is visited once; a node listed twice among another
    node's sources receives two back-links.

    Returns:
        Ids of all nodes reachable from the sink, the sink included.

    """
    reached: set[NodeId] = {sink}
    queue = deque([sink])
    while queue:
        node_id = queue.popleft()
        for source_id in graph[node_id].sources:
            graph[source_id].destinations.append(node_id)
            if source_id not in reached:
                reached.add(source_id)
                queue.append(source_id)
    return reached


def used_inputs(graph: FlowGraph) -> list[NodeId]:
    """Return ids of input slots with at least one destination, by slot order."""
    return [
        node_id
        for _, node_id in sorted(graph.slot_nodes.items())
        if graph[node_id].destinations
    ]


def build_levels(graph: FlowGraph, inputs: list[NodeId]) -> list[list[NodeId]]:
    """Group the linked graph into levels, inserting forwarders as needed.

    Level order is deterministic: level 0 follows slot order and each later
    level follows discovery order.  Each node's ``index`` is set to its
    position within its level.

    """
    levels = [list(inputs)]
    current = levels[0]
    while True:
        following = _next_level(graph, current)
        if not following:
            break
        levels.append(following)
        current = following

    for level in levels:
        for position, node_id in enumerate(level):
            graph[node_id].index = position
    return levels


def _next_level(graph: FlowGraph, level: list[NodeId]) -> list[NodeId]:
    members = set(level)
    result: list[NodeId] = []
    seen: set[NodeId] = set()

    for node_id in level:
        node = graph[node_id]
        for edge, destination_id in enumerate(node.destinations):
            if destination_id in seen:
                continue

            destination = graph[destination_id]
            if all(source_id in members for source_id in destination.sources):
                seen.add(destination_id)
                result.append(destination_id)
                continue

            forwarder_id = graph.add_forwarder(node_id, destination_id)
            node.destinations[edge] = forwarder_id
            position = destination.sources.index(node_id)
            destination.sources[position] = forwarder_id
            seen.add(forwarder_id)
            result.append(forwarder_id)

    return result


def count_forwarders(graph: FlowGraph) -> int:
    """Return how many forwarder nodes the leveller inserted."""
    return sum(1 for node in graph.nodes if node.forwarder)
