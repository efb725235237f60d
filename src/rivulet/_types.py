"""Shared type definitions for rivulet."""

from collections.abc import Callable, Sequence
from typing import Any

# A pure per-value function (transform, map)
type ValueFunc = Callable[[Any], Any]

# Predicate used by filter() and until()
type Predicate = Callable[[Any], bool]

# Fold step used by accumulate(): (state, input) -> state
type Combine = Callable[[Any, Any], Any]

# Combiner for a node with several sources: merge(*source_values)
type MergeFunc = Callable[..., Any]

# Index of a node inside the compiler's arena
type NodeId = int

# Position of a raw input slot
type SlotIndex = int

# A finite ordered input sequence for the driving harness
type InputSequence = Sequence[Any]

# A flow description: (apply, inputs) -> node | sequence of nodes
type FlowDescription = Callable[..., Any]
