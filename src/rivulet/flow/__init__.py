"""Flow compiler — declarative graphs of signals compiled into one signal."""

from rivulet.flow.compiler import FlowPlan, assemble, compile_flow, flow, make_level_function, plan_flow
from rivulet.flow.graph import FlowGraph, FlowNode, Inputs, NodeRef

__all__ = [
    "FlowGraph",
    "FlowNode",
    "FlowPlan",
    "Inputs",
    "NodeRef",
    "assemble",
    "compile_flow",
    "flow",
    "make_level_function",
    "plan_flow",
]
