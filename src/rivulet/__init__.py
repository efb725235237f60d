"""Rivulet — a small reactive-dataflow runtime.

Composable pull-driven stream transformers ("signals") plus a compiler that
turns a declarative description of a computation graph into one signal.

Quick start::

    from rivulet import compile_flow, drive, transform

    def describe(apply, inputs):
        doubled = apply(transform(lambda x: x * 2), inputs[0])
        return apply(transform(lambda x: x + 1), doubled)

    drive(compile_flow(describe), [1, 2, 3]).outputs   # [3, 5, 7]

Building blocks::

    const_from / never / identity / transform / filter / until / accumulate
    map_signal(signal, f)        # transform each emission
    connect(s1, s2, ...)         # serial pipe
    over(s1, s2, ...)            # parallel barrier join

Everything is synchronous and single-threaded: a signal only advances when
its owner calls ``step()``.

"""

from typing import Any

__version__ = "0.1.0"
__all__ = [
    "NEEDS_INPUT",
    "NO_INPUT",
    "NO_VALUE",
    "Done",
    "DriveResult",
    "Emits",
    "NeedsInput",
    "RivuletConfig",
    "Signal",
    "__version__",
    "accumulate",
    "compile_flow",
    "connect",
    "const_from",
    "drive",
    "filter",
    "identity",
    "map_signal",
    "never",
    "over",
    "plan_flow",
    "transform",
    "until",
]

_SIGNAL_EXPORTS = frozenset({
    "NEEDS_INPUT",
    "NO_INPUT",
    "NO_VALUE",
    "Done",
    "Emits",
    "NeedsInput",
    "Signal",
    "accumulate",
    "connect",
    "const_from",
    "filter",
    "identity",
    "map_signal",
    "never",
    "over",
    "transform",
    "until",
})


def __getattr__(name: str) -> Any:
    """Lazy imports for the public API.

    Keeps ``import rivulet`` fast while providing a flat top-level API.
    """
    if name in _SIGNAL_EXPORTS:
        import rivulet.signal

        return getattr(rivulet.signal, name)

    if name in ("compile_flow", "plan_flow"):
        import rivulet.flow.compiler

        return getattr(rivulet.flow.compiler, name)

    if name in ("drive", "DriveResult"):
        import rivulet.harness

        return getattr(rivulet.harness, name)

    if name == "RivuletConfig":
        from rivulet.config import RivuletConfig

        return RivuletConfig

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
