"""Rivulet error hierarchy.

All rivulet-specific errors inherit from RivuletError for easy catching.
Construction-time errors are raised immediately by the combinators and the
flow compiler, before any signal is stepped.
"""


class RivuletError(Exception):
    """Base error for all rivulet operations."""


class ConfigError(RivuletError):
    """Invalid or unreadable configuration."""


class SignalError(RivuletError):
    """Error while composing or stepping signals."""


class InvalidSignalArgument(SignalError):
    """An object passed where a signal is expected has no ``step()``."""


class SharedSourceConflict(SignalError):
    """Two signals being composed trace back to a common source."""


class SignalProtocolError(SignalError):
    """A signal was stepped with input of the wrong shape."""


class FlowError(RivuletError):
    """Error in a flow description (graph construction or compilation)."""


class InvalidInputSlot(FlowError):
    """A non-integer, negative, or out-of-range index addressed an input slot."""


class FlowGraphError(FlowError):
    """The described graph is malformed (e.g. a node without sources)."""


class DriveLimitExceeded(RivuletError):
    """The driving harness reached its step limit."""
