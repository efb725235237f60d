"""Rivulet configuration.

RivuletConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass

from rivulet._errors import ConfigError


@dataclass(frozen=True, slots=True)
class RivuletConfig:
    """Configuration for compiling and driving flows.

    Attributes:
        verbose: Print the level plan and compile timings to stderr.
        max_drive_steps: Step limit for the driving harness (0 = unbounded).
        event_log_size: Capacity of the event log used by the CLI.
        default_arity: Input arity assumed when a flow declares none
            (``None`` = slots are allocated on demand).

    """

    verbose: bool = False
    max_drive_steps: int = 1_000_000
    event_log_size: int = 10_000
    default_arity: int | None = None

    def __post_init__(self) -> None:
        if self.max_drive_steps < 0:
            msg = f"max_drive_steps must be >= 0, got {self.max_drive_steps}"
            raise ConfigError(msg)
        if self.event_log_size <= 0:
            msg = f"event_log_size must be positive, got {self.event_log_size}"
            raise ConfigError(msg)
        if self.default_arity is not None and self.default_arity < 0:
            msg = f"default_arity must be >= 0, got {self.default_arity}"
            raise ConfigError(msg)
