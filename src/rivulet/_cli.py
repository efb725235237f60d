"""Rivulet CLI — rivulet levels / rivulet run.

Entry point for the ``rivulet`` command-line interface.  Both commands take
a flow description as a ``module:function`` reference.
"""

from __future__ import annotations

import argparse
import importlib
import importlib.util
import json
import sys
from pathlib import Path
from typing import Any

from rivulet._errors import ConfigError, RivuletError


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the rivulet CLI."""
    parser = argparse.ArgumentParser(
        prog="rivulet",
        description="Compile and drive reactive dataflow graphs.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # rivulet levels
    levels_parser = subparsers.add_parser(
        "levels",
        help="Print the level plan of a flow description",
    )
    levels_parser.add_argument("target", help="Flow description as module:function")
    levels_parser.add_argument("--arity", type=int, default=None, help="Declared input arity")

    # rivulet run
    run_parser = subparsers.add_parser(
        "run",
        help="Compile a flow description and drive it with JSON inputs",
    )
    run_parser.add_argument("target", help="Flow description as module:function")
    run_parser.add_argument("inputs", nargs="*", help="One JSON value per input")
    run_parser.add_argument("--arity", type=int, default=None, help="Declared input arity")
    run_parser.add_argument(
        "--max-steps", type=int, default=None, help="Step limit (0 = unbounded)",
    )
    run_parser.add_argument(
        "--verbose", action="store_true", default=None, help="Print the level plan to stderr",
    )

    return parser


def _get_version() -> str:
    """Get the package version."""
    from rivulet import __version__

    return __version__


def load_target(target: str) -> Any:
    """Resolve ``module:function`` or ``path/to/file.py:function`` to the object it names.

    Raises:
        ConfigError: If the reference is malformed or cannot be imported.

    """
    module_name, sep, attr = target.rpartition(":")
    if not sep or not module_name or not attr:
        msg = f"Expected a flow description as module:function, got {target!r}"
        raise ConfigError(msg)

    if module_name.endswith(".py"):
        module = _load_file(Path(module_name))
    else:
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            msg = f"Failed to import {module_name!r}: {exc}"
            raise ConfigError(msg) from exc

    obj: Any = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            msg = f"Module {module_name!r} has no attribute {attr!r}"
            raise ConfigError(msg) from exc
    if not callable(obj):
        msg = f"{target!r} is not callable"
        raise ConfigError(msg)
    return obj


def _load_file(py_file: Path) -> Any:
    """Import a Python file as a module without touching ``sys.path``."""
    if not py_file.is_file():
        msg = f"Flow file {py_file} does not exist"
        raise ConfigError(msg)

    module_name = "rivulet_flows." + py_file.stem
    spec = importlib.util.spec_from_file_location(module_name, py_file)
    if spec is None or spec.loader is None:
        msg = f"Cannot load flow file {py_file}"
        raise ConfigError(msg)

    try:
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
    except Exception as exc:
        msg = f"Failed to load flow file {py_file}: {exc}"
        raise ConfigError(msg) from exc
    return module


def parse_input(text: str) -> Any:
    """Decode one JSON input; arrays become tuples so they index like joined inputs."""
    try:
        return _tuplify(json.loads(text))
    except json.JSONDecodeError as exc:
        msg = f"Input {text!r} is not valid JSON: {exc}"
        raise ConfigError(msg) from exc


def _tuplify(value: Any) -> Any:
    if isinstance(value, list):
        return tuple(_tuplify(item) for item in value)
    if isinstance(value, dict):
        return {k: _tuplify(v) for k, v in value.items()}
    return value


def _levels(args: argparse.Namespace) -> None:
    from rivulet.config_loader import load_config
    from rivulet.flow.compiler import plan_flow

    config = load_config(Path.cwd())
    arity = args.arity if args.arity is not None else config.default_arity
    plan = plan_flow(load_target(args.target), arity=arity)
    for line in plan.describe():
        print(line)
    print(f"forwarders: {plan.forwarders}")
    print(f"inputs: {list(plan.used_slots)}")


def _run(args: argparse.Namespace) -> None:
    from rivulet.config_loader import load_config
    from rivulet.flow.compiler import compile_flow
    from rivulet.harness import drive
    from rivulet.observability import EventLog, FlowCollector, SignalDriven

    config = load_config(
        Path.cwd(),
        verbose=args.verbose,
        max_drive_steps=args.max_steps,
        default_arity=args.arity,
    )
    collector = FlowCollector(EventLog(config.event_log_size))
    signal = compile_flow(load_target(args.target), config=config, collector=collector)
    inputs = [parse_input(text) for text in args.inputs]

    report = drive(signal, inputs, max_steps=config.max_drive_steps, collector=collector)
    for value in report.outputs:
        print(json.dumps(value, default=repr))
    if report.done:
        print(f"done: {json.dumps(report.result, default=repr)}")
        if report.rest:
            print(f"unconsumed inputs: {len(report.rest)}", file=sys.stderr)
    if config.verbose:
        for event in collector.log.query(event_type=SignalDriven, limit=1):
            print(
                f"  drove {event.inputs_consumed} inputs -> {event.outputs} outputs "
                f"in {event.steps} steps ({event.duration_ms:.1f}ms)",
                file=sys.stderr,
            )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    try:
        if args.command == "levels":
            _levels(args)
        elif args.command == "run":
            _run(args)
    except RivuletError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
