"""Load RivuletConfig from rivulet.yaml or rivulet.toml if present.

Merges file config with CLI kwargs. CLI overrides file.
"""

from __future__ import annotations

import tomllib
from pathlib import Path

import yaml

from rivulet._errors import ConfigError
from rivulet.config import RivuletConfig

_CONFIG_KEYS: frozenset[str] = frozenset({
    "verbose",
    "max_drive_steps",
    "event_log_size",
    "default_arity",
})


def load_config(root: Path, **overrides: object) -> RivuletConfig:
    """Load RivuletConfig from root, optionally merging a config file.

    Looks for rivulet.yaml, rivulet.yml, or rivulet.toml in root. If found,
    loads and merges with overrides. Overrides that are ``None`` are ignored;
    the rest take precedence.

    Raises:
        ConfigError: If the config file cannot be parsed or holds invalid values.

    """
    file_config = _read_rivulet_config(root)
    merged = {**file_config, **{k: v for k, v in overrides.items() if v is not None}}
    try:
        return RivuletConfig(**merged)  # type: ignore[arg-type]
    except TypeError as exc:
        msg = f"Invalid rivulet configuration: {exc}"
        raise ConfigError(msg) from exc


def _read_rivulet_config(root: Path) -> dict[str, object]:
    """Read rivulet config from yaml/toml if present. Returns empty dict otherwise."""
    for name in ("rivulet.yaml", "rivulet.yml"):
        path = root / name
        if path.is_file():
            return _parse_yaml(path)
    toml_path = root / "rivulet.toml"
    if toml_path.is_file():
        return _parse_toml(toml_path)
    return {}


def _parse_yaml(path: Path) -> dict[str, object]:
    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    if not isinstance(data, dict):
        msg = f"{path} must contain a mapping, got {type(data).__name__}"
        raise ConfigError(msg)
    return _flatten_rivulet_section(data)


def _parse_toml(path: Path) -> dict[str, object]:
    try:
        data = tomllib.loads(path.read_text())
    except tomllib.TOMLDecodeError as exc:
        msg = f"Failed to parse {path}: {exc}"
        raise ConfigError(msg) from exc
    return _flatten_rivulet_section(data)


def _flatten_rivulet_section(data: dict[str, object]) -> dict[str, object]:
    """Extract rivulet.* keys into top-level config, dropping unknown keys."""
    result: dict[str, object] = {}
    for k, v in data.items():
        if k in _CONFIG_KEYS:
            result[k] = v
    section = data.get("rivulet")
    if isinstance(section, dict):
        for k, v in section.items():
            if k in _CONFIG_KEYS:
                result[k] = v
    return result
