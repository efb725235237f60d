"""Tests for rivulet.config and rivulet.config_loader."""

from pathlib import Path

import pytest

from rivulet._errors import ConfigError
from rivulet.config import RivuletConfig
from rivulet.config_loader import load_config


class TestRivuletConfig:
    """RivuletConfig — frozen dataclass with sensible defaults."""

    def test_defaults(self) -> None:
        config = RivuletConfig()
        assert config.verbose is False
        assert config.max_drive_steps == 1_000_000
        assert config.event_log_size == 10_000
        assert config.default_arity is None

    def test_frozen(self) -> None:
        config = RivuletConfig()
        with pytest.raises(AttributeError):
            config.verbose = True  # type: ignore[misc]

    def test_negative_step_limit_rejected(self) -> None:
        with pytest.raises(ConfigError, match="max_drive_steps"):
            RivuletConfig(max_drive_steps=-1)

    def test_zero_log_size_rejected(self) -> None:
        with pytest.raises(ConfigError, match="event_log_size"):
            RivuletConfig(event_log_size=0)

    def test_negative_arity_rejected(self) -> None:
        with pytest.raises(ConfigError, match="default_arity"):
            RivuletConfig(default_arity=-2)


class TestLoadConfig:
    """load_config — file config merged with overrides."""

    def test_no_file_gives_defaults(self, tmp_path: Path) -> None:
        assert load_config(tmp_path) == RivuletConfig()

    def test_yaml_top_level_keys(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yaml").write_text("verbose: true\nmax_drive_steps: 50\n")
        config = load_config(tmp_path)
        assert config.verbose is True
        assert config.max_drive_steps == 50

    def test_yml_extension(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yml").write_text("default_arity: 3\n")
        assert load_config(tmp_path).default_arity == 3

    def test_yaml_rivulet_section(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yaml").write_text("rivulet:\n  event_log_size: 20\n")
        assert load_config(tmp_path).event_log_size == 20

    def test_toml_section(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.toml").write_text("[rivulet]\nverbose = true\ndefault_arity = 2\n")
        config = load_config(tmp_path)
        assert config.verbose is True
        assert config.default_arity == 2

    def test_yaml_preferred_over_toml(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yaml").write_text("max_drive_steps: 1\n")
        (tmp_path / "rivulet.toml").write_text("max_drive_steps = 2\n")
        assert load_config(tmp_path).max_drive_steps == 1

    def test_unknown_keys_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yaml").write_text("colour: blue\nverbose: true\n")
        assert load_config(tmp_path).verbose is True

    def test_overrides_win(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yaml").write_text("max_drive_steps: 50\n")
        assert load_config(tmp_path, max_drive_steps=7).max_drive_steps == 7

    def test_none_overrides_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yaml").write_text("default_arity: 4\n")
        assert load_config(tmp_path, default_arity=None).default_arity == 4

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yaml").write_text("verbose: [unclosed\n")
        with pytest.raises(ConfigError, match="Failed to parse"):
            load_config(tmp_path)

    def test_yaml_must_be_mapping(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yaml").write_text("- one\n- two\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(tmp_path)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.toml").write_text("verbose = \n")
        with pytest.raises(ConfigError, match="Failed to parse"):
            load_config(tmp_path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yaml").write_text("max_drive_steps: -5\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)

    def test_wrong_value_type(self, tmp_path: Path) -> None:
        (tmp_path / "rivulet.yaml").write_text("max_drive_steps: lots\n")
        with pytest.raises(ConfigError):
            load_config(tmp_path)
