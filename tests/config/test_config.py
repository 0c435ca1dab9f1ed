from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from arena.config.config_loader import DEFAULTS_PATH, ConfigLoader
from arena.config.config_utils import load_config_metadata, recursive_update, validate_config
from arena.core.errors import ConfigError
from tests.conftest import make_config, robot

REPO_ROOT = Path(__file__).resolve().parents[2]


class TestRecursiveUpdate:
    def test_force_overrides(self) -> None:
        assert recursive_update({"a": {"b": 1}}, {"a": {"b": 2}}, force=True) == {"a": {"b": 2}}

    def test_fill_only_missing_or_none(self) -> None:
        merged = recursive_update({"a": {"b": 1, "c": None}}, {"a": {"b": 2, "c": 3, "d": 4}}, force=False)
        assert merged == {"a": {"b": 1, "c": 3, "d": 4}}


class TestConfigLoader:
    def test_defaults_fill_a_minimal_match_file(self, tmp_path: Path) -> None:
        match = tmp_path / "match.yml"
        match.write_text(yaml.safe_dump({"game": {"max_rounds": 12}, "arena": {"walls": [[10, 10]]}}))
        loader = ConfigLoader(match).apply_defaults()
        assert loader.get("game", "max_rounds") == 12
        assert loader.get("game", "seed") == 6147
        assert loader.get("teams", "red", "player") == "arena.player.robot_player"
        assert loader.get("arena", "walls") == [[10, 10]]
        assert loader.get("arena", "width") == 30
        assert loader.get("no", "such", "key", default="x") == "x"
        validate_config(loader.config_data)

    def test_packaged_defaults_are_valid(self) -> None:
        validate_config(ConfigLoader(DEFAULTS_PATH).config_data)

    def test_bundled_skirmish_is_valid(self) -> None:
        config = ConfigLoader(REPO_ROOT / "config" / "skirmish.yml").apply_defaults().validated()
        assert len(config["teams"]["blue"]["robots"]) == 5

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ConfigLoader(tmp_path / "nope.yml")

    def test_in_memory_data(self) -> None:
        loader = ConfigLoader(data={"game": {"seed": 1}})
        assert "game" in loader
        assert loader["game"]["seed"] == 1
        assert loader.sections() == ["game"]
        assert str(loader) == "ConfigLoader(<memory>: NonexNone, no teams)"


class TestValidateConfig:
    def test_missing_section(self) -> None:
        config = make_config()
        del config["teams"]
        with pytest.raises(ConfigError, match="teams"):
            validate_config(config)

    def test_arena_too_small(self) -> None:
        config = make_config()
        config["arena"]["width"] = 10
        with pytest.raises(ConfigError):
            validate_config(config)

    def test_robot_off_the_map(self) -> None:
        with pytest.raises(ConfigError, match="off"):
            validate_config(make_config([robot("ARCHON", 20, 3)]))

    def test_unknown_robot_type(self) -> None:
        with pytest.raises(ConfigError, match="DRONE"):
            validate_config(make_config([robot("DRONE", 2, 3)]))

    def test_unknown_team(self) -> None:
        config = make_config()
        config["teams"]["green"] = {"robots": []}
        with pytest.raises(ConfigError, match="green"):
            validate_config(config)

    @pytest.mark.parametrize("length", [0, 2, "64", 3.5, True])
    def test_shared_array_must_hold_the_target_record(self, length) -> None:
        with pytest.raises(ConfigError, match="shared_array_length"):
            validate_config(make_config(shared_array_length=length))

    def test_smallest_shared_array_is_accepted(self) -> None:
        assert validate_config(make_config(shared_array_length=3))["game"]["shared_array_length"] == 3

    def test_unknown_robot_stat(self) -> None:
        config = make_config()
        config["robot_types"] = {"SOLDIER": {"damage": 4, "speed": 2}}
        with pytest.raises(ConfigError, match="speed"):
            validate_config(config)

    def test_known_robot_stat_override(self) -> None:
        config = make_config()
        config["robot_types"] = {"soldier": {"damage": 4}}
        validate_config(config)

    def test_metadata(self) -> None:
        metadata = load_config_metadata(make_config(seed=5))
        assert metadata["seed"] == 5
        assert metadata["arena"] == {"width": 20, "height": 20, "walls": 0}
