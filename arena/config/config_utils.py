from typing import Any, Dict
from typeguard import typechecked

from arena.core.console import *
from arena.core.errors import ConfigError
from arena.game.shared_array import MIN_SHARED_ARRAY_LENGTH, SHARED_ARRAY_LENGTH
from arena.world.arena_map import MAX_ARENA_SIZE, MIN_ARENA_SIZE
from arena.world.robot_types import RobotStats, RobotType, Team

REQUIRED_SECTIONS = ("game", "arena", "teams")


@typechecked
def recursive_update(default: Dict, override: Dict, force: bool) -> Dict:
    """
    Recursively updates the 'default' dictionary with the 'override' dictionary.

    For each key in the override dictionary:
      - If force is True, the override value always wins.
      - If force is False, the override only fills keys that are missing or None.

    If both values are dictionaries, the function updates them recursively.

    Parameters:
    -----------
    default : Dict
        The original configuration dictionary.
    override : Dict
        The extra (override) dictionary.
    force : bool
        Whether to force overriding keys that already have a valid value.

    Returns:
    --------
    Dict
        The updated dictionary.
    """
    for key, value in override.items():
        if key in default and isinstance(default[key], dict) and isinstance(value, dict):
            default[key] = recursive_update(default[key], value, force)
        elif force:
            if key in default and default[key] != value and default[key] is not None:
                debug(f"Overriding key '{key}': {default[key]} -> {value}")
            default[key] = value
        elif key not in default or default[key] is None:
            debug(f"Filling key '{key}' with value: {value}")
            default[key] = value
    return default


def _check_position(position: Any, width: int, height: int, where: str) -> None:
    if not isinstance(position, (list, tuple)) or len(position) != 2:
        raise ConfigError(f"position must be [x, y], got {position!r}", where)
    x, y = position
    if not (0 <= int(x) < width and 0 <= int(y) < height):
        raise ConfigError(f"position {list(position)} is off a {width}x{height} arena", where)


@typechecked
def validate_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Check a merged match configuration before any runtime is built.

    Raises:
        ConfigError: On a missing section, a shared array too short for the
            target record, an arena size out of range, an unknown team,
            robot type or stat, or a position off the map.

    Returns:
        The same configuration, for chaining.
    """
    for section in REQUIRED_SECTIONS:
        if not isinstance(config.get(section), dict):
            raise ConfigError("missing or not a mapping", section)

    length = config["game"].get("shared_array_length", SHARED_ARRAY_LENGTH)
    if isinstance(length, bool) or not isinstance(length, int) or length < MIN_SHARED_ARRAY_LENGTH:
        raise ConfigError(f"shared_array_length must be an integer >= {MIN_SHARED_ARRAY_LENGTH}, got {length!r}", "game")

    arena = config["arena"]
    try:
        width, height = int(arena["width"]), int(arena["height"])
    except (KeyError, TypeError, ValueError) as e:
        raise ConfigError(f"width and height are required integers ({e})", "arena") from e
    if not (MIN_ARENA_SIZE <= width <= MAX_ARENA_SIZE and MIN_ARENA_SIZE <= height <= MAX_ARENA_SIZE):
        raise ConfigError(f"size {width}x{height} outside [{MIN_ARENA_SIZE}, {MAX_ARENA_SIZE}]", "arena")
    for key in ("walls", "lead", "gold"):
        for entry in arena.get(key) or []:
            _check_position(list(entry)[:2], width, height, f"arena.{key}")

    for name, overrides in (config.get("robot_types") or {}).items():
        if str(name).upper() not in RobotType.__members__:
            raise ConfigError(f"unknown robot type '{name}'", "robot_types")
        if overrides is not None and not isinstance(overrides, dict):
            raise ConfigError(f"stat overrides for '{name}' must be a mapping", "robot_types")
        unknown = sorted(set(overrides or {}) - set(RobotStats.names()))
        if unknown:
            raise ConfigError(f"unknown stats {unknown} for '{name}'", "robot_types")

    for team_name, team_config in config["teams"].items():
        if team_name not in (Team.RED.value, Team.BLUE.value):
            raise ConfigError(f"unknown team '{team_name}'", "teams")
        for i, entry in enumerate((team_config or {}).get("robots") or []):
            where = f"teams.{team_name}.robots[{i}]"
            if str(entry.get("type", "")).upper() not in RobotType.__members__:
                raise ConfigError(f"unknown robot type '{entry.get('type')}'", where)
            _check_position(entry.get("position"), width, height, where)

    debug("Configuration validated")
    return config


def load_config_metadata(config: Dict[str, Any]) -> Dict[str, Any]:
    """Match-wide facts worth stamping on a match log."""
    game = config.get("game", {})
    arena = config.get("arena", {})
    teams = config.get("teams", {})
    return {
        "seed": game.get("seed"),
        "max_rounds": game.get("max_rounds"),
        "arena": {"width": arena.get("width"), "height": arena.get("height"), "walls": len(arena.get("walls") or [])},
        "players": {name: (team or {}).get("player") for name, team in teams.items()},
    }
