from dataclasses import dataclass, fields, replace
from enum import Enum
from typing import Any, Dict, Mapping, Tuple

from arena.core.errors import ConfigError
from arena.world.geometry import Position

# A robot may act or move while the matching cooldown is below this value
COOLDOWN_LIMIT = 10
# Cooldown removed from every robot at the end of each round
COOLDOWN_DECAY = 10


class Team(Enum):
    RED = "red"
    BLUE = "blue"
    NEUTRAL = "neutral"

    def opponent(self) -> "Team":
        if self is Team.RED:
            return Team.BLUE
        if self is Team.BLUE:
            return Team.RED
        return Team.NEUTRAL


@dataclass(frozen=True)
class RobotStats:
    vision_radius_squared: int
    action_radius_squared: int
    health: int
    damage: int
    action_cooldown: int
    movement_cooldown: int
    lead_cost: int
    gold_cost: int

    @classmethod
    def names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def with_overrides(self, overrides: Mapping[str, Any]) -> "RobotStats":
        unknown = set(overrides) - set(self.names())
        if unknown:
            raise ConfigError(f"unknown robot stats {sorted(unknown)}", "robot_types")
        return replace(self, **{k: int(v) for k, v in overrides.items()})


class RobotType(Enum):
    ARCHON = "ARCHON"
    LABORATORY = "LABORATORY"
    WATCHTOWER = "WATCHTOWER"
    MINER = "MINER"
    BUILDER = "BUILDER"
    SOLDIER = "SOLDIER"
    SAGE = "SAGE"

    @property
    def stats(self) -> RobotStats:
        return _ACTIVE_STATS[self]

    @property
    def vision_radius_squared(self) -> int:
        return self.stats.vision_radius_squared

    @property
    def action_radius_squared(self) -> int:
        return self.stats.action_radius_squared

    @property
    def health(self) -> int:
        return self.stats.health

    @property
    def damage(self) -> int:
        return self.stats.damage

    def is_building(self) -> bool:
        return self in (RobotType.ARCHON, RobotType.LABORATORY, RobotType.WATCHTOWER)

    def can_attack_units(self) -> bool:
        return self.stats.damage > 0

    def can_build(self, other: "RobotType") -> bool:
        return self is RobotType.ARCHON and other in (
            RobotType.MINER,
            RobotType.BUILDER,
            RobotType.SOLDIER,
            RobotType.SAGE,
        )


DEFAULT_STATS: Dict[RobotType, RobotStats] = {
    RobotType.ARCHON: RobotStats(34, 20, 1000, 0, 10, 24, 0, 100),
    RobotType.LABORATORY: RobotStats(53, 0, 100, 0, 10, 24, 800, 0),
    RobotType.WATCHTOWER: RobotStats(34, 20, 150, 4, 10, 24, 150, 0),
    RobotType.MINER: RobotStats(20, 2, 40, 0, 2, 20, 50, 0),
    RobotType.BUILDER: RobotStats(20, 5, 30, 0, 10, 20, 40, 0),
    RobotType.SOLDIER: RobotStats(20, 13, 50, 3, 10, 16, 75, 0),
    RobotType.SAGE: RobotStats(34, 25, 100, 45, 200, 25, 0, 20),
}

_ACTIVE_STATS: Dict[RobotType, RobotStats] = dict(DEFAULT_STATS)


def configure_robot_types(overrides: Mapping[str, Mapping[str, Any]]) -> None:
    """
    Apply stat overrides from the ``robot_types`` config section.

    Every call starts again from the defaults, so a match never inherits the
    overrides of a previous one.
    """
    _ACTIVE_STATS.clear()
    _ACTIVE_STATS.update(DEFAULT_STATS)
    for name, stat_overrides in (overrides or {}).items():
        robot_type = RobotType(str(name).upper())
        _ACTIVE_STATS[robot_type] = DEFAULT_STATS[robot_type].with_overrides(stat_overrides or {})


@dataclass(frozen=True)
class RobotInfo:
    """What a robot can learn about another robot by sensing it."""

    id: int
    team: Team
    type: RobotType
    location: Position
    health: int
