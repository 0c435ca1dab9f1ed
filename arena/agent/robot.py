from typeguard import typechecked
from typing import Any, Callable, Dict, Optional

from arena.world.geometry import Position
from arena.world.robot_types import COOLDOWN_LIMIT, RobotInfo, RobotType, Team


@typechecked
class Robot:
    """Engine-side state of one robot: identity, location, health and cooldowns."""

    def __init__(self, robot_id: int, team: Team, robot_type: RobotType, location: Position, health: Optional[int] = None, spawn_round: int = 0) -> None:
        """
        Initialize a robot.

        Args:
            robot_id (int): Unique id; robots take their turns in id order.
            team (Team): The team the robot belongs to.
            robot_type (RobotType): Role of the robot.
            location (Position): Starting cell.
            health (Optional[int]): Starting health, defaults to the type's maximum.
            spawn_round (int): Round in which the robot was created.
        """
        self.id = robot_id
        self.team = team
        self.type = robot_type
        self.location = location
        self.health = robot_type.health if health is None else health
        self.spawn_round = spawn_round

        self.action_cooldown = 0
        self.movement_cooldown = 0
        self.alive = True
        self.death_position: Optional[Position] = None
        self.indicator = ""

        # Per-turn callable assigned by the game engine
        self.strategy: Optional[Callable[[Any], Any]] = None

    @property
    def name(self) -> str:
        return f"{self.team.value}_{self.id}"

    def info(self) -> RobotInfo:
        """Snapshot of what another robot can sense about this one."""
        return RobotInfo(id=self.id, team=self.team, type=self.type, location=self.location, health=self.health)

    # Cooldowns
    def is_action_ready(self) -> bool:
        return self.action_cooldown < COOLDOWN_LIMIT

    def is_movement_ready(self) -> bool:
        return self.movement_cooldown < COOLDOWN_LIMIT

    def add_action_cooldown(self, amount: Optional[int] = None) -> None:
        self.action_cooldown += self.type.stats.action_cooldown if amount is None else amount

    def add_movement_cooldown(self, amount: Optional[int] = None) -> None:
        self.movement_cooldown += self.type.stats.movement_cooldown if amount is None else amount

    def decay_cooldowns(self, amount: int) -> None:
        self.action_cooldown = max(0, self.action_cooldown - amount)
        self.movement_cooldown = max(0, self.movement_cooldown - amount)

    # Health
    def take_damage(self, amount: int) -> bool:
        """
        Apply damage to the robot.

        Returns:
            bool: True if the damage destroyed the robot.
        """
        self.health -= amount
        return self.health <= 0

    def update_position(self, new_position: Position) -> None:
        self.location = new_position

    def die(self) -> None:
        """Mark the robot as destroyed and record where it fell."""
        self.alive = False
        self.death_position = self.location

    def is_alive(self) -> bool:
        return self.alive

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "team": self.team.value,
            "type": self.type.value,
            "location": [self.location.x, self.location.y],
            "health": self.health,
            "action_cooldown": self.action_cooldown,
            "movement_cooldown": self.movement_cooldown,
            "alive": self.alive,
        }

    def __str__(self) -> str:
        alive_status = "alive" if self.alive else f"dead@{self.death_position}"
        return f"Robot(name={self.name}, type={self.type.value}, pos={self.location}, hp={self.health}, {alive_status})"
