from typing import List, Optional
from typeguard import typechecked

from arena.agent.robot import Robot
from arena.core.errors import ActionErrorKind, ActionPreconditionFailed
from arena.game.agent_engine import AgentEngine
from arena.game.interaction_engine import InteractionEngine
from arena.world.geometry import Direction, Position
from arena.world.robot_types import RobotInfo, RobotType, Team


@typechecked
class RobotController:
    """
    The only window a player has onto the arena during its turn.

    Sensing is bounded by the robot's vision radius, actions by cooldowns and
    ranges. Every ``can_*`` predicate mirrors the checks its action performs,
    so a player that checks first never sees ActionPreconditionFailed.
    """

    def __init__(self, robot: Robot, agent_engine: AgentEngine, interaction_engine: InteractionEngine, round_num: int) -> None:
        self._robot = robot
        self._engine = agent_engine
        self._interactions = interaction_engine
        self._arena = agent_engine.arena
        self._round_num = round_num
        self.turn_ended = False

    # ------------------------------ Self -------------------------------

    def get_id(self) -> int:
        return self._robot.id

    def get_team(self) -> Team:
        return self._robot.team

    def get_type(self) -> RobotType:
        return self._robot.type

    def get_location(self) -> Position:
        return self._robot.location

    def get_health(self) -> int:
        return self._robot.health

    def get_round_num(self) -> int:
        return self._round_num

    def get_map_width(self) -> int:
        return self._arena.width

    def get_map_height(self) -> int:
        return self._arena.height

    def get_team_lead_amount(self, team: Team) -> int:
        return self._engine.lead.get(team, 0)

    def get_team_gold_amount(self, team: Team) -> int:
        return self._engine.gold.get(team, 0)

    def is_action_ready(self) -> bool:
        return self._robot.is_action_ready()

    def is_movement_ready(self) -> bool:
        return self._robot.is_movement_ready()

    def set_indicator_string(self, text: str) -> None:
        self._robot.indicator = text

    # ------------------------------ Sensing -------------------------------

    def on_the_map(self, pos: Position) -> bool:
        return self._arena.on_the_map(pos)

    def can_sense_location(self, pos: Position) -> bool:
        return self._robot.location.distance_squared_to(pos) <= self._robot.type.vision_radius_squared

    def sense_robot_at_location(self, pos: Position) -> Optional[RobotInfo]:
        """
        Return the robot standing on ``pos``, or None if the cell is empty.

        Raises:
            ActionPreconditionFailed: If ``pos`` is outside vision.
        """
        if not self.can_sense_location(pos):
            raise ActionPreconditionFailed(ActionErrorKind.CANT_SENSE_THAT, f"{pos} is outside vision of {self._robot.name}")
        other = self._engine.robot_at(pos)
        return other.info() if other is not None else None

    def sense_nearby_robots(self, radius_squared: int = -1, team: Optional[Team] = None) -> List[RobotInfo]:
        """
        All robots within ``radius_squared`` (capped at vision), excluding self.

        Args:
            radius_squared: Search radius; -1 means full vision.
            team: Only report robots of this team when given.
        """
        vision = self._robot.type.vision_radius_squared
        radius = vision if radius_squared < 0 else min(radius_squared, vision)
        return [
            other.info()
            for other in self._engine.robots_within(self._robot.location, radius)
            if other is not self._robot and (team is None or other.team is team)
        ]

    # ------------------------------ Shared array -------------------------------

    def read_shared_array(self, index: int) -> int:
        self._assert_turn_active()
        return self._engine.shared_array(self._robot.team).read(index)

    def can_write_shared_array(self, index: int, value: int) -> bool:
        return not self.turn_ended and self._engine.shared_array(self._robot.team).can_write(index, value)

    def write_shared_array(self, index: int, value: int) -> None:
        self._assert_turn_active()
        self._engine.shared_array(self._robot.team).write(index, value)

    # ------------------------------ Movement -------------------------------

    def can_move(self, direction: Direction) -> bool:
        if self.turn_ended or direction is Direction.CENTER or self._robot.type.is_building():
            return False
        if not self._robot.is_movement_ready():
            return False
        destination = self._robot.location.add(direction)
        return self._arena.can_step(self._robot.location, destination) and not self._engine.is_occupied(destination)

    def move(self, direction: Direction) -> None:
        self._assert_turn_active()
        if not self.can_move(direction):
            raise ActionPreconditionFailed(ActionErrorKind.CANT_MOVE_THERE, f"{self._robot.name} cannot move {direction.name} from {self._robot.location}")
        self._engine.move_robot(self._robot, self._robot.location.add(direction))
        self._robot.add_movement_cooldown()

    # ------------------------------ Combat -------------------------------

    def can_attack(self, pos: Position) -> bool:
        if self.turn_ended or not self._robot.type.can_attack_units() or not self._robot.is_action_ready():
            return False
        if self._robot.location.distance_squared_to(pos) > self._robot.type.action_radius_squared:
            return False
        target = self._engine.robot_at(pos)
        return target is not None and target.team is not self._robot.team

    def attack(self, pos: Position) -> None:
        self._assert_turn_active()
        if not self.can_attack(pos):
            raise ActionPreconditionFailed(ActionErrorKind.CANT_DO_THAT, f"{self._robot.name} cannot attack {pos}")
        self._interactions.resolve_attack(self._robot, self._engine.robot_at(pos))
        self._robot.add_action_cooldown()

    # ------------------------------ Building -------------------------------

    def can_build_robot(self, robot_type: RobotType, direction: Direction) -> bool:
        if self.turn_ended or not self._robot.type.can_build(robot_type) or not self._robot.is_action_ready():
            return False
        stats = robot_type.stats
        if self._engine.lead[self._robot.team] < stats.lead_cost or self._engine.gold[self._robot.team] < stats.gold_cost:
            return False
        destination = self._robot.location.add(direction)
        return direction is not Direction.CENTER and self._arena.is_passable(destination) and not self._engine.is_occupied(destination)

    def build_robot(self, robot_type: RobotType, direction: Direction) -> None:
        self._assert_turn_active()
        if not self.can_build_robot(robot_type, direction):
            raise ActionPreconditionFailed(ActionErrorKind.CANT_DO_THAT, f"{self._robot.name} cannot build {robot_type.value} to the {direction.name}")
        team = self._robot.team
        self._engine.lead[team] -= robot_type.stats.lead_cost
        self._engine.gold[team] -= robot_type.stats.gold_cost
        self._engine.spawn(team, robot_type, self._robot.location.add(direction), self._round_num)
        self._robot.add_action_cooldown()

    # ------------------------------ Mining -------------------------------

    def _can_mine(self, pos: Position) -> bool:
        return (
            not self.turn_ended
            and self._robot.type is RobotType.MINER
            and self._robot.is_action_ready()
            and self._robot.location.distance_squared_to(pos) <= self._robot.type.action_radius_squared
        )

    def can_mine_lead(self, pos: Position) -> bool:
        return self._can_mine(pos) and self._arena.lead_at(pos) > 0

    def mine_lead(self, pos: Position) -> None:
        self._assert_turn_active()
        if not self.can_mine_lead(pos):
            raise ActionPreconditionFailed(ActionErrorKind.CANT_DO_THAT, f"{self._robot.name} cannot mine lead at {pos}")
        self._engine.lead[self._robot.team] += self._arena.take_lead(pos)
        self._robot.add_action_cooldown()

    def can_mine_gold(self, pos: Position) -> bool:
        return self._can_mine(pos) and self._arena.gold_at(pos) > 0

    def mine_gold(self, pos: Position) -> None:
        self._assert_turn_active()
        if not self.can_mine_gold(pos):
            raise ActionPreconditionFailed(ActionErrorKind.CANT_DO_THAT, f"{self._robot.name} cannot mine gold at {pos}")
        self._engine.gold[self._robot.team] += self._arena.take_gold(pos)
        self._robot.add_action_cooldown()

    # ------------------------------ Turn -------------------------------

    def yield_turn(self) -> None:
        """Hand control back to the scheduler. Every later action is refused."""
        self.turn_ended = True

    def _assert_turn_active(self) -> None:
        if self.turn_ended:
            raise ActionPreconditionFailed(ActionErrorKind.TURN_ENDED, f"{self._robot.name} already yielded this turn")
