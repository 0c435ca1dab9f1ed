"""Shared fixtures: in-memory match configs and a strict recording controller double."""

from __future__ import annotations

import copy
from typing import Any, Dict, Iterable, List, Optional, Tuple

import pytest

from arena.core.errors import ActionErrorKind, ActionPreconditionFailed
from arena.game.game_engine import GameEngine
from arena.world.geometry import Direction, Position
from arena.world.robot_types import RobotInfo, RobotType, Team, configure_robot_types

BASE_CONFIG: Dict[str, Any] = {
    "game": {"max_rounds": 50, "seed": 7, "shared_array_length": 64},
    "arena": {"width": 20, "height": 20, "walls": [], "lead": [], "gold": []},
    "robot_types": {},
    "teams": {
        "red": {"player": "arena.player.robot_player", "lead": 0, "gold": 0, "robots": [{"type": "ARCHON", "position": [1, 1]}]},
        "blue": {"player": "arena.player.robot_player", "lead": 0, "gold": 0, "robots": [{"type": "ARCHON", "position": [18, 18]}]},
    },
}


def make_config(red_robots: Optional[List[Dict[str, Any]]] = None, blue_robots: Optional[List[Dict[str, Any]]] = None, **game: Any) -> Dict[str, Any]:
    config = copy.deepcopy(BASE_CONFIG)
    if red_robots is not None:
        config["teams"]["red"]["robots"] = red_robots
    if blue_robots is not None:
        config["teams"]["blue"]["robots"] = blue_robots
    config["game"].update(game)
    return config


def robot(robot_type: str, x: int, y: int) -> Dict[str, Any]:
    return {"type": robot_type, "position": [x, y]}


@pytest.fixture(autouse=True)
def default_robot_stats():
    configure_robot_types({})
    yield
    configure_robot_types({})


@pytest.fixture
def base_config() -> Dict[str, Any]:
    return make_config()


@pytest.fixture
def build_engine():
    def _build(config: Dict[str, Any], red: Any = "arena.player.robot_player", blue: Any = "arena.player.robot_player", record: bool = True) -> GameEngine:
        return GameEngine.from_config(config, red, blue, log_name="test", record=record)

    return _build


class StrictController:
    """
    Controller double that records every call and refuses any action whose
    ``can_*`` check was not asked, and answered true, earlier in the turn.
    """

    def __init__(
        self,
        robot_type: RobotType = RobotType.SOLDIER,
        team: Team = Team.RED,
        location: Position = Position(10, 10),
        *,
        robot_id: int = 1,
        round_num: int = 5,
        width: int = 20,
        height: int = 20,
        robots: Iterable[RobotInfo] = (),
        shared: Optional[List[int]] = None,
        blocked: Iterable[Position] = (),
        action_ready: bool = True,
        movement_ready: bool = True,
        writable: bool = True,
        lead: int = 0,
    ) -> None:
        self.robot_type = robot_type
        self.team = team
        self.location = location
        self.robot_id = robot_id
        self.round_num = round_num
        self.width = width
        self.height = height
        self.robots = {info.location: info for info in robots}
        self.shared = list(shared) if shared is not None else [0] * 64
        self.blocked = set(blocked)
        self.action_ready = action_ready
        self.movement_ready = movement_ready
        self.writable = writable
        self.lead = lead
        self.lead_at: Dict[Position, int] = {}

        self.calls: List[Tuple[str, tuple]] = []
        self.indicator = ""
        self.turn_ended = False
        self._approved = set()

    # bookkeeping

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))

    def _answer(self, name: str, ok: bool, *args: Any) -> bool:
        self._record(name, *args)
        if ok:
            self._approved.add((name,) + args)
        return ok

    def _require(self, check: str, action: str, *args: Any) -> None:
        if self.turn_ended:
            raise ActionPreconditionFailed(ActionErrorKind.TURN_ENDED, f"{action} after yield")
        if (check,) + args not in self._approved:
            raise AssertionError(f"{action}{args} attempted without a true {check}")
        self._record(action, *args)

    def actions(self) -> List[Tuple[str, tuple]]:
        names = {"move", "attack", "write_shared_array", "build_robot", "mine_lead", "mine_gold"}
        return [call for call in self.calls if call[0] in names]

    # self

    def get_id(self) -> int:
        return self.robot_id

    def get_team(self) -> Team:
        return self.team

    def get_type(self) -> RobotType:
        return self.robot_type

    def get_location(self) -> Position:
        return self.location

    def get_round_num(self) -> int:
        return self.round_num

    def get_map_width(self) -> int:
        return self.width

    def get_map_height(self) -> int:
        return self.height

    def set_indicator_string(self, text: str) -> None:
        self.indicator = text

    # sensing

    def on_the_map(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def can_sense_location(self, pos: Position) -> bool:
        return self.location.distance_squared_to(pos) <= self.robot_type.vision_radius_squared

    def sense_robot_at_location(self, pos: Position) -> Optional[RobotInfo]:
        self._record("sense_robot_at_location", pos)
        if not self.can_sense_location(pos):
            raise ActionPreconditionFailed(ActionErrorKind.CANT_SENSE_THAT, f"{pos} outside vision")
        return self.robots.get(pos)

    def sense_nearby_robots(self, radius_squared: int = -1, team: Optional[Team] = None) -> List[RobotInfo]:
        self._record("sense_nearby_robots", radius_squared, team)
        vision = self.robot_type.vision_radius_squared
        radius = vision if radius_squared < 0 else min(radius_squared, vision)
        return [
            info
            for info in sorted(self.robots.values(), key=lambda r: r.id)
            if info.location.distance_squared_to(self.location) <= radius and (team is None or info.team is team)
        ]

    # shared array

    def read_shared_array(self, index: int) -> int:
        return self.shared[index]

    def can_write_shared_array(self, index: int, value: int) -> bool:
        return self._answer("can_write_shared_array", self.writable and 0 <= index < len(self.shared) and 0 <= value <= 65535, index, value)

    def write_shared_array(self, index: int, value: int) -> None:
        self._require("can_write_shared_array", "write_shared_array", index, value)
        self.shared[index] = value

    # movement

    def can_move(self, direction: Direction) -> bool:
        destination = self.location.add(direction)
        ok = (
            not self.turn_ended
            and self.movement_ready
            and direction is not Direction.CENTER
            and not self.robot_type.is_building()
            and self.on_the_map(destination)
            and destination not in self.blocked
            and destination not in self.robots
        )
        return self._answer("can_move", ok, direction)

    def move(self, direction: Direction) -> None:
        self._require("can_move", "move", direction)
        self.location = self.location.add(direction)
        self.movement_ready = False
        self._approved = {a for a in self._approved if a[0] != "can_move"}

    # combat

    def can_attack(self, pos: Position) -> bool:
        target = self.robots.get(pos)
        ok = (
            not self.turn_ended
            and self.action_ready
            and self.robot_type.can_attack_units()
            and self.location.distance_squared_to(pos) <= self.robot_type.action_radius_squared
            and target is not None
            and target.team is not self.team
        )
        return self._answer("can_attack", ok, pos)

    def attack(self, pos: Position) -> None:
        self._require("can_attack", "attack", pos)
        self.action_ready = False
        self._approved = {a for a in self._approved if a[0] != "can_attack"}

    # building and mining

    def can_build_robot(self, robot_type: RobotType, direction: Direction) -> bool:
        destination = self.location.add(direction)
        ok = (
            not self.turn_ended
            and self.action_ready
            and self.robot_type.can_build(robot_type)
            and self.lead >= robot_type.stats.lead_cost
            and self.on_the_map(destination)
            and destination not in self.robots
        )
        return self._answer("can_build_robot", ok, robot_type, direction)

    def build_robot(self, robot_type: RobotType, direction: Direction) -> None:
        self._require("can_build_robot", "build_robot", robot_type, direction)
        self.lead -= robot_type.stats.lead_cost
        self.action_ready = False
        self._approved = {a for a in self._approved if a[0] != "can_build_robot"}

    def can_mine_lead(self, pos: Position) -> bool:
        ok = (
            not self.turn_ended
            and self.action_ready
            and self.robot_type is RobotType.MINER
            and self.location.distance_squared_to(pos) <= self.robot_type.action_radius_squared
            and self.lead_at.get(pos, 0) > 0
        )
        return self._answer("can_mine_lead", ok, pos)

    def mine_lead(self, pos: Position) -> None:
        self._require("can_mine_lead", "mine_lead", pos)
        self.lead_at[pos] -= 1
        self.lead += 1
        self._approved.discard(("can_mine_lead", pos))

    def can_mine_gold(self, pos: Position) -> bool:
        return self._answer("can_mine_gold", False, pos)

    def mine_gold(self, pos: Position) -> None:
        self._require("can_mine_gold", "mine_gold", pos)

    # turn

    def yield_turn(self) -> None:
        self._record("yield_turn")
        self.turn_ended = True


def hostile(robot_id: int, robot_type: RobotType, x: int, y: int, team: Team = Team.BLUE) -> RobotInfo:
    return RobotInfo(id=robot_id, team=team, type=robot_type, location=Position(x, y), health=robot_type.health)


@pytest.fixture
def make_controller():
    return StrictController
