from typing import Any, Dict, List, Optional
from typeguard import typechecked

from arena.agent.robot import Robot
from arena.core.console import *
from arena.core.errors import ConfigError
from arena.game.shared_array import SHARED_ARRAY_LENGTH, TeamSharedArray
from arena.world.arena_map import ArenaMap
from arena.world.geometry import Position
from arena.world.robot_types import RobotType, Team

PLAYING_TEAMS = (Team.RED, Team.BLUE)


@typechecked
class AgentEngine:
    """Centralized robot registry: ids, positions, teams, resources and shared arrays."""

    def __init__(self, arena: ArenaMap, shared_array_length: int = SHARED_ARRAY_LENGTH):
        """
        Initialize AgentEngine for a red-vs-blue match.

        Args:
            arena: The map robots live on.
            shared_array_length: Number of cells in each team's shared array.
        """
        debug("Initializing AgentEngine")
        self.arena = arena
        self.robots: Dict[int, Robot] = {}
        self.by_location: Dict[Position, Robot] = {}
        self.destroyed: List[Robot] = []
        self._next_id = 1

        # Team-level resources and communication, one per team
        self.lead: Dict[Team, int] = {team: 0 for team in PLAYING_TEAMS}
        self.gold: Dict[Team, int] = {team: 0 for team in PLAYING_TEAMS}
        self.shared_arrays: Dict[Team, TeamSharedArray] = {team: TeamSharedArray(shared_array_length) for team in PLAYING_TEAMS}

    def create_robots_from_config(self, teams_config: Dict[str, Any]) -> List[Robot]:
        """
        Create the starting robots of every team.

        Args:
            teams_config: The ``teams`` config section,
                ``{team: {lead, gold, robots: [{type, position}]}}``.

        Returns:
            The created robots, in turn order.
        """
        created = []
        for team in PLAYING_TEAMS:
            team_config = teams_config.get(team.value)
            if not team_config:
                warning(f"No configuration found for team '{team.value}'")
                continue
            self.lead[team] = int(team_config.get("lead", 0))
            self.gold[team] = int(team_config.get("gold", 0))
            for entry in team_config.get("robots") or []:
                robot_type = RobotType(str(entry["type"]).upper())
                x, y = entry["position"]
                created.append(self.spawn(team, robot_type, Position(int(x), int(y))))
            info(f"Created {len(self.get_robots_by_team(team))} robots for team '{team.value}'")
        success(f"Total robots created: {len(self.robots)}")
        return created

    def spawn(self, team: Team, robot_type: RobotType, location: Position, round_num: int = 0) -> Robot:
        if not self.arena.is_passable(location):
            raise ConfigError(f"Cannot place {robot_type.value} at {location}: off the map or a wall", "teams")
        if location in self.by_location:
            raise ConfigError(f"Cannot place {robot_type.value} at {location}: occupied by {self.by_location[location].name}", "teams")
        robot = Robot(self._next_id, team, robot_type, location, spawn_round=round_num)
        self._next_id += 1
        self.robots[robot.id] = robot
        self.by_location[location] = robot
        debug(f"Spawned {robot}")
        return robot

    def is_occupied(self, pos: Position) -> bool:
        return pos in self.by_location

    def robot_at(self, pos: Position) -> Optional[Robot]:
        return self.by_location.get(pos)

    def get_robot(self, robot_id: int) -> Optional[Robot]:
        return self.robots.get(robot_id)

    def robots_in_turn_order(self) -> List[Robot]:
        """Live robots sorted by id; robots built this round wait for the next one."""
        return [self.robots[rid] for rid in sorted(self.robots)]

    def get_robots_by_team(self, team: Team) -> List[Robot]:
        return [r for r in self.robots_in_turn_order() if r.team is team]

    def count(self, team: Team, robot_type: Optional[RobotType] = None) -> int:
        return sum(1 for r in self.robots.values() if r.team is team and (robot_type is None or r.type is robot_type))

    def robots_within(self, center: Position, radius_squared: int) -> List[Robot]:
        """Live robots within ``radius_squared`` of ``center``, in turn order."""
        return [r for r in self.robots_in_turn_order() if r.location.distance_squared_to(center) <= radius_squared]

    def move_robot(self, robot: Robot, destination: Position) -> None:
        """Move without validation - the controller checks legality first."""
        del self.by_location[robot.location]
        robot.update_position(destination)
        self.by_location[destination] = robot

    def kill_robot(self, robot: Robot) -> bool:
        """
        Remove a destroyed robot from the arena.

        Returns:
            True if the robot was removed, False if it was already gone.
        """
        if robot.id not in self.robots:
            debug(f"Robot '{robot.name}' is already gone")
            return False
        del self.robots[robot.id]
        if self.by_location.get(robot.location) is robot:
            del self.by_location[robot.location]
        robot.die()
        self.destroyed.append(robot)
        info(f"Robot '{robot.name}' ({robot.type.value}) destroyed at {robot.location}")
        return True

    def shared_array(self, team: Team) -> TeamSharedArray:
        return self.shared_arrays[team]

    def get_agent_status(self) -> Dict[str, Any]:
        return {
            team.value: {
                "robots": self.count(team),
                "archons": self.count(team, RobotType.ARCHON),
                "lead": self.lead[team],
                "gold": self.gold[team],
            }
            for team in PLAYING_TEAMS
        }
