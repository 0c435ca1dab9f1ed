from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union
from typeguard import typechecked
import importlib
import os

from rich.table import Table

from arena.agent.robot import Robot
from arena.core.console import *
from arena.core.errors import ArenaError
from arena.core.logger import MatchLogger
from arena.game.agent_engine import PLAYING_TEAMS, AgentEngine
from arena.game.interaction_engine import InteractionEngine, RoundSummary
from arena.game.robot_controller import RobotController
from arena.world.arena_map import ArenaMap
from arena.world.robot_types import RobotType, Team, configure_robot_types

DEFAULT_PLAYER = "arena.player.robot_player"
LOGGED_SHARED_CELLS = 3


class MatchResult(NamedTuple):
    winner: Optional[str]
    rounds: int
    reason: str
    destroyed: Dict[str, int]
    exploded: int
    faults: int


@typechecked
class GameEngine:
    """
    Main game engine that coordinates the round loop.

    Every round, each live robot takes one turn in id order through a fresh
    RobotController, then the interaction engine resolves the round end.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        arena: ArenaMap,
        agent_engine: AgentEngine,
        interaction_engine: InteractionEngine,
        logger: Optional[MatchLogger] = None,
    ):
        self.config = config
        self.arena = arena
        self.agent_engine = agent_engine
        self.interaction_engine = interaction_engine
        self.logger = logger

        # Game state
        self.round_num = 0
        self.is_running = False
        self.game_terminated = False
        self.termination_reason = ""

        # Game configuration
        self.game_config = config.get("game", {}) or {}
        self.max_rounds = int(self.game_config.get("max_rounds", 2000))
        self.seed = int(self.game_config.get("seed", 0))
        self.logged_shared_cells = int(self.game_config.get("logged_shared_cells", LOGGED_SHARED_CELLS))

        # Tallies
        self.destroyed: Dict[Team, int] = {team: 0 for team in PLAYING_TEAMS}
        self.exploded: List[str] = []
        self.fault_count = 0

        # Player modules per team; strategies are mapped lazily for robots built mid-match
        self.team_modules: Dict[Team, Any] = {}

    # ---------- Builder APIs ----------

    @classmethod
    def from_runtime(
        cls,
        config: Dict[str, Any],
        arena: ArenaMap,
        agent_engine: AgentEngine,
        interaction_engine: InteractionEngine,
        logger: Optional[MatchLogger],
    ) -> "GameEngine":
        """Construct directly from prebuilt subsystems."""
        return cls(config, arena, agent_engine, interaction_engine, logger)

    @staticmethod
    def load_strategies(
        red_strategy: Union[str, Any, None],
        blue_strategy: Union[str, Any, None],
    ) -> Tuple[Optional[Any], Optional[Any]]:
        """
        Accept module objects or import strings. Returns (red_module, blue_module).
        """

        def _ensure_module(maybe_mod: Union[str, Any, None]) -> Optional[Any]:
            if maybe_mod is None:
                return None
            if isinstance(maybe_mod, str):
                return importlib.import_module(maybe_mod)
            return maybe_mod

        return _ensure_module(red_strategy), _ensure_module(blue_strategy)

    @staticmethod
    def build_runtime(
        config: Dict[str, Any],
        *,
        log_name: str = "match",
        log_path: str = "",
        record: bool = True,
    ) -> Tuple[ArenaMap, AgentEngine, InteractionEngine, Optional[MatchLogger]]:
        """
        Build the full runtime (arena, agents, interactions, logger) from a validated config.
        """
        from arena.config.config_utils import load_config_metadata

        # 1) Robot stats, before any robot exists
        configure_robot_types(config.get("robot_types") or {})

        # 2) Arena
        arena = ArenaMap.from_config(config["arena"])

        # 3) Agents
        game = config.get("game", {}) or {}
        agent_engine = AgentEngine(arena, int(game.get("shared_array_length", 64)))
        agent_engine.create_robots_from_config(config["teams"])

        # 4) Interactions
        interaction_engine = InteractionEngine(agent_engine, config)

        # 5) Logger
        logger = MatchLogger(log_name, metadata=load_config_metadata(config), path=log_path) if record else None

        return arena, agent_engine, interaction_engine, logger

    @classmethod
    def from_config(
        cls,
        config: Dict[str, Any],
        red_strategy: Union[str, Any, None] = None,
        blue_strategy: Union[str, Any, None] = None,
        *,
        log_name: str = "match",
        log_path: str = "",
        record: bool = True,
    ) -> "GameEngine":
        """
        Build an engine from an in-memory config and assign player modules.

        Teams fall back to the ``player`` key of their config section when no
        strategy is given here.
        """
        arena, agent_engine, interaction_engine, logger = cls.build_runtime(config, log_name=log_name, log_path=log_path, record=record)
        engine = cls.from_runtime(config, arena, agent_engine, interaction_engine, logger)

        teams = config.get("teams", {}) or {}
        red_strategy = red_strategy if red_strategy is not None else (teams.get("red") or {}).get("player", DEFAULT_PLAYER)
        blue_strategy = blue_strategy if blue_strategy is not None else (teams.get("blue") or {}).get("player", DEFAULT_PLAYER)
        red_mod, blue_mod = cls.load_strategies(red_strategy, blue_strategy)
        engine.assign_strategies(red_mod, blue_mod)
        return engine

    @classmethod
    def launch_from_files(
        cls,
        *,
        config_main: str = "config/skirmish.yml",
        red_strategy: Union[str, Any, None] = None,
        blue_strategy: Union[str, Any, None] = None,
        log_name: str = "match",
        log_path: str = "logs",
        set_level: Optional[LogLevel] = None,
        max_rounds: Optional[int] = None,
        record: bool = True,
    ) -> "GameEngine":
        """
        Load a match file over the packaged defaults, run it, print the summary
        and write the match log.
        """
        from arena.config.config_loader import ConfigLoader

        loader = ConfigLoader(config_main).apply_defaults()
        config = loader.validated()

        if set_level is None:
            set_level = LogLevel[str(loader.get("game", "log_level", default="WARNING")).upper()]
        set_log_level(set_level)

        if max_rounds is not None:
            config["game"]["max_rounds"] = max_rounds

        engine = cls.from_config(config, red_strategy, blue_strategy, log_name=log_name, log_path=log_path, record=record)

        engine.run_game()
        console.print(engine.summary_table())
        success(str(engine))

        if engine.logger:
            try:
                fname = engine.logger.write_to_file(format="json")
                success(f"Log written to: {os.path.join(engine.logger.path, fname)}")
            except (OSError, ArenaError) as e:
                warning(f"Failed to write log file: {e}")
        return engine

    # ---------- Strategies ----------

    def assign_strategies(self, red_strategy_module: Any, blue_strategy_module: Any) -> None:
        """Remember each team's player module and map a strategy to every robot alive now."""
        for team, module in zip(PLAYING_TEAMS, (red_strategy_module, blue_strategy_module)):
            if module is None:
                continue
            if not hasattr(module, "map_strategy"):
                raise AttributeError(f"Player module '{getattr(module, '__name__', module)}' has no map_strategy")
            self.team_modules[team] = module

        assigned = 0
        for team in PLAYING_TEAMS:
            assigned += self._map_strategies(self.agent_engine.get_robots_by_team(team))
        success(f"Assigned strategies to {assigned} robots")

    def _robot_config(self, robot: Robot) -> Dict[str, Any]:
        return {"seed": self.seed, **robot.to_dict()}

    def _map_strategies(self, robots: List[Robot]) -> int:
        pending = [r for r in robots if r.strategy is None and r.team in self.team_modules]
        if not pending:
            return 0
        module = self.team_modules[pending[0].team]
        strategies = module.map_strategy({r.name: self._robot_config(r) for r in pending})
        for robot in pending:
            robot.strategy = strategies.get(robot.name)
        return sum(1 for r in pending if r.strategy is not None)

    # ---------- Turns ----------

    def _explode(self, robot: Robot, reason: str) -> None:
        error(f"Robot {robot.name} ({robot.type.value}) exploded: {reason}")
        if self.agent_engine.kill_robot(robot):
            self.destroyed[robot.team] += 1
            self.exploded.append(robot.name)

    def execute_robot_turn(self, robot: Robot) -> Optional[str]:
        """
        Give ``robot`` one turn.

        Returns:
            The fault the robot reported for this turn, if any.
        """
        if robot.strategy is None:
            self._map_strategies([robot])
        rc = RobotController(robot, self.agent_engine, self.interaction_engine, self.round_num)

        if robot.strategy is None:
            # No player for this team: the robot idles
            rc.yield_turn()
            return None

        try:
            outcome = robot.strategy(rc)
        except Exception as e:
            print_exception()
            self._explode(robot, f"uncaught {type(e).__name__}: {e}")
            return f"{robot.type.value} terminated: {e}"

        if not rc.turn_ended:
            self._explode(robot, "returned without yielding")
            return f"{robot.type.value} terminated: did not yield"

        fault = getattr(outcome, "fault", None)
        return str(fault) if fault is not None else None

    def execute_robot_turns(self) -> Dict[str, str]:
        """Every robot alive at the start of the round acts once, in id order."""
        faults: Dict[str, str] = {}
        for robot in self.agent_engine.robots_in_turn_order():
            # Destroyed earlier this round by a robot with a lower id
            if not robot.is_alive():
                continue
            fault = self.execute_robot_turn(robot)
            if fault is not None:
                faults[robot.name] = fault
        self.fault_count += len(faults)
        return faults

    # ---------- Termination ----------

    def check_termination(self) -> bool:
        for team in PLAYING_TEAMS:
            if self.agent_engine.count(team, RobotType.ARCHON) == 0:
                self.termination_reason = f"{team.value} has no archons left"
                info(f"Game terminated: {self.termination_reason}")
                return True

        if self.round_num >= self.max_rounds:
            self.termination_reason = f"maximum rounds ({self.max_rounds}) reached"
            info(f"Game terminated: {self.termination_reason}")
            return True

        return False

    def determine_winner(self) -> Optional[Team]:
        """
        Team with archons left when the other has none; at a timeout, more
        archons, then more lead plus gold. Otherwise a draw.
        """
        red_archons = self.agent_engine.count(Team.RED, RobotType.ARCHON)
        blue_archons = self.agent_engine.count(Team.BLUE, RobotType.ARCHON)
        if red_archons != blue_archons:
            return Team.RED if red_archons > blue_archons else Team.BLUE

        red_wealth = self.agent_engine.lead[Team.RED] + self.agent_engine.gold[Team.RED]
        blue_wealth = self.agent_engine.lead[Team.BLUE] + self.agent_engine.gold[Team.BLUE]
        if red_wealth != blue_wealth:
            return Team.RED if red_wealth > blue_wealth else Team.BLUE
        return None

    # ---------- Logging ----------

    def log_game_state(self, summary: RoundSummary, faults: Dict[str, str]) -> None:
        if not self.logger:
            return

        robots = {
            robot.name: {"type": robot.type.value, "location": [robot.location.x, robot.location.y], "health": robot.health}
            for robot in self.agent_engine.robots_in_turn_order()
        }
        shared_arrays = {team.value: self.agent_engine.shared_array(team).snapshot(self.logged_shared_cells) for team in PLAYING_TEAMS}

        log_data = {
            "robots": robots,
            "shared_arrays": shared_arrays,
            "resources": {team.value: {"lead": self.agent_engine.lead[team], "gold": self.agent_engine.gold[team]} for team in PLAYING_TEAMS},
            "red_destroyed": summary.red_killed,
            "blue_destroyed": summary.blue_killed,
            "attack_details": [list(detail) for detail in summary.attack_details],
            "faults": faults,
        }
        self.logger.log_round(log_data, self.round_num)

    # ---------- Loop ----------

    def run_single_step(self) -> bool:
        """
        Play one round.

        Returns:
            False once the match is over.
        """
        faults = self.execute_robot_turns()
        summary = self.interaction_engine.step(self.round_num)
        self.destroyed[Team.RED] += summary.red_killed
        self.destroyed[Team.BLUE] += summary.blue_killed

        self.log_game_state(summary, faults)
        return not self.check_termination()

    def run_game(self) -> MatchResult:
        self.is_running = True
        self.game_terminated = False
        info(f"Starting match with max rounds: {self.max_rounds}")
        try:
            while self.is_running and not self.game_terminated:
                self.round_num += 1
                with timed_block(f"round {self.round_num}", LogLevel.DEBUG):
                    if not self.run_single_step():
                        break
            self.game_terminated = True
            success(f"Match completed at round {self.round_num}")
        except KeyboardInterrupt:
            warning("Match interrupted by user")
            self.termination_reason = "interrupted"
        finally:
            self.is_running = False

        result = self.result()
        if self.logger:
            self.logger.finalize(
                self.round_num,
                winner=result.winner,
                reason=result.reason,
                destroyed=result.destroyed,
                exploded=list(self.exploded),
                faults=result.faults,
            )
        return result

    def result(self) -> MatchResult:
        winner = self.determine_winner()
        return MatchResult(
            winner=winner.value if winner is not None else None,
            rounds=self.round_num,
            reason=self.termination_reason,
            destroyed={team.value: count for team, count in self.destroyed.items()},
            exploded=len(self.exploded),
            faults=self.fault_count,
        )

    def get_game_state(self) -> Dict[str, Any]:
        return {
            "round": self.round_num,
            "running": self.is_running,
            "terminated": self.game_terminated,
            "destroyed": {team.value: count for team, count in self.destroyed.items()},
            "exploded": list(self.exploded),
            "faults": self.fault_count,
            "teams": self.agent_engine.get_agent_status(),
        }

    def summary_table(self) -> Table:
        result = self.result()
        table = Table(title=f"Match after {result.rounds} rounds: {result.winner or 'draw'}", caption=result.reason or None)
        table.add_column("Team", style="bold")
        table.add_column("Robots", justify="right")
        table.add_column("Archons", justify="right")
        table.add_column("Lead", justify="right")
        table.add_column("Gold", justify="right")
        table.add_column("Lost", justify="right")
        for team, status in self.agent_engine.get_agent_status().items():
            table.add_row(team, str(status["robots"]), str(status["archons"]), str(status["lead"]), str(status["gold"]), str(result.destroyed[team]))
        return table

    def __str__(self) -> str:
        state = "running" if self.is_running else "stopped"
        winner = self.determine_winner()
        return f"GameEngine(round={self.round_num}, state={state}, winner={winner.value if winner else 'draw'}, faults={self.fault_count})"
