"""
Player for every robot on the team.

``map_strategy`` is the entry point the game engine looks up on a team
module. It returns one RobotPlayer per robot; the engine calls it once per
turn with that robot's controller.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
from typeguard import typechecked

from arena.core.console import *
from arena.core.errors import ActionPreconditionFailed, ArenaError, UnexpectedFault
from arena.player.context import DEFAULT_SEED, AgentContext
from arena.player.register import SharedTargetRegister
from arena.player.roles import dispatch


@dataclass(frozen=True)
class TurnOutcome:
    turn: int
    report: Optional[Any] = None
    fault: Optional[ArenaError] = None


@typechecked
class RobotPlayer:
    """Runs one robot's turns and contains every fault inside the turn."""

    def __init__(self, ctx: AgentContext) -> None:
        self.ctx = ctx
        self.fault_count = 0

    def __call__(self, rc: Any) -> TurnOutcome:
        return self.take_turn(rc)

    def take_turn(self, rc: Any) -> TurnOutcome:
        """
        Run one turn and always yield.

        A fault is logged and returned, never raised: a robot that fails to
        yield is treated by the engine as terminated.
        """
        self.ctx.turn_count += 1
        register = SharedTargetRegister(rc)
        report = None
        fault: Optional[ArenaError] = None
        try:
            # Robots alive in round 1 set up the register; identical writes, so order does not matter
            if self.ctx.is_first_turn and rc.get_round_num() == 1:
                register.initialize()
            report = dispatch(rc, self.ctx, register)
        except ActionPreconditionFailed as e:
            fault = e
            error(f"{rc.get_type().value} Exception: {e}")
            print_exception()
        except Exception as e:
            fault = UnexpectedFault(rc.get_type().value, e)
            error(f"{rc.get_type().value} Exception: {fault}")
            print_exception()
        finally:
            rc.yield_turn()

        if fault is not None:
            self.fault_count += 1
            self.ctx.last_fault = str(fault)
        return TurnOutcome(turn=self.ctx.turn_count, report=report, fault=fault)


def create_player(robot_id: int, seed: int = DEFAULT_SEED) -> RobotPlayer:
    return RobotPlayer(AgentContext.create(robot_id, seed))


def map_strategy(robot_configs: Dict[str, Dict[str, Any]]) -> Dict[str, RobotPlayer]:
    """
    Map a player to every robot in the config.

    Args:
        robot_configs: ``{robot_name: {"id": int, "seed": int, ...}}``.
    """
    return {name: create_player(int(cfg["id"]), int(cfg.get("seed", DEFAULT_SEED))) for name, cfg in robot_configs.items()}
