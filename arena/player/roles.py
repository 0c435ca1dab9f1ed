from typing import Any, Callable, Dict, Optional

from arena.player.context import AgentContext
from arena.player.engagement import EngagementReport, run_engagement
from arena.player.patrol import draw_heading
from arena.player.register import SharedTargetRegister
from arena.world.robot_types import RobotType


def run_archon(rc: Any, ctx: AgentContext, register: SharedTargetRegister) -> None:
    """Build a miner or a soldier, chosen by coin flip, in a random direction."""
    direction = draw_heading(ctx.rng)
    if ctx.rng.random() < 0.5:
        rc.set_indicator_string("Trying to build a miner")
        if rc.can_build_robot(RobotType.MINER, direction):
            rc.build_robot(RobotType.MINER, direction)
    else:
        rc.set_indicator_string("Trying to build a soldier")
        if rc.can_build_robot(RobotType.SOLDIER, direction):
            rc.build_robot(RobotType.SOLDIER, direction)


def run_miner(rc: Any, ctx: AgentContext, register: SharedTargetRegister) -> None:
    """Mine every cell within one step, gold first, then wander one random step."""
    me = rc.get_location()
    for dx in (-1, 0, 1):
        for dy in (-1, 0, 1):
            mine_location = me.translate(dx, dy)
            # Each mine adds action cooldown, so these loops stop within a turn
            while rc.can_mine_gold(mine_location):
                rc.mine_gold(mine_location)
            while rc.can_mine_lead(mine_location):
                rc.mine_lead(mine_location)

    direction = draw_heading(ctx.rng)
    if rc.can_move(direction):
        rc.move(direction)


def run_soldier(rc: Any, ctx: AgentContext, register: SharedTargetRegister) -> EngagementReport:
    return run_engagement(rc, register, ctx)


def run_idle(rc: Any, ctx: AgentContext, register: SharedTargetRegister) -> None:
    pass


ROLE_HANDLERS: Dict[RobotType, Callable[[Any, AgentContext, SharedTargetRegister], Optional[Any]]] = {
    RobotType.ARCHON: run_archon,
    RobotType.MINER: run_miner,
    RobotType.SOLDIER: run_soldier,
    RobotType.LABORATORY: run_idle,
    RobotType.WATCHTOWER: run_idle,
    RobotType.BUILDER: run_idle,
    RobotType.SAGE: run_idle,
}


def dispatch(rc: Any, ctx: AgentContext, register: SharedTargetRegister) -> Optional[Any]:
    """Route the turn to the behavior of the robot's role."""
    return ROLE_HANDLERS.get(rc.get_type(), run_idle)(rc, ctx, register)
