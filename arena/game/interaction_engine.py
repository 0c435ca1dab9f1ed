from typing import Any, Dict, List, NamedTuple, Tuple
from typeguard import typechecked

from arena.agent.robot import Robot
from arena.core.console import debug
from arena.game.agent_engine import PLAYING_TEAMS, AgentEngine
from arena.world.robot_types import COOLDOWN_DECAY, RobotType, Team

PASSIVE_LEAD_INCOME = 2
LEAD_REGEN_INTERVAL = 20
LEAD_REGEN_AMOUNT = 5


class RoundSummary(NamedTuple):
    red_killed: int
    blue_killed: int
    remaining_red_archons: int
    remaining_blue_archons: int
    attack_details: List[Tuple[str, str, int, str]]


@typechecked
class InteractionEngine:
    """
    Combat and round-end resolution.

    - Attack: damage lands immediately so later robots in the same round
      sense the result; destroyed robots leave the arena at once.
    - Round end: cooldown decay, passive lead income, lead regeneration.
    """

    def __init__(self, agent_engine: AgentEngine, config: Dict[str, Any]) -> None:
        debug("Initializing InteractionEngine")
        self.engine = agent_engine
        self.config = config

        game = config.get("game", {}) or {}
        self.passive_lead_income = int(game.get("passive_lead_income", PASSIVE_LEAD_INCOME))
        self.lead_regen_interval = int(game.get("lead_regen_interval", LEAD_REGEN_INTERVAL))
        self.lead_regen_amount = int(game.get("lead_regen_amount", LEAD_REGEN_AMOUNT))

        # per-round scratch
        self._killed: Dict[Team, int] = {team: 0 for team in PLAYING_TEAMS}
        self._attack_details: List[Tuple[str, str, int, str]] = []  # (attacker, target, damage, outcome)

    # ------------------------------ Combat -------------------------------

    def resolve_attack(self, attacker: Robot, target: Robot) -> bool:
        """
        Apply ``attacker``'s damage to ``target``.

        Returns:
            True if the target was destroyed.
        """
        damage = attacker.type.damage
        destroyed = target.take_damage(damage)
        outcome = "destroyed" if destroyed else "hit"
        self._attack_details.append((attacker.name, target.name, damage, outcome))
        debug(f"{attacker.name} hit {target.name} for {damage} ({outcome}, hp={target.health})")
        if destroyed and self.engine.kill_robot(target):
            self._killed[target.team] += 1
        return destroyed

    # ------------------------------ Round end -------------------------------

    def step(self, round_num: int) -> RoundSummary:
        """
        Resolve the end of one round.

        Returns:
            RoundSummary with robots destroyed this round, archons left per
            team, and every attack resolved this round.
        """
        for robot in self.engine.robots_in_turn_order():
            robot.decay_cooldowns(COOLDOWN_DECAY)

        for team in PLAYING_TEAMS:
            self.engine.lead[team] += self.passive_lead_income

        if self.lead_regen_interval > 0 and round_num > 0 and round_num % self.lead_regen_interval == 0:
            self._regenerate_lead()

        summary = RoundSummary(
            red_killed=self._killed[Team.RED],
            blue_killed=self._killed[Team.BLUE],
            remaining_red_archons=self.engine.count(Team.RED, RobotType.ARCHON),
            remaining_blue_archons=self.engine.count(Team.BLUE, RobotType.ARCHON),
            attack_details=list(self._attack_details),
        )
        debug(f"Round {round_num} complete: {summary.red_killed} red destroyed, {summary.blue_killed} blue destroyed")

        self._killed = {team: 0 for team in PLAYING_TEAMS}
        self._attack_details.clear()
        return summary

    def _regenerate_lead(self) -> None:
        """Deposits that still hold lead grow back a little."""
        graph = self.engine.arena.graph
        grown = 0
        for cell, lead in graph.nodes(data="lead"):
            if lead > 0:
                graph.nodes[cell]["lead"] = lead + self.lead_regen_amount
                grown += 1
        if grown:
            debug(f"Lead regenerated on {grown} deposits")
