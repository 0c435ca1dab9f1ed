from dataclasses import dataclass, field
from random import Random
from typing import Optional

from arena.player.patrol import PatrolState

DEFAULT_SEED = 6147


@dataclass
class AgentContext:
    """
    Everything a robot's player keeps between turns.

    The generator is owned here rather than at module level so each robot
    draws its own reproducible sequence and tests can hand in a fixed one.
    """

    robot_id: int
    rng: Random
    patrol: PatrolState
    turn_count: int = 0
    last_fault: Optional[str] = field(default=None, repr=False)

    @classmethod
    def create(cls, robot_id: int, seed: int = DEFAULT_SEED, rng: Optional[Random] = None) -> "AgentContext":
        rng = rng if rng is not None else Random(seed * 100003 + robot_id)
        return cls(robot_id=robot_id, rng=rng, patrol=PatrolState.draw(rng))

    @property
    def is_first_turn(self) -> bool:
        return self.turn_count == 1
