from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Any

from arena.world.geometry import Direction


class PatrolOutcome(Enum):
    MOVED = "moved"
    BLOCKED = "blocked"
    REDIRECTED = "redirected"


def draw_heading(rng: Random) -> Direction:
    directions = Direction.compass()
    return directions[rng.randrange(len(directions))]


@dataclass
class PatrolState:
    """Heading a robot keeps walking in while the team has no target."""

    heading: Direction

    @classmethod
    def draw(cls, rng: Random) -> "PatrolState":
        return cls(draw_heading(rng))

    def step(self, rc: Any, rng: Random) -> PatrolOutcome:
        """
        Try one step along the heading.

        A step that would leave the arena draws a new heading for the next
        turn. Any other refusal (a robot in the way, cooldown) keeps the
        heading so the robot carries on once the way clears.
        """
        if rc.can_move(self.heading):
            rc.move(self.heading)
            return PatrolOutcome.MOVED
        if not rc.on_the_map(rc.get_location().add(self.heading)):
            self.heading = draw_heading(rng)
            return PatrolOutcome.REDIRECTED
        return PatrolOutcome.BLOCKED
