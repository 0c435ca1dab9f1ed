from enum import IntEnum
from typing import Iterable, Optional, Tuple

from arena.world.robot_types import RobotInfo, RobotType


class PriorityTier(IntEnum):
    """Lower is more urgent."""

    WATCHTOWER = 1
    SAGE = 2
    SOLDIER = 3
    ARCHON = 4
    OTHER = 5


_TIER_BY_TYPE = {
    RobotType.WATCHTOWER: PriorityTier.WATCHTOWER,
    RobotType.SAGE: PriorityTier.SAGE,
    RobotType.SOLDIER: PriorityTier.SOLDIER,
    RobotType.ARCHON: PriorityTier.ARCHON,
}


def classify(robot_type: RobotType) -> int:
    """Priority of a hostile by type alone; distance and health do not count."""
    return int(_TIER_BY_TYPE.get(robot_type, PriorityTier.OTHER))


def is_better(candidate: int, current: int) -> bool:
    # Strict: on a tie the registered target stays
    return candidate < current


def best_candidate(hostiles: Iterable[RobotInfo], current_priority: int) -> Optional[Tuple[RobotInfo, int]]:
    """
    Best hostile that strictly improves on ``current_priority``.

    Each hostile has to beat the best seen so far, so the first one found wins
    among equals.

    Returns:
        (hostile, priority), or None if nothing beats the current priority.
    """
    best = None
    best_priority = current_priority
    for hostile in hostiles:
        priority = classify(hostile.type)
        if is_better(priority, best_priority):
            best, best_priority = hostile, priority
    return None if best is None else (best, best_priority)
