"""
Shared Target Register.

Three cells of the team shared array hold the team's current engagement
target: its x, its y and its priority tier. Every robot on the team compiles
in the same indices and sentinel, so these constants are the whole wire
format between robots.

The three cells are not written atomically. A robot always writes a complete
triple within its own turn, and the only reader inside that turn is the
writer itself, so a torn triple can only be seen across robots, where the
validation step of the engagement machine heals it.
"""

from typing import Any, NamedTuple
from typeguard import typechecked

from arena.world.geometry import Position

TARGET_X_INDEX = 0
TARGET_Y_INDEX = 1
PRIORITY_INDEX = 2
REGISTER_INDICES = (TARGET_X_INDEX, TARGET_Y_INDEX, PRIORITY_INDEX)

# Largest shared array value; never a legal coordinate on any arena
NONE_SENTINEL = 65535

# Priority left behind when a stale target is cleared. Any real tier beats it.
NO_TARGET_PRIORITY = 10


class TargetRecord(NamedTuple):
    x: int
    y: int
    priority: int

    @property
    def is_empty(self) -> bool:
        return self.x == NONE_SENTINEL or self.y == NONE_SENTINEL

    @property
    def location(self) -> Position:
        return Position(self.x, self.y)


EMPTY_RECORD = TargetRecord(NONE_SENTINEL, NONE_SENTINEL, NONE_SENTINEL)
CLEARED_RECORD = TargetRecord(NONE_SENTINEL, NONE_SENTINEL, NO_TARGET_PRIORITY)


@typechecked
class SharedTargetRegister:
    """Read and write the target triple through a robot controller."""

    def __init__(self, rc: Any):
        self.rc = rc

    def read(self) -> TargetRecord:
        return TargetRecord(
            self.rc.read_shared_array(TARGET_X_INDEX),
            self.rc.read_shared_array(TARGET_Y_INDEX),
            self.rc.read_shared_array(PRIORITY_INDEX),
        )

    @property
    def is_empty(self) -> bool:
        return self.read().is_empty

    def write(self, x: int, y: int, priority: int) -> bool:
        """
        Commit a full triple.

        Returns:
            False if any cell was refused by the precondition check. Nothing
            is written in that case.
        """
        values = (x, y, priority)
        if not all(self.rc.can_write_shared_array(i, v) for i, v in zip(REGISTER_INDICES, values)):
            return False
        for index, value in zip(REGISTER_INDICES, values):
            self.rc.write_shared_array(index, value)
        return True

    def write_record(self, record: TargetRecord) -> bool:
        return self.write(record.x, record.y, record.priority)

    def initialize(self) -> bool:
        """Put the register in its empty state. Repeating it changes nothing."""
        return self.write_record(EMPTY_RECORD)

    def clear(self) -> bool:
        """Drop a stale target, leaving the floor priority behind."""
        return self.write_record(CLEARED_RECORD)
