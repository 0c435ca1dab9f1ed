import math
from enum import Enum
from typing import List, NamedTuple


class Direction(Enum):
    """Compass directions on the arena grid. North is +y."""

    NORTH = (0, 1)
    NORTHEAST = (1, 1)
    EAST = (1, 0)
    SOUTHEAST = (1, -1)
    SOUTH = (0, -1)
    SOUTHWEST = (-1, -1)
    WEST = (-1, 0)
    NORTHWEST = (-1, 1)
    CENTER = (0, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @staticmethod
    def compass() -> List["Direction"]:
        """The eight movement directions, clockwise from north."""
        return list(_COMPASS)


_COMPASS = (
    Direction.NORTH,
    Direction.NORTHEAST,
    Direction.EAST,
    Direction.SOUTHEAST,
    Direction.SOUTH,
    Direction.SOUTHWEST,
    Direction.WEST,
    Direction.NORTHWEST,
)


class Position(NamedTuple):
    """An (x, y) cell in arena coordinates."""

    x: int
    y: int

    def add(self, direction: Direction) -> "Position":
        return Position(self.x + direction.dx, self.y + direction.dy)

    def translate(self, dx: int, dy: int) -> "Position":
        return Position(self.x + dx, self.y + dy)

    def distance_squared_to(self, other: "Position") -> int:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def direction_to(self, other: "Position") -> Direction:
        """
        Single greedy step toward ``other``.

        Picks the compass direction whose bearing is closest to the straight
        line between the two cells. Returns CENTER for the same cell.
        """
        dx = other.x - self.x
        dy = other.y - self.y
        if dx == 0 and dy == 0:
            return Direction.CENTER
        # Octant of the bearing, counted clockwise from north
        angle = math.atan2(dx, dy)
        octant = int(round(angle / (math.pi / 4))) % 8
        return _COMPASS[octant]

    def __str__(self) -> str:
        return f"[{self.x}, {self.y}]"
