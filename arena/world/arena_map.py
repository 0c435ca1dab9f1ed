from typing import Any, Dict, Iterable, List, Optional, Sequence
from typeguard import typechecked
import networkx as nx

from arena.core.console import *
from arena.core.errors import ConfigError
from arena.world.geometry import Direction, Position

MIN_ARENA_SIZE = 20
MAX_ARENA_SIZE = 60


@typechecked
class ArenaMap:
    """
    Grid arena stored as a king-move graph.

    Every in-bounds cell that is not a wall is a node of ``graph`` and is
    linked to its passable neighbours in the eight compass directions.
    Lead and gold deposits live on the node attributes.
    """

    def __init__(self, width: int, height: int, walls: Optional[Iterable[Sequence[int]]] = None):
        if not (MIN_ARENA_SIZE <= width <= MAX_ARENA_SIZE and MIN_ARENA_SIZE <= height <= MAX_ARENA_SIZE):
            raise ConfigError(f"Arena size {width}x{height} outside [{MIN_ARENA_SIZE}, {MAX_ARENA_SIZE}]", "arena")
        self.width = width
        self.height = height
        self.walls = {Position(int(w[0]), int(w[1])) for w in (walls or [])}
        self.graph = self._build_graph()
        debug(f"Built arena {width}x{height} with {self.graph.number_of_nodes()} cells and {len(self.walls)} walls")

    @classmethod
    def from_config(cls, arena_config: Dict[str, Any]) -> "ArenaMap":
        """
        Build an ArenaMap from the ``arena`` config section.

        Args:
            arena_config: Mapping with ``width``, ``height`` and optional
                ``walls`` ([x, y]), ``lead`` and ``gold`` ([x, y, amount]).
        """
        arena = cls(int(arena_config["width"]), int(arena_config["height"]), arena_config.get("walls") or [])
        for x, y, amount in arena_config.get("lead") or []:
            arena.add_deposit(Position(int(x), int(y)), lead=int(amount))
        for x, y, amount in arena_config.get("gold") or []:
            arena.add_deposit(Position(int(x), int(y)), gold=int(amount))
        return arena

    def _build_graph(self) -> nx.Graph:
        G = nx.Graph()
        for x in range(self.width):
            for y in range(self.height):
                cell = Position(x, y)
                if cell not in self.walls:
                    G.add_node(cell, lead=0, gold=0)
        # Half of the compass is enough for an undirected graph
        for cell in list(G.nodes):
            for direction in (Direction.NORTH, Direction.NORTHEAST, Direction.EAST, Direction.SOUTHEAST):
                other = cell.add(direction)
                if other in G:
                    G.add_edge(cell, other)
        return G

    # ---------------------------- Geometry ----------------------------

    def on_the_map(self, pos: Position) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def is_passable(self, pos: Position) -> bool:
        return pos in self.graph

    def neighbors(self, pos: Position) -> List[Position]:
        if pos not in self.graph:
            return []
        return list(self.graph.neighbors(pos))

    def can_step(self, origin: Position, destination: Position) -> bool:
        """True if ``destination`` is one passable king move away from ``origin``."""
        return self.graph.has_edge(origin, destination)

    # ---------------------------- Resources ----------------------------

    def add_deposit(self, pos: Position, lead: int = 0, gold: int = 0) -> None:
        if pos not in self.graph:
            raise ConfigError(f"Deposit at {pos} is off the map or inside a wall", "arena")
        self.graph.nodes[pos]["lead"] += lead
        self.graph.nodes[pos]["gold"] += gold

    def lead_at(self, pos: Position) -> int:
        return self.graph.nodes[pos]["lead"] if pos in self.graph else 0

    def gold_at(self, pos: Position) -> int:
        return self.graph.nodes[pos]["gold"] if pos in self.graph else 0

    def take_lead(self, pos: Position, amount: int = 1) -> int:
        taken = min(amount, self.lead_at(pos))
        if taken:
            self.graph.nodes[pos]["lead"] -= taken
        return taken

    def take_gold(self, pos: Position, amount: int = 1) -> int:
        taken = min(amount, self.gold_at(pos))
        if taken:
            self.graph.nodes[pos]["gold"] -= taken
        return taken

    def total_lead(self) -> int:
        return sum(lead for _, lead in self.graph.nodes(data="lead"))

    def __str__(self) -> str:
        return f"ArenaMap({self.width}x{self.height}, walls={len(self.walls)}, lead={self.total_lead()})"
