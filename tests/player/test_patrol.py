from __future__ import annotations

import random

from arena.player.patrol import PatrolOutcome, PatrolState, draw_heading
from arena.world.geometry import Direction, Position
from arena.world.robot_types import RobotType, Team
from tests.conftest import StrictController, hostile


class TestDrawHeading:
    def test_never_center(self) -> None:
        rng = random.Random(0)
        assert all(draw_heading(rng) is not Direction.CENTER for _ in range(200))

    def test_covers_all_eight(self) -> None:
        rng = random.Random(0)
        assert {draw_heading(rng) for _ in range(400)} == set(Direction.compass())

    def test_seeded(self) -> None:
        assert [draw_heading(random.Random(5)) for _ in range(3)] == [draw_heading(random.Random(5)) for _ in range(3)]


class TestPatrolStep:
    def test_moves_along_heading(self) -> None:
        rc = StrictController(location=Position(10, 10))
        state = PatrolState(Direction.EAST)
        assert state.step(rc, random.Random(0)) is PatrolOutcome.MOVED
        assert rc.location == Position(11, 10)
        assert state.heading is Direction.EAST

    def test_redraws_at_the_edge(self) -> None:
        rc = StrictController(location=Position(19, 10))
        state = PatrolState(Direction.EAST)
        assert state.step(rc, random.Random(0)) is PatrolOutcome.REDIRECTED
        assert rc.location == Position(19, 10)
        assert rc.actions() == []

    def test_keeps_heading_when_blocked_by_a_robot(self) -> None:
        rc = StrictController(location=Position(10, 10), robots=[hostile(9, RobotType.MINER, 11, 10, team=Team.RED)])
        state = PatrolState(Direction.EAST)
        assert state.step(rc, random.Random(0)) is PatrolOutcome.BLOCKED
        assert state.heading is Direction.EAST

    def test_keeps_heading_on_cooldown(self) -> None:
        rc = StrictController(location=Position(10, 10), movement_ready=False)
        state = PatrolState(Direction.NORTH)
        assert state.step(rc, random.Random(0)) is PatrolOutcome.BLOCKED
        assert state.heading is Direction.NORTH

    def test_keeps_heading_at_a_wall(self) -> None:
        rc = StrictController(location=Position(10, 10), blocked=[Position(10, 11)])
        state = PatrolState(Direction.NORTH)
        assert state.step(rc, random.Random(0)) is PatrolOutcome.BLOCKED
        assert state.heading is Direction.NORTH
