from __future__ import annotations

import random

import pytest

from arena.core.errors import ActionErrorKind, ActionPreconditionFailed, UnexpectedFault
from arena.player import robot_player
from arena.player.context import AgentContext
from arena.player.engagement import EngagementReport
from arena.player.register import EMPTY_RECORD, NONE_SENTINEL
from arena.player.robot_player import RobotPlayer, TurnOutcome, create_player, map_strategy
from arena.player.roles import ROLE_HANDLERS, dispatch
from arena.world.geometry import Position
from arena.world.robot_types import RobotType
from tests.conftest import StrictController, hostile


def player(seed: int = 0) -> RobotPlayer:
    return RobotPlayer(AgentContext.create(1, rng=random.Random(seed)))


class TestRegisterInitialization:
    def test_first_turn_in_round_one_initializes(self) -> None:
        rc = StrictController(RobotType.ARCHON, round_num=1)
        player()(rc)
        assert rc.shared[:3] == list(EMPTY_RECORD)

    def test_robot_built_later_leaves_live_target_alone(self) -> None:
        rc = StrictController(RobotType.MINER, round_num=40, shared=[4, 4, 3] + [0] * 61)
        player()(rc)
        assert rc.shared[:3] == [4, 4, 3]

    def test_only_the_first_turn_initializes(self) -> None:
        p = player()
        p(StrictController(RobotType.LABORATORY, round_num=1))
        rc = StrictController(RobotType.LABORATORY, round_num=1, shared=[4, 4, 3] + [0] * 61)
        p(rc)
        assert rc.shared[:3] == [4, 4, 3]


class TestFaultBoundary:
    def test_always_yields(self) -> None:
        rc = StrictController(RobotType.SOLDIER)
        outcome = player()(rc)
        assert rc.turn_ended
        assert rc.calls[-1] == ("yield_turn", ())
        assert outcome.fault is None
        assert isinstance(outcome.report, EngagementReport)

    def test_precondition_failure_is_contained(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def boom(rc, ctx, register):
            raise ActionPreconditionFailed(ActionErrorKind.CANT_MOVE_THERE, "blocked")

        monkeypatch.setitem(ROLE_HANDLERS, RobotType.SOLDIER, boom)
        rc = StrictController(RobotType.SOLDIER)
        p = player()
        outcome = p(rc)
        assert rc.turn_ended
        assert isinstance(outcome.fault, ActionPreconditionFailed)
        assert p.fault_count == 1
        assert "CANT_MOVE_THERE" in p.ctx.last_fault

    def test_unexpected_error_is_wrapped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        def boom(rc, ctx, register):
            raise ZeroDivisionError("oops")

        monkeypatch.setitem(ROLE_HANDLERS, RobotType.MINER, boom)
        rc = StrictController(RobotType.MINER)
        outcome = player()(rc)
        assert rc.turn_ended
        assert isinstance(outcome.fault, UnexpectedFault)
        assert isinstance(outcome.fault.cause, ZeroDivisionError)

    def test_turn_counter_advances(self) -> None:
        p = player()
        outcomes = [p(StrictController(RobotType.WATCHTOWER)) for _ in range(3)]
        assert [o.turn for o in outcomes] == [1, 2, 3]
        assert all(isinstance(o, TurnOutcome) for o in outcomes)


class TestDispatch:
    @pytest.mark.parametrize("robot_type", [RobotType.LABORATORY, RobotType.WATCHTOWER, RobotType.BUILDER, RobotType.SAGE])
    def test_idle_roles_do_nothing(self, robot_type: RobotType) -> None:
        rc = StrictController(robot_type, robots=[hostile(5, RobotType.MINER, 11, 10)])
        ctx = AgentContext.create(1, rng=random.Random(0))
        assert dispatch(rc, ctx, None) is None
        assert rc.calls == []

    def test_soldier_engages(self) -> None:
        rc = StrictController(RobotType.SOLDIER, shared=list(EMPTY_RECORD) + [0] * 61, robots=[hostile(5, RobotType.ARCHON, 11, 10)])
        p = player()
        outcome = p(rc)
        assert outcome.report.committed
        assert rc.shared[:3] == [11, 10, 4]

    def test_archon_builds_only_when_allowed(self) -> None:
        for seed in range(20):
            rc = StrictController(RobotType.ARCHON, lead=1000)
            player(seed)(rc)
            built = [args[0] for name, args in rc.actions() if name == "build_robot"]
            assert len(built) == 1
            assert built[0] in (RobotType.MINER, RobotType.SOLDIER)

    def test_archon_without_lead_builds_nothing(self) -> None:
        rc = StrictController(RobotType.ARCHON, lead=0)
        player()(rc)
        assert rc.actions() == []

    def test_archon_builds_both_kinds_over_time(self) -> None:
        p = player(3)
        built = set()
        for _ in range(30):
            rc = StrictController(RobotType.ARCHON, lead=1000)
            p(rc)
            built.update(args[0] for name, args in rc.actions() if name == "build_robot")
        assert built == {RobotType.MINER, RobotType.SOLDIER}

    def test_miner_mines_adjacent_lead_then_moves(self) -> None:
        rc = StrictController(RobotType.MINER, location=Position(10, 10))
        rc.lead_at = {Position(11, 10): 3, Position(10, 9): 2, Position(13, 13): 9}
        player()(rc)
        mined = [args[0] for name, args in rc.actions() if name == "mine_lead"]
        assert sorted(mined) == sorted([Position(10, 9)] * 2 + [Position(11, 10)] * 3)
        assert rc.lead_at[Position(13, 13)] == 9
        assert [name for name, _ in rc.actions()].count("move") <= 1


class TestMapStrategy:
    def test_one_player_per_robot(self) -> None:
        strategies = map_strategy({"red_1": {"id": 1, "seed": 9}, "red_2": {"id": 2}})
        assert set(strategies) == {"red_1", "red_2"}
        assert strategies["red_1"] is not strategies["red_2"]
        assert strategies["red_1"].ctx.robot_id == 1

    def test_same_seed_same_heading(self) -> None:
        assert create_player(4, 11).ctx.patrol.heading is create_player(4, 11).ctx.patrol.heading

    def test_module_exposes_map_strategy(self) -> None:
        assert callable(robot_player.map_strategy)

    def test_sentinel_is_max_shared_value(self) -> None:
        assert NONE_SENTINEL == 2**16 - 1
