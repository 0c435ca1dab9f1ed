"""
Engagement state machine for combat robots.

The state is never stored. Each turn it is derived again from the shared
register and what the robot senses right now:

1. validate the registered target if it is within vision, clearing it when
   no hostile stands there any more;
2. scan every visible hostile and commit the best one that strictly beats
   the registered priority;
3. re-read the register and approach, attack or patrol.

Every action is preceded by its ``can_*`` check; a refused check skips the
action for this turn.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

from arena.core.console import debug
from arena.player.context import AgentContext
from arena.player.evaluator import best_candidate
from arena.player.patrol import PatrolOutcome
from arena.player.register import NO_TARGET_PRIORITY, SharedTargetRegister, TargetRecord
from arena.world.geometry import Position


class EngagementState(Enum):
    NO_TARGET = "no_target"
    TARGET_OUT_OF_VALIDATION = "target_out_of_validation"
    APPROACHING = "approaching"
    ATTACKING = "attacking"


class Validation(Enum):
    EMPTY = "empty"
    CONFIRMED = "confirmed"
    UNVERIFIED = "unverified"
    CLEARED = "cleared"


@dataclass(frozen=True)
class EngagementReport:
    state: EngagementState
    validation: Validation
    target: Optional[Position]
    priority: int
    committed: bool
    acted: bool
    patrol: Optional[PatrolOutcome] = None


def effective_priority(record: TargetRecord) -> int:
    """Priority to beat. An empty register never counts as more urgent than the floor."""
    if record.is_empty:
        return max(record.priority, NO_TARGET_PRIORITY)
    return record.priority


def derive_state(location: Position, record: TargetRecord, vision_radius_squared: int, action_radius_squared: int) -> EngagementState:
    if record.is_empty:
        return EngagementState.NO_TARGET
    distance = location.distance_squared_to(record.location)
    if distance <= action_radius_squared:
        return EngagementState.ATTACKING
    if distance > vision_radius_squared:
        return EngagementState.TARGET_OUT_OF_VALIDATION
    return EngagementState.APPROACHING


def validate_target(rc: Any, register: SharedTargetRegister) -> Tuple[Validation, TargetRecord]:
    """
    Step 1: liveness check of the registered target.

    Only a robot that can see the registered cell can judge it. If nothing
    hostile stands there the register is cleared before any scan runs.
    """
    record = register.read()
    if record.is_empty:
        return Validation.EMPTY, record

    location = rc.get_location()
    if location.distance_squared_to(record.location) > rc.get_type().vision_radius_squared:
        return Validation.UNVERIFIED, record

    occupant = rc.sense_robot_at_location(record.location)
    if occupant is not None and occupant.team is rc.get_team().opponent():
        return Validation.CONFIRMED, record

    debug(f"Target {record.location} is stale, clearing register")
    if not register.clear():
        return Validation.UNVERIFIED, record
    return Validation.CLEARED, register.read()


def scan_for_targets(rc: Any, register: SharedTargetRegister, current: TargetRecord) -> Tuple[TargetRecord, bool]:
    """
    Step 2: commit the best visible hostile if it strictly beats ``current``.

    Returns:
        (record now believed to be registered, whether a write was committed)
    """
    hostiles = rc.sense_nearby_robots(rc.get_type().vision_radius_squared, rc.get_team().opponent())
    found = best_candidate(hostiles, effective_priority(current))
    if found is None:
        return current, False

    hostile, priority = found
    candidate = TargetRecord(hostile.location.x, hostile.location.y, priority)
    if not register.write_record(candidate):
        return current, False
    debug(f"Registered {hostile.type.value} at {hostile.location} with priority {priority}")
    return candidate, True


def act_on_target(rc: Any, register: SharedTargetRegister, ctx: AgentContext) -> Tuple[EngagementState, TargetRecord, bool, Optional[PatrolOutcome]]:
    """
    Step 3: approach, attack, or patrol when the team has no target.

    Returns:
        (state, record acted on, whether an action was taken, patrol outcome)
    """
    record = register.read()
    robot_type = rc.get_type()
    location = rc.get_location()
    state = derive_state(location, record, robot_type.vision_radius_squared, robot_type.action_radius_squared)

    if state is EngagementState.NO_TARGET:
        outcome = ctx.patrol.step(rc, ctx.rng)
        return state, record, outcome is PatrolOutcome.MOVED, outcome

    target = record.location
    if state is EngagementState.ATTACKING:
        if rc.can_attack(target):
            rc.attack(target)
            return state, record, True, None
        return state, record, False, None

    direction = location.direction_to(target)
    if rc.can_move(direction):
        rc.move(direction)
        return state, record, True, None
    return state, record, False, None


def run_engagement(rc: Any, register: SharedTargetRegister, ctx: AgentContext) -> EngagementReport:
    validation, record = validate_target(rc, register)
    record, committed = scan_for_targets(rc, register, record)
    state, record, acted, patrol = act_on_target(rc, register, ctx)
    rc.set_indicator_string(f"{state.value} {record.location if not record.is_empty else '-'}")
    return EngagementReport(
        state=state,
        validation=validation,
        target=None if record.is_empty else record.location,
        priority=record.priority,
        committed=committed,
        acted=acted,
        patrol=patrol,
    )
