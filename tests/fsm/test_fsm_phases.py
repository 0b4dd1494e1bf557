# Copyright (c) 2025-2026 provide.io llc
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tests for the phased FSM sequencer."""

from __future__ import annotations

from karasim.errors import ErrorKind
from karasim.fsm.editing import add_state, add_transition, create_empty_fsm, set_start_state
from karasim.fsm.executor import execute_fsm_to_completion
from karasim.fsm.phases import FSMPhaseSequencer, Phase
from karasim.fsm.models import ActionType
from karasim.world.detectors import Detector
from karasim.world.models import CellType, Position


def walk_to_wall(ids):
    program = add_state(create_empty_fsm(), "Walk", ids=ids)
    program = set_start_state(program, "state-1")
    program = add_transition(
        program, "state-1", "state-1", {Detector.TREE_FRONT: False}, [ActionType.MOVE], ids=ids
    )
    return add_transition(
        program,
        "state-1",
        "stop",
        {Detector.TREE_FRONT: True},
        [ActionType.TURN_LEFT, ActionType.TURN_LEFT],
        ids=ids,
    )


class TestPhases:
    """Test the phase order of one transition."""

    def test_phase_sequence(self, world, move_once_program):
        sequencer = FSMPhaseSequencer(move_once_program)

        matched = sequencer.advance(world)
        assert matched.phase == Phase.TRANSITION_MATCHED
        assert matched.transition_id == "transition-1"
        assert matched.world is world

        acted = sequencer.advance(matched.world)
        assert acted.phase == Phase.EXECUTING_ACTION
        assert acted.action_index == 0
        assert acted.world.character.position == Position(x=2, y=1)

        arrow = sequencer.advance(acted.world)
        assert arrow.phase == Phase.SHOWING_ARROW
        assert arrow.previous_state_id == "state-1"
        assert arrow.state_id == "stop"

        finished = sequencer.advance(arrow.world)
        assert finished.phase == Phase.FINISHED
        assert finished.stopped
        assert finished.error is None
        assert finished.steps == 1

    def test_transition_without_actions_goes_straight_to_arrow(self, world, ids):
        program = add_state(create_empty_fsm(), "Start", ids=ids)
        program = set_start_state(program, "state-1")
        program = add_transition(program, "state-1", "stop", ids=ids)
        sequencer = FSMPhaseSequencer(program)

        sequencer.advance(world)
        assert sequencer.advance(world).phase == Phase.SHOWING_ARROW

    def test_finished_stays_finished(self, world, move_once_program):
        sequencer = FSMPhaseSequencer(move_once_program)
        snapshot = sequencer.skip_to_end(world)
        again = sequencer.advance(snapshot.world)
        assert again.phase == Phase.FINISHED
        assert again.world is snapshot.world

    def test_phased_run_matches_unphased_run(self, make_world, ids):
        program = walk_to_wall(ids)
        world = make_world(y=3, cells={(2, 0): CellType.TREE})

        sequencer = FSMPhaseSequencer(program)
        phased = world
        snapshot = sequencer.advance(phased)
        while not snapshot.stopped:
            snapshot = sequencer.advance(snapshot.world)

        run = execute_fsm_to_completion(world, program)
        assert snapshot.world == run.world
        assert snapshot.steps == run.steps
        assert snapshot.error is None

    def test_stuck_is_reported(self, make_world, ids):
        program = add_state(create_empty_fsm(), "Start", ids=ids)
        program = set_start_state(program, "state-1")
        program = add_transition(program, "state-1", "stop", {Detector.ON_LEAF: True}, ids=ids)

        snapshot = FSMPhaseSequencer(program).advance(make_world())

        assert snapshot.stopped
        assert snapshot.error.kind == ErrorKind.STUCK_STATE

    def test_blocked_action_finishes(self, make_world, ids):
        program = add_state(create_empty_fsm(), "Start", ids=ids)
        program = set_start_state(program, "state-1")
        program = add_transition(program, "state-1", "stop", actions=[ActionType.MOVE], ids=ids)
        sequencer = FSMPhaseSequencer(program)
        world = make_world(y=0)

        sequencer.advance(world)
        snapshot = sequencer.advance(world)

        assert snapshot.stopped
        assert snapshot.error.kind == ErrorKind.BLOCKED_ACTION
        assert snapshot.error.state_id == "state-1"
        assert snapshot.world is world

    def test_step_limit(self, world, ids):
        program = add_state(create_empty_fsm(), "Spin", ids=ids)
        program = set_start_state(program, "state-1")
        program = add_transition(program, "state-1", "state-1", {}, [ActionType.TURN_LEFT], ids=ids)
        sequencer = FSMPhaseSequencer(program, max_steps=3)

        snapshot = sequencer.advance(world)
        while not snapshot.stopped:
            snapshot = sequencer.advance(snapshot.world)

        assert snapshot.error.kind == ErrorKind.LIMIT_EXCEEDED
        assert snapshot.steps == 3


class TestSkipToEnd:
    def test_skip_from_idle(self, make_world, ids):
        program = walk_to_wall(ids)
        world = make_world(y=4)

        snapshot = FSMPhaseSequencer(program).skip_to_end(world)

        assert snapshot.stopped
        assert snapshot.error is None
        assert snapshot.state_id == "stop"
        assert snapshot.world.character.position == Position(x=2, y=0)
        assert snapshot.steps == 5

    def test_skip_mid_transition_finishes_pending_actions(self, make_world, ids):
        program = walk_to_wall(ids)
        world = make_world(y=4)
        sequencer = FSMPhaseSequencer(program)
        sequencer.advance(world)

        snapshot = sequencer.skip_to_end(world)

        assert snapshot.world == execute_fsm_to_completion(world, program).world
        assert snapshot.steps == 5

    def test_skip_respects_remaining_budget(self, world, ids):
        program = add_state(create_empty_fsm(), "Spin", ids=ids)
        program = set_start_state(program, "state-1")
        program = add_transition(program, "state-1", "state-1", {}, [ActionType.TURN_LEFT], ids=ids)
        sequencer = FSMPhaseSequencer(program, max_steps=10)
        snapshot = sequencer.advance(world)
        snapshot = sequencer.advance(snapshot.world)
        snapshot = sequencer.advance(snapshot.world)

        snapshot = sequencer.skip_to_end(snapshot.world)

        assert snapshot.error.kind == ErrorKind.LIMIT_EXCEEDED
        assert snapshot.steps == 10
