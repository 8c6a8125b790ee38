"""Unit tests for the job progress state machine.

No database and no HTTP here: just the reducer in apps.jobs.progress.
"""
import pytest

from apps.jobs.progress import (
    ACTION_TABLE, Action, JobProgressState, Role, Stage,
    action_for, available_action, can_perform, complete_payment,
    fail_payment, retry_payment, stages, transition,
)

EXPECTED_TABLE = {
    ('client', 1): Action.ACCEPT_APPLICATION,
    ('worker', 2): Action.START_WORK,
    ('worker', 3): Action.MARK_COMPLETED,
    ('client', 4): Action.RELEASE_PAYMENT,
    ('worker', 6): Action.ACCEPT_PAYMENT,
    ('client', 6): Action.SUBMIT_REVIEW,
    ('worker', 7): Action.CLOSE_JOB,
}


def at(stage, **kwargs):
    return JobProgressState(current_stage=stage, **kwargs)


class TestStageTable:

    def test_stages_are_dense_and_ordered(self):
        ids = [stage_id for stage_id, _ in stages()]
        assert ids == list(range(1, 9))

    def test_stage_names(self):
        assert dict(stages())[6] == 'Payment Successful'
        assert Stage(7).label == 'Review & Feedback'
        assert Stage.JOB_CLOSED.label == 'Job Closed'

    def test_state_rejects_out_of_range_stage(self):
        with pytest.raises(ValueError):
            JobProgressState(current_stage=9)
        with pytest.raises(ValueError):
            JobProgressState(current_stage=0)


class TestRoleGate:

    @pytest.mark.parametrize("role", ['worker', 'client'])
    @pytest.mark.parametrize("stage", range(1, 9))
    def test_action_for_matches_table(self, role, stage):
        assert action_for(role, stage) == EXPECTED_TABLE.get((role, stage))

    def test_table_has_no_extra_entries(self):
        assert {(role.value, int(stage)) for role, stage in ACTION_TABLE} == set(EXPECTED_TABLE)

    def test_unknown_role_has_no_action(self):
        assert action_for('admin', 1) is None

    def test_payment_pending_has_no_participant_action(self):
        assert action_for(Role.CLIENT, Stage.PAYMENT_PENDING) is None
        assert action_for(Role.WORKER, Stage.PAYMENT_PENDING) is None


class TestTransitions:

    @pytest.mark.parametrize("role,stage", [
        key for key in EXPECTED_TABLE if EXPECTED_TABLE[key] is not Action.SUBMIT_REVIEW
    ])
    def test_legal_action_advances_exactly_one(self, role, stage):
        result = transition(at(stage), role, EXPECTED_TABLE[(role, stage)])
        assert result.ok
        assert result.state.current_stage == stage + 1

    @pytest.mark.parametrize("stage", range(1, 9))
    @pytest.mark.parametrize("role", ['worker', 'client'])
    @pytest.mark.parametrize("action", list(Action))
    def test_illegal_action_leaves_state_unchanged(self, stage, role, action):
        if EXPECTED_TABLE.get((role, stage)) is action:
            pytest.skip("legal combination")
        state = at(stage)
        result = transition(state, role, action, review='Fine', rating=3)
        assert not result.ok
        assert result.error.stage == stage
        assert result.error.action == action.value
        assert state.current_stage == stage

    def test_unknown_action_is_rejected(self):
        result = transition(at(1), 'client', 'cancel_job')
        assert not result.ok
        assert 'Unknown action' in result.error.reason

    def test_unknown_role_is_rejected(self):
        result = transition(at(1), 'admin', Action.ACCEPT_APPLICATION)
        assert not result.ok
        assert 'Unknown role' in result.error.reason

    def test_release_payment_sets_processing(self):
        result = transition(at(4), 'client', 'release_payment')
        assert result.state.current_stage == 5
        assert result.state.payment_processing is True

    def test_can_perform_and_available_action(self):
        state = at(3)
        assert available_action(state, 'worker') is Action.MARK_COMPLETED
        assert available_action(state, 'client') is None
        assert can_perform(state, 'worker', 'mark_completed')
        assert not can_perform(state, 'client', 'mark_completed')


class TestReview:

    @pytest.mark.parametrize("review,rating", [
        ('', 4),
        ('   ', 4),
        (None, 4),
        ('Great work!', 0),
        ('Great work!', 6),
        ('Great work!', None),
        ('Great work!', True),
    ])
    def test_invalid_review_does_not_advance(self, review, rating):
        result = transition(at(6), 'client', 'submit_review', review=review, rating=rating)
        assert not result.ok
        assert result.error.stage == 6

    @pytest.mark.parametrize("rating", [1, 2, 3, 4, 5])
    def test_valid_review_advances_and_freezes(self, rating):
        result = transition(at(6), 'client', 'submit_review', review='  Great work!  ', rating=rating)
        assert result.ok
        state = result.state
        assert state.current_stage == 7
        assert state.review == 'Great work!'
        assert state.rating == rating
        assert state.review_locked

        again = transition(state, 'client', 'submit_review', review='Changed', rating=1)
        assert not again.ok
        assert state.review == 'Great work!'


class TestStageSixEitherOr:
    """Either acknowledgement at stage 6 advances; the other is then illegal."""

    def test_worker_first_blocks_client_review(self):
        state = transition(at(6), 'worker', 'accept_payment').state
        assert state.current_stage == 7
        assert not transition(state, 'client', 'submit_review', review='Nice', rating=5).ok

    def test_client_first_blocks_worker_acceptance(self):
        state = transition(at(6), 'client', 'submit_review', review='Nice', rating=5).state
        assert state.current_stage == 7
        assert not transition(state, 'worker', 'accept_payment').ok
        assert transition(state, 'worker', 'close_job').state.current_stage == 8


class TestPaymentSignals:

    def test_complete_payment_requires_pending_charge(self):
        assert not complete_payment(at(5)).ok
        assert not complete_payment(at(4, payment_processing=True)).ok

    def test_complete_payment_moves_to_six(self):
        result = complete_payment(at(5, payment_processing=True))
        assert result.state.current_stage == 6
        assert result.state.payment_processing is False

    def test_fail_payment_stays_at_five(self):
        result = fail_payment(at(5, payment_processing=True), 'Card declined')
        assert result.state.current_stage == 5
        assert result.state.payment_processing is False
        assert result.state.payment_error == 'Card declined'

    def test_retry_payment(self):
        failed = at(5, payment_error='Card declined')
        result = retry_payment(failed)
        assert result.state.payment_processing is True
        assert result.state.payment_error == ''
        assert not retry_payment(result.state).ok
        assert not retry_payment(at(6)).ok


def test_full_scenario():
    state = at(1)
    state = transition(state, 'client', 'accept_application').state
    assert state.current_stage == 2
    state = transition(state, 'worker', 'start_work').state
    assert state.current_stage == 3
    state = transition(state, 'worker', 'mark_completed').state
    assert state.current_stage == 4
    state = transition(state, 'client', 'release_payment').state
    assert (state.current_stage, state.payment_processing) == (5, True)
    state = complete_payment(state).state
    assert (state.current_stage, state.payment_processing) == (6, False)
    state = transition(state, 'client', 'submit_review', review='Great work!', rating=4).state
    assert state.current_stage == 7
    state = transition(state, 'worker', 'close_job').state
    assert state.current_stage == 8
    assert state.is_closed
