"""Job lifecycle state machine.

An application moves through eight ordered stages, from "Application Pending"
to "Job Closed". Each (role, stage) pair allows at most one action, and every
accepted action advances the stage by exactly one. Nothing in here raises for
a rejected transition: callers get back ``Ok(state)`` or
``Err(InvalidTransition)`` and derive disabled controls from that.

Two callers drive it. ``apps.jobs.services`` persists every transition on the
application row and is what the REST views use. ``apps.jobs.sessions.ProgressSession``
is the in-process surface: it keeps one view's state in memory and runs the
payment charge on a cancellable timer.
"""
from dataclasses import dataclass, replace
from enum import Enum, IntEnum
from typing import Optional, Union


class Role(str, Enum):
    WORKER = 'worker'
    CLIENT = 'client'


class Stage(IntEnum):
    APPLICATION_PENDING = 1
    APPLICATION_ACCEPTED = 2
    IN_PROGRESS = 3
    WORK_COMPLETED = 4
    PAYMENT_PENDING = 5
    PAYMENT_SUCCESSFUL = 6
    REVIEW_AND_FEEDBACK = 7
    JOB_CLOSED = 8

    @property
    def label(self):
        return STAGE_NAMES[self]


STAGE_NAMES = {
    Stage.APPLICATION_PENDING: 'Application Pending',
    Stage.APPLICATION_ACCEPTED: 'Application Accepted',
    Stage.IN_PROGRESS: 'In Progress',
    Stage.WORK_COMPLETED: 'Work Completed',
    Stage.PAYMENT_PENDING: 'Payment Pending',
    Stage.PAYMENT_SUCCESSFUL: 'Payment Successful',
    Stage.REVIEW_AND_FEEDBACK: 'Review & Feedback',
    Stage.JOB_CLOSED: 'Job Closed',
}

FIRST_STAGE = Stage.APPLICATION_PENDING
LAST_STAGE = Stage.JOB_CLOSED


class Action(str, Enum):
    ACCEPT_APPLICATION = 'accept_application'
    START_WORK = 'start_work'
    MARK_COMPLETED = 'mark_completed'
    RELEASE_PAYMENT = 'release_payment'
    ACCEPT_PAYMENT = 'accept_payment'
    SUBMIT_REVIEW = 'submit_review'
    CLOSE_JOB = 'close_job'


# Stage 6 has two legal actions, one per role. Either one advances to stage 7
# and the first one accepted wins: stage 7 offers the client nothing and the
# worker only CloseJob, so the other acknowledgement becomes illegal.
ACTION_TABLE = {
    (Role.CLIENT, Stage.APPLICATION_PENDING): Action.ACCEPT_APPLICATION,
    (Role.WORKER, Stage.APPLICATION_ACCEPTED): Action.START_WORK,
    (Role.WORKER, Stage.IN_PROGRESS): Action.MARK_COMPLETED,
    (Role.CLIENT, Stage.WORK_COMPLETED): Action.RELEASE_PAYMENT,
    (Role.WORKER, Stage.PAYMENT_SUCCESSFUL): Action.ACCEPT_PAYMENT,
    (Role.CLIENT, Stage.PAYMENT_SUCCESSFUL): Action.SUBMIT_REVIEW,
    (Role.WORKER, Stage.REVIEW_AND_FEEDBACK): Action.CLOSE_JOB,
}

MIN_RATING = 1
MAX_RATING = 5


@dataclass(frozen=True)
class JobProgressState:
    current_stage: int = FIRST_STAGE
    review: str = ''
    rating: int = 0
    payment_processing: bool = False
    payment_error: str = ''

    def __post_init__(self):
        if not FIRST_STAGE <= self.current_stage <= LAST_STAGE:
            raise ValueError(f"Stage must be between {int(FIRST_STAGE)} and {int(LAST_STAGE)}, got {self.current_stage}")
        if not 0 <= self.rating <= MAX_RATING:
            raise ValueError(f"Rating must be between 0 and {MAX_RATING}, got {self.rating}")

    @property
    def stage(self):
        return Stage(self.current_stage)

    @property
    def review_locked(self):
        return self.current_stage >= Stage.REVIEW_AND_FEEDBACK

    @property
    def is_closed(self):
        return self.current_stage == LAST_STAGE


@dataclass(frozen=True)
class InvalidTransition:
    action: Optional[str]
    role: Optional[str]
    stage: int
    reason: str

    def __str__(self):
        return self.reason


@dataclass(frozen=True)
class Ok:
    state: JobProgressState

    ok = True


@dataclass(frozen=True)
class Err:
    error: InvalidTransition

    ok = False


TransitionResult = Union[Ok, Err]


def _coerce_role(role):
    try:
        return Role(role)
    except ValueError:
        return None


def _coerce_action(action):
    try:
        return Action(action)
    except ValueError:
        return None


def action_for(role, stage) -> Optional[Action]:
    """Return the single action ``role`` may take at ``stage``, or None."""
    role = _coerce_role(role)
    if role is None:
        return None
    try:
        stage = Stage(stage)
    except ValueError:
        return None
    return ACTION_TABLE.get((role, stage))


def stages():
    """The stage table as (id, name) pairs in lifecycle order."""
    return [(int(stage), stage.label) for stage in Stage]


def validate_review(review, rating):
    """Return a reason string when a review cannot be submitted, else None."""
    if not isinstance(review, str) or not review.strip():
        return "A written review is required."
    if isinstance(rating, bool) or not isinstance(rating, int):
        return "Rating must be a whole number of stars."
    if not MIN_RATING <= rating <= MAX_RATING:
        return f"Rating must be between {MIN_RATING} and {MAX_RATING}."
    return None


def _reject(state, role, action, reason):
    return Err(InvalidTransition(
        action=getattr(action, 'value', action),
        role=getattr(role, 'value', role),
        stage=state.current_stage,
        reason=reason,
    ))


def transition(state, role, action, review=None, rating=None) -> TransitionResult:
    """Apply ``action`` taken by ``role`` to ``state``.

    Returns ``Ok`` with the next state, advanced by exactly one stage, or
    ``Err`` with the reason the action is not available. ``review`` and
    ``rating`` are only read for ``SubmitReview``.
    """
    checked_role = _coerce_role(role)
    if checked_role is None:
        return _reject(state, role, action, f"Unknown role '{role}'.")
    checked_action = _coerce_action(action)
    if checked_action is None:
        return _reject(state, role, action, f"Unknown action '{action}'.")

    expected = action_for(checked_role, state.current_stage)
    if expected is not checked_action:
        return _reject(
            state, checked_role, checked_action,
            f"{checked_role.value.capitalize()} cannot {checked_action.value.replace('_', ' ')} "
            f"while the job is at '{state.stage.label}'."
        )

    next_stage = state.current_stage + 1

    if checked_action is Action.SUBMIT_REVIEW:
        problem = validate_review(review, rating)
        if problem:
            return _reject(state, checked_role, checked_action, problem)
        return Ok(replace(state, current_stage=next_stage, review=review.strip(), rating=rating))

    if checked_action is Action.RELEASE_PAYMENT:
        return Ok(replace(state, current_stage=next_stage, payment_processing=True, payment_error=''))

    return Ok(replace(state, current_stage=next_stage))


def complete_payment(state) -> TransitionResult:
    """Payment succeeded: move Payment Pending to Payment Successful."""
    if state.current_stage != Stage.PAYMENT_PENDING or not state.payment_processing:
        return _reject(state, None, None, "No payment is being processed for this job.")
    return Ok(replace(
        state,
        current_stage=Stage.PAYMENT_SUCCESSFUL,
        payment_processing=False,
        payment_error='',
    ))


def fail_payment(state, reason) -> TransitionResult:
    """Payment failed: stay at Payment Pending with the charge no longer in flight."""
    if state.current_stage != Stage.PAYMENT_PENDING or not state.payment_processing:
        return _reject(state, None, None, "No payment is being processed for this job.")
    return Ok(replace(state, payment_processing=False, payment_error=reason or 'Payment failed.'))


def retry_payment(state) -> TransitionResult:
    """Re-arm a charge after a failed attempt."""
    if state.current_stage != Stage.PAYMENT_PENDING:
        return _reject(state, Role.CLIENT, None, "Payment can only be retried while it is pending.")
    if state.payment_processing:
        return _reject(state, Role.CLIENT, None, "A payment is already being processed.")
    return Ok(replace(state, payment_processing=True, payment_error=''))


def can_perform(state, role, action, review=None, rating=None):
    """True when ``transition`` would accept the action; drives disabled controls."""
    return transition(state, role, action, review=review, rating=rating).ok


def available_action(state, role) -> Optional[Action]:
    return action_for(role, state.current_stage)
