"""In-memory progress sessions.

A session is what a single participant's job-progress view holds while it is
open: one ``JobProgressState`` and at most one pending payment timer. Closing
the session cancels the timer, and a timer belonging to a closed session (or to
an earlier charge) never touches any state.
"""
import logging
import threading

from django.conf import settings

from apps.payments.processors import PaymentError, SimulatedPaymentProcessor

from . import progress

logger = logging.getLogger(__name__)


class ProgressSession:

    def __init__(self, initial_stage=progress.FIRST_STAGE, processor=None, delay_ms=None,
                 timer_factory=threading.Timer, amount=0, currency=None, application_id=None):
        self.state = progress.JobProgressState(current_stage=initial_stage)
        self.processor = processor or SimulatedPaymentProcessor()
        if delay_ms is None:
            delay_ms = settings.PAYMENT_SIMULATION_DELAY_MS
        self.delay_ms = delay_ms
        self.timer_factory = timer_factory
        self.amount = amount
        self.currency = currency or settings.PAYMENT_CURRENCY
        self.application_id = application_id
        self.receipt = None
        self.closed = False
        self._lock = threading.RLock()
        self._timer = None
        self._pending_charge = None

    @property
    def current_stage(self):
        return self.state.current_stage

    @property
    def payment_processing(self):
        return self.state.payment_processing

    def available_action(self, role):
        return progress.available_action(self.state, role)

    def can_perform(self, role, action, review=None, rating=None):
        return progress.can_perform(self.state, role, action, review=review, rating=rating)

    def dispatch(self, role, action, review=None, rating=None):
        with self._lock:
            if self.closed:
                return progress.Err(progress.InvalidTransition(
                    action=getattr(action, 'value', action),
                    role=getattr(role, 'value', role),
                    stage=self.state.current_stage,
                    reason="This progress view has been closed.",
                ))
            result = progress.transition(self.state, role, action, review=review, rating=rating)
            if not result.ok:
                logger.debug(f"Rejected {action} by {role}: {result.error.reason}")
                return result
            self.state = result.state
            if self.state.payment_processing:
                self._schedule_charge()
            return result

    def retry_payment(self):
        with self._lock:
            if self.closed:
                return progress.Err(progress.InvalidTransition(
                    action=None, role=progress.Role.CLIENT.value,
                    stage=self.state.current_stage,
                    reason="This progress view has been closed.",
                ))
            result = progress.retry_payment(self.state)
            if result.ok:
                self.state = result.state
                self._schedule_charge()
            return result

    def _schedule_charge(self):
        token = object()
        self._pending_charge = token
        timer = self.timer_factory(self.delay_ms / 1000.0, self._settle, args=(token,))
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _settle(self, token):
        with self._lock:
            if self.closed or token is not self._pending_charge:
                return
            self._pending_charge = None
            self._timer = None

        # charge without the lock so close() never waits on the processor
        try:
            receipt = self.processor.charge(
                self.application_id, self.amount, self.currency,
            )
        except PaymentError as e:
            logger.warning(f"Payment failed for application {self.application_id}: {e.message}")
            receipt, failure = None, e.message
        except Exception:
            logger.exception(f"Unexpected error charging application {self.application_id}")
            receipt, failure = None, "Payment could not be processed. Please try again."
        else:
            failure = None

        with self._lock:
            if self.closed:
                logger.debug(f"Dropping charge outcome for closed session {self.application_id}")
                return
            if failure is None:
                self.receipt = receipt
                result = progress.complete_payment(self.state)
            else:
                result = progress.fail_payment(self.state, failure)
            if result.ok:
                self.state = result.state

    def close(self):
        """Tear the session down, cancelling any charge that has not fired yet."""
        with self._lock:
            self.closed = True
            self._pending_charge = None
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
