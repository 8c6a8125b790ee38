"""Server-side progress transitions.

The application record is the only copy of a job's progress that counts.
Participants send transition requests, and everything here re-reads the row
under a lock, runs it through the state machine and writes the result back.
"""
import logging
from decimal import Decimal

from django.db import transaction
from django.utils import timezone

from apps.payments.models import Transaction
from apps.payments.processors import CashPaymentProcessor, PaymentError, get_payment_processor

from . import progress
from .models import JobApplication, Review
from .utils import notify_progress

logger = logging.getLogger(__name__)


def _off_track(application, role, action):
    return progress.Err(progress.InvalidTransition(
        action=getattr(action, 'value', action),
        role=getattr(role, 'value', role),
        stage=0,
        reason=f"Application is {application.get_status_display().lower()} and can no longer progress.",
    ))


def _locked(application_id):
    return (
        JobApplication.objects
        .select_for_update()
        .select_related('job', 'job__client', 'worker', 'worker__user')
        .get(pk=application_id)
    )


def perform_action(application, role, action, actor, review=None, rating=None,
                   payment_method=None, amount=None, notes='', processor=None):
    """Apply a participant's transition request.

    Returns ``(application, result)`` where ``result`` is the state machine's
    ``Ok``/``Err``. A released payment is charged right away, so a successful
    ``release_payment`` usually comes back at Payment Successful.
    """
    with transaction.atomic():
        application = _locked(application.pk)
        if application.stage is None:
            return application, _off_track(application, role, action)

        result = progress.transition(
            application.progress_state(), role, action, review=review, rating=rating
        )
        if not result.ok:
            logger.warning(
                f"Rejected {action} by {role} on application {application.pk}: {result.error.reason}"
            )
            return application, result

        job = application.job
        action = progress.Action(action)

        if action is progress.Action.ACCEPT_APPLICATION:
            if job.status != 'open':
                return application, progress.Err(progress.InvalidTransition(
                    action=action.value, role=getattr(role, 'value', role), stage=application.stage,
                    reason="Job is no longer open.",
                ))
            job.assigned_worker = application.worker
            job.status = 'in_progress'
            job.save()
            rejected = (
                JobApplication.objects
                .filter(job=job, status='pending')
                .exclude(pk=application.pk)
                .update(status='rejected', responded_at=timezone.now())
            )
            if rejected:
                logger.info(f"Rejected {rejected} other pending applications for job {job.pk}")

        elif action is progress.Action.RELEASE_PAYMENT:
            application.payment_method = payment_method or 'online'
            application.payment_amount = Decimal(str(
                amount if amount is not None else (application.proposed_amount or job.budget_amount)
            ))
            application.payment_notes = notes or ''

        elif action is progress.Action.SUBMIT_REVIEW:
            Review.objects.create(
                job=job,
                application=application,
                reviewer=job.client,
                reviewee=application.worker.user,
                rating=result.state.rating,
                comment=result.state.review,
                review_type='client_to_worker',
            )

        elif action is progress.Action.CLOSE_JOB:
            job.status = 'completed'
            job.completed_at = timezone.now()
            job.save()

        application.apply_progress_state(result.state)
        application.save()
        logger.info(
            f"Application {application.pk} moved to stage {application.stage} by {role} ({action.value})"
        )

    recipient = application.worker.user if role == progress.Role.CLIENT.value else job.client
    notify_progress(application, action.value, actor, recipient)

    if application.payment_processing:
        application, settled = settle_payment(application, processor=processor)
        if settled.ok:
            result = settled
    return application, result


def settle_payment(application, processor=None):
    """Charge the released payment and feed the outcome back into the state machine.

    Cash is handed over in person, so a physical payment never reaches the
    configured gateway and is settled as soon as it is released.
    """
    if application.payment_method == 'physical':
        processor = CashPaymentProcessor()
    else:
        processor = processor or get_payment_processor()
    job = application.job
    record = Transaction.objects.create(
        application=application,
        amount=application.payment_amount,
        currency=job.currency,
        payment_method=application.payment_method or 'online',
        processor=processor.name,
    )
    try:
        receipt = processor.charge(
            application.pk,
            application.payment_amount,
            job.currency,
            method=record.payment_method,
            description=job.title,
        )
    except PaymentError as e:
        logger.error(f"Payment for application {application.pk} failed: {e.message}")
        record.mark_failed(e.message)
        failure = e.message
    except Exception:
        # every charge attempt ends in complete or fail
        logger.exception(f"Unexpected error charging application {application.pk} via {processor.name}")
        failure = "Payment could not be processed. Please try again."
        record.mark_failed(failure)
    else:
        record.mark_completed(receipt)
        failure = None

    with transaction.atomic():
        application = _locked(application.pk)
        state = application.progress_state()
        if failure is None:
            result = progress.complete_payment(state)
        else:
            result = progress.fail_payment(state, failure)
        if result.ok:
            application.apply_progress_state(result.state)
            application.save()
    return application, result


def retry_payment(application, processor=None):
    """Charge again after a failed attempt; only the job's client calls this."""
    with transaction.atomic():
        application = _locked(application.pk)
        if application.stage is None:
            return application, _off_track(application, progress.Role.CLIENT, None)
        result = progress.retry_payment(application.progress_state())
        if not result.ok:
            return application, result
        application.apply_progress_state(result.state)
        application.save()
    return settle_payment(application, processor=processor)


def _respond_to_pending(application_id, new_status, stamp_response):
    with transaction.atomic():
        application = _locked(application_id)
        if application.status != 'pending':
            return application, False
        application.status = new_status
        update_fields = ['status', 'updated_at']
        if stamp_response:
            application.responded_at = timezone.now()
            update_fields.append('responded_at')
        application.save(update_fields=update_fields)
    logger.info(f"Application {application.pk} {new_status}")
    return application, True


def reject_application(application):
    """Client turns down a pending application. Returns ``(application, changed)``."""
    return _respond_to_pending(application.pk, 'rejected', stamp_response=True)


def withdraw_application(application):
    """Worker pulls a pending application. Returns ``(application, changed)``."""
    return _respond_to_pending(application.pk, 'withdrawn', stamp_response=False)
