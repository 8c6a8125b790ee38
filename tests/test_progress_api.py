"""API tests for server-side job progress."""
from decimal import Decimal
from unittest.mock import Mock, patch

import pytest

from apps.jobs import services
from apps.jobs.models import Job, JobApplication, Review
from apps.payments.models import Transaction
from tests.conftest import make_worker


def progress_url(application):
    return f'/jobs/applications/{application.pk}/progress/'


def retry_url(application):
    return f'/jobs/applications/{application.pk}/payment/retry/'


def post_action(api, application, action, **payload):
    return api.post(progress_url(application), {'action': action, **payload}, format='json')


def move_to(application, status):
    application.status = status
    application.save()
    Job.objects.filter(pk=application.job_id).update(status='in_progress')
    application.refresh_from_db()


@pytest.mark.django_db
class TestProgressView:

    def test_get_progress_for_each_participant(self, api_for, application, client_user, worker_user):
        response = api_for(client_user).get(progress_url(application))
        assert response.status_code == 200
        assert response.data['current_stage'] == 1
        assert response.data['stage_name'] == 'Application Pending'
        assert response.data['role'] == 'client'
        assert response.data['available_action'] == 'accept_application'
        assert len(response.data['stages']) == 8

        response = api_for(worker_user).get(progress_url(application))
        assert response.data['role'] == 'worker'
        assert response.data['available_action'] is None

    def test_non_participant_is_forbidden(self, api_for, application, outsider_user):
        response = api_for(outsider_user).get(progress_url(application))
        assert response.status_code == 403

        response = post_action(api_for(outsider_user), application, 'accept_application')
        assert response.status_code == 403
        application.refresh_from_db()
        assert application.status == 'pending'

    def test_unknown_application(self, api_for, client_user):
        response = api_for(client_user).get('/jobs/applications/9999/progress/')
        assert response.status_code == 404

    def test_anonymous_is_rejected(self, api_for, application):
        response = api_for(None).get(progress_url(application))
        assert response.status_code == 401

    def test_full_scenario(self, api_for, application, client_user, worker_user, mailoutbox):
        client_api = api_for(client_user)
        worker_api = api_for(worker_user)

        assert post_action(client_api, application, 'accept_application').data['current_stage'] == 2
        assert post_action(worker_api, application, 'start_work').data['current_stage'] == 3
        assert post_action(worker_api, application, 'mark_completed').data['current_stage'] == 4

        response = post_action(client_api, application, 'release_payment', payment_method='online')
        assert response.status_code == 200
        assert response.data['current_stage'] == 6
        assert response.data['payment_processing'] is False
        assert response.data['payment']['amount'] == '4500.00'

        response = post_action(client_api, application, 'submit_review', review='Great work!', rating=4)
        assert response.status_code == 200
        assert response.data['current_stage'] == 7
        assert response.data['review'] == 'Great work!'
        assert response.data['rating'] == 4

        response = post_action(worker_api, application, 'close_job')
        assert response.data['current_stage'] == 8
        assert response.data['available_action'] is None

        application.refresh_from_db()
        assert application.status == 'closed'
        assert application.closed_at is not None
        assert application.reviewed_at is not None
        job = application.job
        job.refresh_from_db()
        assert job.status == 'completed'
        assert job.completed_at is not None
        assert job.assigned_worker == worker_user.worker

        transactions = Transaction.objects.filter(application=application)
        assert transactions.count() == 1
        assert transactions.first().status == 'completed'
        assert transactions.first().amount == Decimal('4500.00')

        review = Review.objects.get(application=application)
        assert review.rating == 4
        assert review.reviewee == worker_user
        assert worker_user.get_rating_stats()['average_rating'] == 4.0

        assert len(mailoutbox) >= 6

    def test_worker_cannot_take_client_action(self, api_for, application, worker_user):
        response = post_action(api_for(worker_user), application, 'accept_application')
        assert response.status_code == 400
        assert response.data['action'] == 'accept_application'
        assert response.data['stage'] == 1
        application.refresh_from_db()
        assert application.status == 'pending'

    def test_out_of_order_action_is_rejected(self, api_for, application, worker_user):
        move_to(application, 'accepted')
        response = post_action(api_for(worker_user), application, 'mark_completed')
        assert response.status_code == 400
        application.refresh_from_db()
        assert application.status == 'accepted'

    def test_invalid_review_does_not_advance(self, api_for, application, client_user):
        move_to(application, 'payment_successful')
        api = api_for(client_user)

        assert post_action(api, application, 'submit_review', review='   ', rating=4).status_code == 400
        assert post_action(api, application, 'submit_review', review='Great work!', rating=0).status_code == 400
        assert post_action(api, application, 'submit_review', review='Great work!').status_code == 400

        application.refresh_from_db()
        assert application.stage == 6
        assert not Review.objects.filter(application=application).exists()

    def test_stage_six_is_either_or(self, api_for, application, client_user, worker_user):
        move_to(application, 'payment_successful')
        response = post_action(api_for(worker_user), application, 'accept_payment')
        assert response.data['current_stage'] == 7

        response = post_action(api_for(client_user), application, 'submit_review', review='Nice', rating=5)
        assert response.status_code == 400
        application.refresh_from_db()
        assert application.stage == 7
        assert application.payment_confirmed_at is not None

    def test_unknown_action_is_a_bad_request(self, api_for, application, client_user):
        response = post_action(api_for(client_user), application, 'cancel_everything')
        assert response.status_code == 400

    def test_rejected_application_cannot_progress(self, api_for, application, client_user):
        application.status = 'rejected'
        application.save()
        response = post_action(api_for(client_user), application, 'accept_application')
        assert response.status_code == 400
        assert response.data['stage'] == 0

    def test_accept_rejects_other_pending_applications(self, api_for, job, application, client_user):
        other = JobApplication.objects.create(job=job, worker=make_worker('saman').worker)

        response = post_action(api_for(client_user), application, 'accept_application')
        assert response.status_code == 200

        other.refresh_from_db()
        job.refresh_from_db()
        assert other.status == 'rejected'
        assert job.status == 'in_progress'
        assert job.assigned_worker_id == application.worker_id

    def test_accept_on_filled_job_is_rejected(self, api_for, job, application, client_user):
        Job.objects.filter(pk=job.pk).update(status='in_progress')
        response = post_action(api_for(client_user), application, 'accept_application')
        assert response.status_code == 400
        application.refresh_from_db()
        assert application.status == 'pending'


@pytest.mark.django_db
class TestPaymentFailure:

    def test_failed_charge_then_retry(self, api_for, application, client_user, worker_user, settings):
        move_to(application, 'work_completed')
        settings.PAYMENT_PROCESSOR = 'apps.payments.processors.MockGatewayProcessor'
        settings.PAYMENT_MOCK_SUCCESS_RATE = 0.0

        response = post_action(
            api_for(client_user), application, 'release_payment',
            payment_method='online', amount='3000.00', notes='Paid in full'
        )
        assert response.status_code == 200
        assert response.data['current_stage'] == 5
        assert response.data['payment_processing'] is False
        assert response.data['payment_error']

        failed = Transaction.objects.get(application=application)
        assert failed.status == 'failed'
        assert failed.amount == Decimal('3000.00')

        assert api_for(worker_user).post(retry_url(application)).status_code == 403

        settings.PAYMENT_MOCK_SUCCESS_RATE = 1.0
        response = api_for(client_user).post(retry_url(application))
        assert response.status_code == 200
        assert response.data['current_stage'] == 6
        assert response.data['payment_error'] == ''

        statuses = sorted(Transaction.objects.filter(application=application).values_list('status', flat=True))
        assert statuses == ['completed', 'failed']

    def test_retry_without_failure_is_rejected(self, api_for, application, client_user):
        move_to(application, 'payment_successful')
        response = api_for(client_user).post(retry_url(application))
        assert response.status_code == 400
        application.refresh_from_db()
        assert application.stage == 6


def gateway_reply(payload):
    response = Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = payload
    return response


@pytest.fixture
def http_gateway(settings):
    settings.PAYMENT_PROCESSOR = 'apps.payments.processors.HttpGatewayProcessor'
    settings.PAYMENT_GATEWAY_BASE_URL = 'https://gateway.example.com/v1'
    settings.PAYMENT_GATEWAY_SECRET_KEY = 'sk_test'
    with patch('apps.payments.processors.requests.post') as mock_post:
        yield mock_post


@pytest.mark.django_db
class TestGatewayPayments:

    def test_malformed_gateway_reply_fails_the_charge(self, api_for, application, client_user, http_gateway):
        move_to(application, 'work_completed')
        http_gateway.return_value = gateway_reply(['unexpected'])

        response = post_action(api_for(client_user), application, 'release_payment', payment_method='online')
        assert response.status_code == 200
        assert response.data['current_stage'] == 5
        assert response.data['payment_processing'] is False
        assert response.data['payment_error']
        assert list(Transaction.objects.filter(application=application).values_list('status', flat=True)) == ['failed']

        http_gateway.return_value = gateway_reply({'status': 'success', 'data': {'reference': 'GW-42'}})
        response = api_for(client_user).post(retry_url(application))
        assert response.status_code == 200
        assert response.data['current_stage'] == 6
        assert Transaction.objects.get(application=application, status='completed').reference == 'GW-42'

    def test_unexpected_processor_error_fails_the_charge(self, application, client_user):
        move_to(application, 'work_completed')
        broken = Mock()
        broken.name = 'broken'
        broken.charge.side_effect = RuntimeError("socket closed")

        application, result = services.perform_action(
            application, 'client', 'release_payment', client_user, processor=broken
        )

        assert result.ok
        assert application.stage == 5
        assert application.payment_processing is False
        assert application.payment_error
        assert Transaction.objects.get(application=application).status == 'failed'

    def test_cash_payment_skips_the_gateway(self, api_for, application, client_user, worker_user, http_gateway):
        move_to(application, 'work_completed')

        response = post_action(
            api_for(client_user), application, 'release_payment',
            payment_method='physical', notes='Paid on site'
        )
        assert response.status_code == 200
        assert response.data['current_stage'] == 6
        assert response.data['payment']['method'] == 'physical'
        http_gateway.assert_not_called()

        record = Transaction.objects.get(application=application)
        assert record.processor == 'cash'
        assert record.status == 'completed'
        assert record.reference.startswith('CASH-')

        response = post_action(api_for(worker_user), application, 'accept_payment')
        assert response.data['current_stage'] == 7


@pytest.mark.django_db
class TestRespondingToApplications:

    def test_reject_does_not_overwrite_accepted_application(self, application):
        stale = JobApplication.objects.get(pk=application.pk)
        JobApplication.objects.filter(pk=application.pk).update(status='accepted')

        refreshed, changed = services.reject_application(stale)

        assert changed is False
        assert refreshed.status == 'accepted'
        application.refresh_from_db()
        assert application.status == 'accepted'

    def test_withdraw_does_not_overwrite_accepted_application(self, application):
        stale = JobApplication.objects.get(pk=application.pk)
        JobApplication.objects.filter(pk=application.pk).update(status='accepted')

        _, changed = services.withdraw_application(stale)

        assert changed is False
        application.refresh_from_db()
        assert application.status == 'accepted'

    def test_reject_only_touches_status(self, application):
        stale = JobApplication.objects.get(pk=application.pk)
        JobApplication.objects.filter(pk=application.pk).update(cover_letter='Updated letter')

        refreshed, changed = services.reject_application(stale)

        assert changed is True
        application.refresh_from_db()
        assert application.status == 'rejected'
        assert application.responded_at is not None
        assert application.cover_letter == 'Updated letter'
