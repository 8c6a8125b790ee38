"""
Pytest fixtures for the Workie.lk backend tests.
"""
from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from apps.jobs.models import Job, JobApplication
from apps.users.models import Client, User, Worker


def make_client(username, **kwargs):
    user = User.objects.create_user(
        username=username,
        password='pass1234!',
        email=kwargs.pop('email', f'{username}@example.com'),
        first_name=kwargs.pop('first_name', username.capitalize()),
        **kwargs
    )
    Client.objects.create(user=user, location='Colombo')
    return user


def make_worker(username, **kwargs):
    user = User.objects.create_user(
        username=username,
        password='pass1234!',
        email=kwargs.pop('email', f'{username}@example.com'),
        first_name=kwargs.pop('first_name', username.capitalize()),
        **kwargs
    )
    Worker.objects.create(user=user, location='Kandy', skills='plumbing, tiling')
    return user


@pytest.fixture
def client_user(db):
    return make_client('kamal')


@pytest.fixture
def worker_user(db):
    return make_worker('nimal')


@pytest.fixture
def other_worker_user(db):
    return make_worker('sunil')


@pytest.fixture
def outsider_user(db):
    return make_client('ruwan')


@pytest.fixture
def job(client_user):
    return Job.objects.create(
        client=client_user,
        title='Fix kitchen sink',
        description='The kitchen sink is leaking under the basin.',
        category='plumbing',
        skills='plumbing',
        location='12 Galle Road',
        city='Colombo',
        budget_amount=Decimal('5000.00'),
    )


@pytest.fixture
def application(job, worker_user):
    return JobApplication.objects.create(
        job=job,
        worker=worker_user.worker,
        cover_letter='I have fixed many sinks.',
        proposed_amount=Decimal('4500.00'),
    )


@pytest.fixture
def api_for():
    """Return an APIClient authenticated as the given user."""
    def _api_for(user):
        api = APIClient()
        if user is not None:
            api.force_authenticate(user=user)
        return api
    return _api_for
