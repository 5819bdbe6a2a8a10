"""Shared fixtures for the ticket allocation tests."""

import datetime
import itertools

import pytest
from django.contrib.auth import get_user_model
from django.utils import timezone

from help_requests.models import APPROVED, ServiceRequest
from tests.dates import TUESDAY

BASE_SUBMITTED_AT = timezone.make_aware(datetime.datetime(2026, 10, 1, 9, 0))


@pytest.fixture
def make_user():
    counter = itertools.count(1)

    def _make(**kwargs):
        n = next(counter)
        username = kwargs.pop('username', f'visitor{n}')
        return get_user_model().objects.create_user(username=username, password='pass12345', **kwargs)

    return _make


@pytest.fixture
def make_request(make_user):
    """Create a ServiceRequest; each call is submitted one minute after the last."""
    counter = itertools.count()

    def _make(category='food', status=APPROVED, visit_date=TUESDAY, minutes=None, requester=None, **kwargs):
        n = next(counter)
        if minutes is None:
            minutes = n
        return ServiceRequest.objects.create(
            requester=requester or make_user(),
            category=category,
            status=status,
            visit_date=visit_date,
            submitted_at=BASE_SUBMITTED_AT + datetime.timedelta(minutes=minutes),
            **kwargs,
        )

    return _make


@pytest.fixture
def staff_user(make_user):
    return make_user(username='coordinator', is_staff=True)
