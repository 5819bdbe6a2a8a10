"""Tests for RequestQueue ordering and filtering."""

import pytest

from help_requests.models import CANCELLED, PENDING, ServiceRequest
from help_requests.queue import RequestQueue
from help_requests.tickets import TicketIssuer
from tests.dates import TUESDAY, WEDNESDAY

pytestmark = pytest.mark.django_db


class TestFetch:
    def test_only_approved_requests_for_the_slot(self, make_request):
        wanted = make_request()
        make_request(status=PENDING)
        make_request(status=CANCELLED)
        make_request(category='general')
        make_request(visit_date=WEDNESDAY)

        fetched = RequestQueue().fetch(TUESDAY, 'food', 10)

        assert [r.pk for r in fetched] == [wanted.pk]

    def test_orders_by_submission_time(self, make_request):
        late = make_request(minutes=30)
        early = make_request(minutes=5)
        middle = make_request(minutes=10)

        fetched = RequestQueue().fetch(TUESDAY, 'food', 10)

        assert [r.pk for r in fetched] == [early.pk, middle.pk, late.pk]

    def test_ties_broken_by_id(self, make_request):
        first = make_request(minutes=1)
        second = make_request(minutes=1)
        third = make_request(minutes=1)

        fetched = RequestQueue().fetch(TUESDAY, 'food', 10)

        assert [r.pk for r in fetched] == sorted([first.pk, second.pk, third.pk])

    def test_limit_bounds_the_result(self, make_request):
        requests = [make_request() for _ in range(5)]
        fetched = RequestQueue().fetch(TUESDAY, 'food', 2)
        assert [r.pk for r in fetched] == [requests[0].pk, requests[1].pk]

    def test_zero_limit_returns_nothing(self, make_request):
        make_request()
        assert RequestQueue().fetch(TUESDAY, 'food', 0) == []

    def test_priority_filter_does_not_reorder(self, make_request):
        make_request(priority='normal', minutes=1)
        urgent_late = make_request(priority='urgent', minutes=20)
        urgent_early = make_request(priority='urgent', minutes=10)

        fetched = RequestQueue().fetch(TUESDAY, 'food', 10, priorities=['urgent'])

        assert [r.pk for r in fetched] == [urgent_early.pk, urgent_late.pk]

    def test_priority_is_ignored_without_filter(self, make_request):
        normal = make_request(priority='normal', minutes=1)
        urgent = make_request(priority='urgent', minutes=2)

        fetched = RequestQueue().fetch(TUESDAY, 'food', 10)

        assert [r.pk for r in fetched] == [normal.pk, urgent.pk]

    def test_exclude_skips_ids(self, make_request):
        first = make_request()
        second = make_request()
        fetched = RequestQueue().fetch(TUESDAY, 'food', 10, exclude={first.pk})
        assert [r.pk for r in fetched] == [second.pk]

    def test_ticketed_requests_leave_the_queue(self, make_request):
        first = make_request()
        second = make_request()
        TicketIssuer().issue(first)

        fetched = RequestQueue().fetch(TUESDAY, 'food', 10)

        assert [r.pk for r in fetched] == [second.pk]


class TestCounts:
    def test_waiting_demand_and_issued_counts(self, make_request):
        issued = make_request()
        make_request()
        make_request(status=PENDING)
        make_request(status=CANCELLED)
        TicketIssuer().issue(issued)

        queue = RequestQueue()
        assert queue.waiting_count(TUESDAY, 'food') == 1
        assert queue.demand_count(TUESDAY, 'food') == 2
        assert queue.issued_count(TUESDAY, 'food') == 1

    def test_counts_are_zero_for_empty_slot(self):
        queue = RequestQueue()
        assert queue.waiting_count(TUESDAY, 'general') == 0
        assert queue.issued_count(TUESDAY, 'general') == 0


class TestPosition:
    def test_position_follows_submission_order(self, make_request):
        make_request(minutes=1)
        make_request(minutes=2)
        third = make_request(minutes=3)
        assert RequestQueue().position_of(third) == 3

    def test_position_with_equal_submission_times(self, make_request):
        first = make_request(minutes=1)
        second = make_request(minutes=1)
        queue = RequestQueue()
        assert queue.position_of(first) == 1
        assert queue.position_of(second) == 2

    def test_no_position_once_ticketed(self, make_request):
        request = make_request()
        TicketIssuer().issue(request)
        assert RequestQueue().position_of(ServiceRequest.objects.get(pk=request.pk)) is None
