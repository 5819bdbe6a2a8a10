from io import StringIO

import pytest
from django.core.management import CommandError, call_command

from capacity.models import CapacityDay
from help_requests.models import ServiceRequest
from tests.dates import TUESDAY

pytestmark = pytest.mark.django_db


def test_release_command(make_request):
    CapacityDay.objects.create(date=TUESDAY, max_by_category={'food': 1, 'general': 1})
    make_request()
    make_request()
    out = StringIO()

    call_command('release_tickets', '2026-10-20', '--category', 'food', stdout=out)

    output = out.getvalue()
    assert 'food: released 1, remaining 1' in output
    assert 'Released 1 tickets for 2026-10-20' in output
    assert ServiceRequest.objects.filter(ticket_number__isnull=False).count() == 1


def test_rejects_non_operating_day():
    with pytest.raises(CommandError, match='Tuesday, Wednesday, Thursday'):
        call_command('release_tickets', '2026-10-19')


def test_rejects_bad_date():
    with pytest.raises(CommandError, match='Invalid date'):
        call_command('release_tickets', 'next-tuesday')
