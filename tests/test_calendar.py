"""Tests for the operating-day calendar."""

import pytest

from capacity.calendar import OperatingCalendar
from capacity.models import CapacityDay
from tests.dates import MONDAY, SATURDAY, SUNDAY, THURSDAY, TUESDAY, WEDNESDAY

pytestmark = pytest.mark.django_db


class TestDefaultRule:
    def test_tuesday_to_thursday_are_operating_days(self):
        calendar = OperatingCalendar()
        assert calendar.is_operating_day(TUESDAY)
        assert calendar.is_operating_day(WEDNESDAY)

    def test_other_weekdays_are_closed(self):
        calendar = OperatingCalendar()
        assert not calendar.is_operating_day(SUNDAY)
        assert not calendar.is_operating_day(MONDAY)
        assert not calendar.is_operating_day(SATURDAY)

    def test_weekdays_come_from_settings(self, settings):
        settings.ALLOCATION = {**settings.ALLOCATION, 'OPERATING_WEEKDAYS': [0]}
        calendar = OperatingCalendar()
        assert calendar.is_operating_day(MONDAY)
        assert not calendar.is_operating_day(TUESDAY)

    def test_allowed_weekday_names(self):
        assert OperatingCalendar().allowed_weekday_names() == ['Tuesday', 'Wednesday', 'Thursday']


class TestOverrides:
    def test_override_opens_a_closed_day(self):
        CapacityDay.objects.create(date=SUNDAY, is_operating_day=True, is_override=True)
        calendar = OperatingCalendar()
        assert calendar.is_operating_day(SUNDAY)
        assert calendar.has_override(SUNDAY)

    def test_override_closes_an_operating_day(self):
        CapacityDay.objects.create(date=TUESDAY, is_operating_day=False, is_override=True)
        assert not OperatingCalendar().is_operating_day(TUESDAY)

    def test_row_without_override_flag_does_not_change_calendar(self):
        CapacityDay.objects.create(date=SUNDAY, is_operating_day=True, is_override=False)
        calendar = OperatingCalendar()
        assert not calendar.is_operating_day(SUNDAY)
        assert not calendar.has_override(SUNDAY)


class TestOperatingDays:
    def test_two_week_window(self):
        days = OperatingCalendar().operating_days(SATURDAY, 14)
        assert [d.isoformat() for d in days] == [
            '2026-10-20', '2026-10-21', '2026-10-22',
            '2026-10-27', '2026-10-28', '2026-10-29',
        ]

    def test_window_respects_overrides(self):
        CapacityDay.objects.create(date=SUNDAY, is_operating_day=True, is_override=True)
        CapacityDay.objects.create(date=WEDNESDAY, is_operating_day=False, is_override=True)
        days = OperatingCalendar().operating_days(SATURDAY, 7)
        assert days == [SUNDAY, TUESDAY, THURSDAY]

    def test_empty_window(self):
        assert OperatingCalendar().operating_days(SATURDAY, 0) == []
