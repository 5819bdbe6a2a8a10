"""Operating-day rules for help-request visits."""
import datetime
import logging

from django.conf import settings

from .models import CapacityDay

logger = logging.getLogger(__name__)


class OperatingCalendar:
    """Decides whether a date accepts visits.

    The default rule is a fixed weekday set (``ALLOCATION['OPERATING_WEEKDAYS']``,
    Monday is 0). A ``CapacityDay`` marked as an override replaces that rule
    for its date.
    """

    def __init__(self, weekdays=None):
        if weekdays is None:
            weekdays = settings.ALLOCATION['OPERATING_WEEKDAYS']
        self.weekdays = frozenset(weekdays)

    def is_default_operating_day(self, day):
        return day.weekday() in self.weekdays

    def override_for(self, day):
        return CapacityDay.objects.filter(date=day, is_override=True).first()

    def has_override(self, day):
        return CapacityDay.objects.filter(date=day, is_override=True).exists()

    def is_operating_day(self, day):
        override = self.override_for(day)
        if override is not None:
            return override.is_operating_day
        return self.is_default_operating_day(day)

    def operating_days(self, start, days):
        """Return the operating dates among the ``days`` dates starting at ``start``."""
        window = [start + datetime.timedelta(days=offset) for offset in range(max(days, 0))]
        overrides = {
            row.date: row.is_operating_day
            for row in CapacityDay.objects.filter(date__in=window, is_override=True)
        }
        result = []
        for day in window:
            if overrides.get(day, self.is_default_operating_day(day)):
                result.append(day)
        logger.debug('Operating days from %s over %s days: %s', start, days, result)
        return result

    def allowed_weekday_names(self):
        # 2024-01-01 was a Monday
        monday = datetime.date(2024, 1, 1)
        return [(monday + datetime.timedelta(days=d)).strftime('%A') for d in sorted(self.weekdays)]
