"""Resolution of the ticket limit for a date and service category."""
import logging

from django.conf import settings

from help_requests.exceptions import ConfigurationError

from .calendar import OperatingCalendar
from .models import CapacityDay

logger = logging.getLogger(__name__)


class CapacityRegistry:
    """Single source of truth for how many tickets a slot may receive.

    ``limit_for`` is total: closed days give 0, a ``CapacityDay`` row gives
    its configured value, anything else gives the default table. Bad
    configuration is logged and treated as 0 rather than raised.
    """

    def __init__(self, calendar=None):
        self.calendar = calendar or OperatingCalendar()

    def default_limit(self, category):
        conf = settings.ALLOCATION
        table = conf.get('DEFAULT_CAPACITY') or {}
        try:
            if not isinstance(table, dict):
                raise ConfigurationError(f'default capacity table is not a mapping: {table!r}')
            value = table.get(category, conf.get('FALLBACK_CAPACITY', 0))
            return _checked(value, f'default capacity for {category!r}')
        except ConfigurationError as exc:
            logger.warning('Clamping capacity to 0: %s', exc)
            return 0

    def limit_for(self, day, category):
        if not self.calendar.is_operating_day(day):
            return 0

        row = CapacityDay.objects.filter(date=day).first()
        if row is None:
            return self.default_limit(category)

        if not row.is_operating_day:
            return 0
        try:
            return row.limit_for_category(category)
        except ConfigurationError as exc:
            logger.warning('Clamping capacity to 0: %s', exc)
            return 0


def _checked(value, label):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f'{label} is not an integer: {value!r}')
    if value < 0:
        raise ConfigurationError(f'{label} is negative: {value}')
    return value
