"""Read-only queue and staffing figures for the admin dashboard.

Nothing here locks rows, so the numbers may trail a release that is still
running. Missing rows count as zero.
"""
import datetime
import logging
from dataclasses import asdict, dataclass

from django.conf import settings

from capacity.calendar import OperatingCalendar
from capacity.registry import CapacityRegistry
from staffing.models import Shift

from .models import CATEGORIES
from .queue import RequestQueue

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OverbookingWarning:
    date: datetime.date
    category: str
    demand: int
    capacity: int
    excess: int
    overbooked: bool

    def to_dict(self):
        data = asdict(self)
        data['date'] = self.date.isoformat()
        return data


@dataclass(frozen=True)
class CoverageGap:
    date: datetime.date
    required: int
    assigned: int
    coverage_percent: float
    gap: int
    priority: str
    below_threshold: bool

    def to_dict(self):
        data = asdict(self)
        data['date'] = self.date.isoformat()
        return data


def coverage_priority(percent):
    if percent < 50:
        return 'high'
    if percent < 80:
        return 'medium'
    return 'low'


class QueueStatusReporter:

    def __init__(self, calendar=None, registry=None, queue=None):
        self.calendar = calendar or OperatingCalendar()
        self.registry = registry or CapacityRegistry(self.calendar)
        self.queue = queue or RequestQueue()

    def depth(self, day, category):
        """Pending plus approved requests booked for the slot."""
        return self.queue.demand_count(day, category)

    def overbooking_warning(self, day, category):
        demand = self.depth(day, category)
        capacity = self.registry.limit_for(day, category)
        excess = max(demand - capacity, 0)
        return OverbookingWarning(
            date=day,
            category=category,
            demand=demand,
            capacity=capacity,
            excess=excess,
            overbooked=excess > 0,
        )

    def estimated_wait(self, day, category, position):
        """Rough wait in minutes for someone ``position`` places back.

        Uses the configured average service time; it is an estimate only.
        """
        conf = settings.ALLOCATION
        minutes = conf.get('SERVICE_MINUTES_BY_CATEGORY', {}).get(category, conf['AVERAGE_SERVICE_MINUTES'])
        return max(int(position), 0) * minutes

    def coverage_gap(self, day):
        shifts = Shift.objects.filter(date=day)
        required = shifts.count()
        assigned = shifts.filter(assigned_volunteer__isnull=False).count()
        percent = 100.0 if required == 0 else round(assigned * 100.0 / required, 1)
        threshold = settings.ALLOCATION.get('COVERAGE_THRESHOLD', 80)
        return CoverageGap(
            date=day,
            required=required,
            assigned=assigned,
            coverage_percent=percent,
            gap=max(required - assigned, 0),
            priority=coverage_priority(percent),
            below_threshold=required > 0 and percent < threshold,
        )

    def capacity_warnings(self, start, days=None, categories=CATEGORIES):
        """Overbooked slots on the operating days in the window starting at ``start``."""
        if days is None:
            days = settings.ALLOCATION.get('WARNING_WINDOW_DAYS', 7)
        warnings = []
        for day in self.calendar.operating_days(start, days):
            for category in categories:
                warning = self.overbooking_warning(day, category)
                if warning.overbooked:
                    warnings.append(warning)
        if warnings:
            logger.info('%s overbooked slots from %s', len(warnings), start)
        return warnings

    def coverage_gaps(self, start, days=None):
        if days is None:
            days = settings.ALLOCATION.get('WARNING_WINDOW_DAYS', 7)
        gaps = []
        for offset in range(max(days, 0)):
            gap = self.coverage_gap(start + datetime.timedelta(days=offset))
            if gap.below_threshold:
                gaps.append(gap)
        return gaps

    def queue_snapshot(self, day, categories=CATEGORIES):
        snapshot = {
            'date': day.isoformat(),
            'is_operating_day': self.calendar.is_operating_day(day),
            'categories': {},
        }
        for category in categories:
            capacity = self.registry.limit_for(day, category)
            issued = self.queue.issued_count(day, category)
            snapshot['categories'][category] = {
                'capacity': capacity,
                'issued': issued,
                'available': max(capacity - issued, 0),
                'waiting': self.queue.waiting_count(day, category),
                'demand': self.depth(day, category),
            }
        return snapshot

    def ticket_eta(self, service_request):
        """Queue position and estimated wait for one request.

        Returns dict: {
            'request_id', 'status', 'ticket_number',
            'position', 'requests_ahead', 'eta_minutes',
        }
        ``position`` and ``eta_minutes`` are None once the request has left
        the approved queue.
        """
        position = self.queue.position_of(service_request)
        ahead = None if position is None else position - 1
        eta = None
        if ahead is not None:
            eta = self.estimated_wait(service_request.visit_date, service_request.category, ahead)
        return {
            'request_id': service_request.pk,
            'status': service_request.status,
            'ticket_number': service_request.ticket_number,
            'position': position,
            'requests_ahead': ahead,
            'eta_minutes': eta,
        }
