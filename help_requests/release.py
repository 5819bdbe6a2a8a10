"""Batch release of visit tickets for one date.

Each category is handled on its own: the capacity registry gives the limit,
the queue gives the oldest approved requests, and the issuer converts them
one at a time. Per-request errors are collected rather than raised so an
operator always sees what was released.
"""
import datetime
import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Dict, List, Optional

from django.db import DatabaseError, transaction
from django.utils import timezone

from capacity.calendar import OperatingCalendar
from capacity.registry import CapacityRegistry
from notifications.sms_service import notify_ticket_issued

from .exceptions import CapacityExhaustedError, InvalidReleaseDayError, InvalidStateError, PersistenceError
from .models import CATEGORIES
from .queue import RequestQueue
from .tickets import TicketIssuer

logger = logging.getLogger(__name__)


@dataclass
class ReleaseFailure:
    request_id: Optional[int]
    category: str
    reason: str

    def to_dict(self):
        return {'request_id': self.request_id, 'category': self.category, 'reason': self.reason}


@dataclass
class ReleasedTicket:
    request_id: int
    category: str
    ticket_number: str

    def to_dict(self):
        return {'request_id': self.request_id, 'category': self.category, 'ticket_number': self.ticket_number}


@dataclass
class ReleaseResult:
    release_date: datetime.date
    per_category_released: Dict[str, int] = field(default_factory=dict)
    remaining_in_queue: Dict[str, int] = field(default_factory=dict)
    released: List[ReleasedTicket] = field(default_factory=list)
    failures: List[ReleaseFailure] = field(default_factory=list)
    timed_out: bool = False

    @property
    def total_released(self):
        return sum(self.per_category_released.values())

    @property
    def total_remaining(self):
        return sum(self.remaining_in_queue.values())

    def to_dict(self):
        return {
            'release_date': self.release_date.isoformat(),
            'total_released': self.total_released,
            'per_category_released': dict(self.per_category_released),
            'remaining_in_queue': dict(self.remaining_in_queue),
            'released': [ticket.to_dict() for ticket in self.released],
            'failures': [failure.to_dict() for failure in self.failures],
            'timed_out': self.timed_out,
        }


class ReleaseScheduler:

    def __init__(self, calendar=None, registry=None, queue=None, issuer=None, notifier=notify_ticket_issued):
        self.calendar = calendar or OperatingCalendar()
        self.registry = registry or CapacityRegistry(self.calendar)
        self.queue = queue or RequestQueue()
        self.issuer = issuer or TicketIssuer(self.queue)
        self.notifier = notifier

    def release(self, day, categories=None, priorities=None, deadline=None):
        """Release tickets for ``day`` across ``categories`` (all when empty).

        Raises InvalidReleaseDayError if ``day`` is not an operating day and
        ValueError for unknown categories; neither issues anything. ``deadline``
        is an aware datetime after which no further request is started.
        """
        categories = list(dict.fromkeys(categories or CATEGORIES))
        unknown = [c for c in categories if c not in CATEGORIES]
        if unknown:
            raise ValueError(f"Unknown categories: {', '.join(unknown)}")

        if not self.calendar.is_operating_day(day):
            if self.calendar.has_override(day):
                message = f'{day} has been closed by an administrator'
            else:
                message = f'Tickets can only be released on {", ".join(self.calendar.allowed_weekday_names())}'
            raise InvalidReleaseDayError(day, self.calendar.allowed_weekday_names(), message)

        result = ReleaseResult(release_date=day)
        for category in categories:
            if not result.timed_out:
                self._release_category(result, day, category, priorities, deadline)
            else:
                result.per_category_released[category] = 0
            try:
                result.remaining_in_queue[category] = self.queue.waiting_count(day, category)
            except DatabaseError as exc:
                logger.exception('Could not count waiting requests for %s on %s', category, day)
                result.failures.append(ReleaseFailure(None, category, f'queue unavailable: {exc}'))

        logger.info(
            'Released %s tickets for %s (%s failures, timed out: %s)',
            result.total_released, day, len(result.failures), result.timed_out,
        )
        return result

    def _release_category(self, result, day, category, priorities, deadline):
        released = 0
        result.per_category_released[category] = 0

        try:
            limit = self.registry.limit_for(day, category)
        except DatabaseError as exc:
            logger.exception('Could not load capacity for %s on %s', category, day)
            result.failures.append(ReleaseFailure(None, category, f'capacity unavailable: {exc}'))
            return
        if limit <= 0:
            logger.info('No capacity for %s on %s, skipping', category, day)
            return

        failed_ids = set()
        try:
            available = limit - self.queue.issued_count(day, category)
        except DatabaseError as exc:
            logger.exception('Could not count issued tickets for %s on %s', category, day)
            result.failures.append(ReleaseFailure(None, category, f'queue unavailable: {exc}'))
            return

        if available <= 0:
            logger.info('Capacity of %s already used for %s on %s', limit, category, day)
            return

        # Only successful issues count against capacity, so failed requests
        # are set aside and the queue is read again to fill their places.
        while released < available:
            try:
                candidates = self.queue.fetch(
                    day, category, available - released, priorities=priorities, exclude=failed_ids,
                )
            except DatabaseError as exc:
                logger.exception('Could not load release queue for %s on %s', category, day)
                result.failures.append(ReleaseFailure(None, category, f'queue unavailable: {exc}'))
                return
            if not candidates:
                break

            for candidate in candidates:
                if deadline is not None and timezone.now() >= deadline:
                    logger.warning('Release deadline reached for %s on %s after %s tickets', category, day, released)
                    result.timed_out = True
                    return
                try:
                    ticket = self.issuer.issue(candidate, limit=limit)
                except CapacityExhaustedError as exc:
                    logger.info('%s', exc)
                    return
                except (InvalidStateError, PersistenceError) as exc:
                    logger.warning('Skipping request %s: %s', candidate.pk, exc)
                    failed_ids.add(candidate.pk)
                    result.failures.append(ReleaseFailure(candidate.pk, category, str(exc)))
                    continue

                released += 1
                result.per_category_released[category] = released
                result.released.append(ReleasedTicket(candidate.pk, category, ticket.ticket_number))
                if self.notifier is not None:
                    transaction.on_commit(partial(self._notify, candidate, ticket))

    def _notify(self, service_request, ticket):
        try:
            self.notifier(service_request, ticket.ticket_number, ticket.ticket_code)
        except Exception:
            logger.exception('Ticket notification failed for request %s', service_request.pk)
