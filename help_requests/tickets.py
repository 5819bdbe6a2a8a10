"""Ticket issuing for approved help requests.

Issuing is a single conditional write: the request only moves to
``ticket_issued`` if it is still ``approved`` when the UPDATE runs, so two
releases racing on the same request produce exactly one ticket.
"""
import hashlib
import logging
from dataclasses import dataclass

from django.conf import settings
from django.db import DatabaseError, transaction
from django.utils import timezone

from .exceptions import CapacityExhaustedError, InvalidStateError, PersistenceError
from .models import APPROVED, EMERGENCY, FOOD, GENERAL, TICKET_ISSUED, ServiceRequest, TicketSequence
from .queue import RequestQueue

logger = logging.getLogger(__name__)

CATEGORY_CODES = {
    FOOD: 'F',
    GENERAL: 'G',
    EMERGENCY: 'E',
}


@dataclass(frozen=True)
class IssuedTicket:
    request_id: int
    ticket_number: str
    ticket_code: str


def _prefix(prefix=None):
    return prefix or settings.ALLOCATION.get('TICKET_PREFIX', 'LDH')


def format_ticket_number(day, category, sequence, prefix=None):
    """Build a ticket number like ``LDH-261020-F001``.

    Date, category and per-slot sequence together make the number unique.
    """
    code = CATEGORY_CODES.get(category, category[:1].upper())
    return f"{_prefix(prefix)}-{day:%y%m%d}-{code}{sequence:03d}"


def ticket_code_for(ticket_number):
    """Scannable payload for a ticket. Same number in, same code out.

    The prefix is taken from the number, not from settings.
    """
    checksum = hashlib.sha256(ticket_number.encode('utf-8')).hexdigest()[:8].upper()
    prefix = ticket_number.split('-', 1)[0]
    return f"{prefix}-TICKET:{ticket_number}:{checksum}"


class TicketIssuer:

    def __init__(self, queue=None):
        self.queue = queue or RequestQueue()

    def issue(self, service_request, limit=None):
        """Issue a ticket for an approved request.

        When ``limit`` is given the slot's issued count is checked under the
        same lock that hands out the sequence, raising CapacityExhaustedError
        once it is reached. Raises InvalidStateError if the request is not (or
        no longer) approved and PersistenceError if the database write fails.
        Nothing is written unless the whole transition succeeds.
        """
        pk = service_request.pk
        if service_request.status != APPROVED:
            raise InvalidStateError(pk, service_request.status)
        if service_request.visit_date is None:
            raise InvalidStateError(pk, service_request.status, message=f'Request {pk} has no visit date')

        day = service_request.visit_date
        category = service_request.category
        now = timezone.now()
        try:
            with transaction.atomic():
                sequence, _ = TicketSequence.objects.select_for_update().get_or_create(
                    visit_date=day, category=category,
                )
                if limit is not None and self.queue.issued_count(day, category) >= limit:
                    raise CapacityExhaustedError(day, category, limit)

                next_sequence = sequence.last_sequence + 1
                ticket_number = format_ticket_number(day, category, next_sequence)
                ticket_code = ticket_code_for(ticket_number)
                self._transition(pk, ticket_number, ticket_code, now)

                sequence.last_sequence = next_sequence
                sequence.save(update_fields=['last_sequence'])
        except DatabaseError as exc:
            logger.exception('Ticket issue failed for request %s', pk)
            raise PersistenceError(f'Could not issue ticket for request {pk}: {exc}') from exc

        service_request.status = TICKET_ISSUED
        service_request.ticket_number = ticket_number
        service_request.ticket_code = ticket_code
        service_request.ticket_issued_at = now
        service_request.updated_at = now
        logger.info('Issued ticket %s for request %s (%s on %s)', ticket_number, pk, category, day)
        return IssuedTicket(request_id=pk, ticket_number=ticket_number, ticket_code=ticket_code)

    def _transition(self, pk, ticket_number, ticket_code, now):
        updated = ServiceRequest.objects.filter(
            pk=pk,
            status=APPROVED,
            ticket_number__isnull=True,
        ).update(
            status=TICKET_ISSUED,
            ticket_number=ticket_number,
            ticket_code=ticket_code,
            ticket_issued_at=now,
            updated_at=now,
        )
        if updated != 1:
            current = ServiceRequest.objects.filter(pk=pk).values_list('status', flat=True).first()
            raise InvalidStateError(pk, current)
