"""Read view over approved requests waiting for a ticket."""
from .models import APPROVED, PENDING, ServiceRequest


class RequestQueue:
    """Orders and filters the release pool for one visit date and category.

    The queue makes no capacity decisions. Requests come back oldest
    submission first, ties broken by id so repeated fetches agree.
    """

    def waiting(self, day, category):
        return ServiceRequest.objects.filter(
            visit_date=day,
            category=category,
            status=APPROVED,
            ticket_number__isnull=True,
        )

    def fetch(self, day, category, limit, priorities=None, exclude=None):
        """Return up to ``limit`` approved, unticketed requests in FIFO order.

        ``priorities`` narrows the pool (for example an urgent-only batch); it
        never changes the order. ``exclude`` skips the given request ids.
        """
        if limit is None or limit <= 0:
            return []
        qs = self.waiting(day, category)
        if priorities:
            qs = qs.filter(priority__in=list(priorities))
        if exclude:
            qs = qs.exclude(pk__in=list(exclude))
        return list(qs.select_related('requester').order_by('submitted_at', 'id')[:limit])

    def waiting_count(self, day, category):
        return self.waiting(day, category).count()

    def demand_count(self, day, category):
        return ServiceRequest.objects.filter(
            visit_date=day,
            category=category,
            status__in=[PENDING, APPROVED],
        ).count()

    def issued_count(self, day, category):
        """Number of requests in the slot that were ever given a ticket."""
        return ServiceRequest.objects.filter(
            visit_date=day,
            category=category,
            ticket_number__isnull=False,
        ).count()

    def position_of(self, service_request):
        """1-based place of an approved request in its slot, None if not waiting."""
        if service_request.status != APPROVED or service_request.ticket_number:
            return None
        ahead = (
            self.waiting(service_request.visit_date, service_request.category)
            .filter(submitted_at__lt=service_request.submitted_at)
            .count()
        )
        ties_ahead = (
            self.waiting(service_request.visit_date, service_request.category)
            .filter(submitted_at=service_request.submitted_at, id__lt=service_request.pk)
            .count()
        )
        return ahead + ties_ahead + 1
