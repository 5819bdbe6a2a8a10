from django.conf import settings
from django.db import models
from django.db.models import Q
from django.utils import timezone

PENDING = 'pending'
APPROVED = 'approved'
TICKET_ISSUED = 'ticket_issued'
COMPLETED = 'completed'
CANCELLED = 'cancelled'
REJECTED = 'rejected'

ACTIVE_STATUSES = (PENDING, APPROVED, TICKET_ISSUED)
TERMINAL_STATUSES = (COMPLETED, CANCELLED, REJECTED)

FOOD = 'food'
GENERAL = 'general'
EMERGENCY = 'emergency'

CATEGORIES = (FOOD, GENERAL, EMERGENCY)


class ServiceRequest(models.Model):
    """A visitor's request for help on a visit date, the unit tickets are issued for."""
    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (TICKET_ISSUED, 'Ticket issued'),
        (COMPLETED, 'Completed'),
        (CANCELLED, 'Cancelled'),
        (REJECTED, 'Rejected'),
    ]
    CATEGORY_CHOICES = [
        (FOOD, 'Food'),
        (GENERAL, 'General'),
        (EMERGENCY, 'Emergency'),
    ]
    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('normal', 'Normal'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]

    requester = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='help_requests')
    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=PENDING)
    # Null until the approval workflow books the request onto a day
    visit_date = models.DateField(null=True, blank=True)
    # Hint only, the release queue stays in submission order
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='normal')
    # Assigned once by TicketIssuer, never changed afterwards
    ticket_number = models.CharField(max_length=32, null=True, blank=True, unique=True)
    ticket_code = models.CharField(max_length=128, blank=True)
    ticket_issued_at = models.DateTimeField(null=True, blank=True)
    contact_phone = models.CharField(max_length=20, blank=True)
    submitted_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['submitted_at', 'id']
        indexes = [
            models.Index(fields=['visit_date', 'category', 'status', 'submitted_at'], name='help_req_slot_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['requester', 'visit_date', 'category'],
                condition=Q(status__in=ACTIVE_STATUSES),
                name='unique_active_request_per_slot',
            ),
            models.CheckConstraint(
                condition=(
                    Q(status__in=(PENDING, APPROVED, REJECTED), ticket_number__isnull=True)
                    | Q(status__in=(TICKET_ISSUED, COMPLETED), ticket_number__isnull=False)
                    | Q(status=CANCELLED)
                ),
                name='ticket_number_matches_status',
            ),
        ]

    def __str__(self):
        label = self.ticket_number or f'request {self.pk}'
        return f"{label} - {self.get_category_display()} on {self.visit_date} ({self.status})"

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    @property
    def has_ticket(self):
        return bool(self.ticket_number)


class TicketSequence(models.Model):
    """Last ticket sequence handed out for a visit date and category.

    Locked with ``select_for_update`` while a ticket is issued so numbering and
    the capacity check for one slot never interleave.
    """
    visit_date = models.DateField()
    category = models.CharField(max_length=20, choices=ServiceRequest.CATEGORY_CHOICES)
    last_sequence = models.IntegerField(default=0)

    class Meta:
        unique_together = ('visit_date', 'category')

    def __str__(self):
        return f"{self.category} on {self.visit_date}: {self.last_sequence}"
