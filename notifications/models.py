from django.db import models


class NotificationLog(models.Model):
    """Record of automated visitor notifications for help-request events.

    The (request_id, event_type) pair is unique so a ticket that is released
    twice by racing operators is still only announced once.
    """
    EVENT_CHOICES = [
        ('ticket_issued', 'Ticket Issued'),
    ]
    CHANNEL_CHOICES = [
        ('sms', 'SMS'),
    ]

    request_id = models.BigIntegerField(db_index=True)
    event_type = models.CharField(max_length=32, choices=EVENT_CHOICES)
    channel = models.CharField(max_length=16, choices=CHANNEL_CHOICES, default='sms')
    phone_number = models.CharField(max_length=20, blank=True)
    message = models.CharField(max_length=160, blank=True)
    sent_at = models.DateTimeField(auto_now_add=True)
    success = models.BooleanField(default=False)
    provider_id = models.CharField(max_length=200, blank=True, null=True)
    details = models.TextField(blank=True, null=True)

    class Meta:
        unique_together = ('request_id', 'event_type')
        ordering = ['-sent_at']

    def __str__(self):
        return f"NotificationLog(request={self.request_id}, event={self.event_type}, success={self.success})"
