from django.conf import settings
from django.db import models


class Shift(models.Model):
    """One volunteer slot on the rota. Unassigned shifts count as coverage gaps."""
    date = models.DateField(db_index=True)
    start_time = models.TimeField(null=True, blank=True)
    end_time = models.TimeField(null=True, blank=True)
    role = models.CharField(max_length=100, blank=True)
    location = models.CharField(max_length=200, blank=True)
    assigned_volunteer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='shifts',
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['date', 'start_time']

    def __str__(self):
        who = self.assigned_volunteer or 'unassigned'
        return f"{self.role or 'Shift'} on {self.date} ({who})"

    @property
    def is_assigned(self):
        return self.assigned_volunteer_id is not None
