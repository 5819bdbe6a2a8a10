from django.core.exceptions import ValidationError
from django.db import models

from help_requests.exceptions import ConfigurationError


class CapacityDay(models.Model):
    """Per-date capacity configuration set by an administrator.

    A row is optional: dates without one fall back to the operating calendar
    and the default capacity table in ``settings.ALLOCATION``.
    """
    date = models.DateField(unique=True)
    # Stored for query convenience, derived from ``date`` on save
    day_of_week = models.CharField(max_length=9, blank=True)
    # category -> maximum number of tickets for the date
    max_by_category = models.JSONField(default=dict, blank=True)
    is_operating_day = models.BooleanField(default=True)
    # True when an admin manually adjusted the day, as opposed to the calendar default
    is_override = models.BooleanField(default=False)
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['date']

    def __str__(self):
        state = 'open' if self.is_operating_day else 'closed'
        return f"{self.date} ({self.day_of_week}, {state})"

    def clean(self):
        if not isinstance(self.max_by_category, dict):
            raise ValidationError({'max_by_category': 'Capacity must be a mapping of category to limit.'})
        for category in self.max_by_category:
            try:
                self.limit_for_category(category)
            except ConfigurationError as exc:
                raise ValidationError({'max_by_category': str(exc)})

    def save(self, *args, **kwargs):
        self.day_of_week = self.date.strftime('%A')
        super().save(*args, **kwargs)

    def limit_for_category(self, category):
        """Return the configured limit for ``category``, 0 when not listed.

        Raises ConfigurationError for negative or non-integer values.
        """
        if not isinstance(self.max_by_category, dict):
            raise ConfigurationError(f'Capacity on {self.date} is not a mapping: {self.max_by_category!r}')
        raw = self.max_by_category.get(category, 0)
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ConfigurationError(f'Capacity for {category!r} on {self.date} is not an integer: {raw!r}')
        if raw < 0:
            raise ConfigurationError(f'Capacity for {category!r} on {self.date} is negative: {raw}')
        return raw
