"""Errors raised by the ticket allocation engine.

Only ``InvalidReleaseDayError`` aborts a release. Per-request errors are
collected into ``ReleaseResult.failures`` by the scheduler.
"""


class AllocationError(Exception):
    """Base class for allocation errors."""


class InvalidReleaseDayError(AllocationError):
    """The release date is not an operating day."""

    def __init__(self, day, allowed_days=None, message=None):
        self.day = day
        self.allowed_days = list(allowed_days or [])
        super().__init__(message or f'{day} is not an operating day')


class InvalidStateError(AllocationError):
    """The request is no longer in the status the operation requires."""

    def __init__(self, request_id, status=None, message=None):
        self.request_id = request_id
        self.status = status
        if message is None and status is None:
            message = f'Request {request_id} is no longer approved'
        elif message is None:
            message = f'Request {request_id} is {status}, expected approved'
        super().__init__(message)


class PersistenceError(AllocationError):
    """The storage layer failed while issuing a ticket."""


class CapacityExhaustedError(AllocationError):
    """Every ticket for the date and category has already been issued."""

    def __init__(self, day, category, limit):
        self.day = day
        self.category = category
        self.limit = limit
        super().__init__(f'Capacity of {limit} reached for {category} on {day}')


class ConfigurationError(AllocationError):
    """Capacity configuration is malformed."""
