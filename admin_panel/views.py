import datetime
import json
import logging

from django.contrib.admin.views.decorators import staff_member_required
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST

from help_requests.exceptions import InvalidReleaseDayError
from help_requests.models import CATEGORIES, ServiceRequest
from help_requests.release import ReleaseScheduler
from help_requests.reporting import QueueStatusReporter

from .models import AuditLog

logger = logging.getLogger(__name__)

PRIORITIES = [value for value, _ in ServiceRequest.PRIORITY_CHOICES]


def _parse_date(value, default=None):
    if not value:
        if default is None:
            raise ValueError('date is required')
        return default
    return datetime.date.fromisoformat(value)


def _parse_choices(payload, key, allowed):
    """Optional list of strings from the JSON body, each one of ``allowed``."""
    values = payload.get(key)
    if values is None or values == []:
        return None
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ValueError(f'{key} must be a list of strings')
    unknown = [v for v in values if v not in allowed]
    if unknown:
        raise ValueError(f"Unknown {key}: {', '.join(unknown)}")
    return values


def _parse_days(value):
    days = int(value)
    if days < 1 or days > 31:
        raise ValueError('days must be between 1 and 31')
    return days


@staff_member_required
@require_POST
def release_tickets(request):
    """Run the ticket release for one date.

    Body: {"release_date": "YYYY-MM-DD", "categories": [...], "priorities": [...]}
    Categories default to all of them; priorities limit the batch to those tiers.
    """
    try:
        payload = json.loads(request.body or b'{}')
    except json.JSONDecodeError:
        return JsonResponse({'error': 'Request body must be JSON'}, status=400)
    if not isinstance(payload, dict):
        return JsonResponse({'error': 'Request body must be a JSON object'}, status=400)

    try:
        day = _parse_date(payload.get('release_date'))
    except (TypeError, ValueError):
        return JsonResponse({'error': 'Invalid release date format'}, status=400)

    try:
        categories = _parse_choices(payload, 'categories', CATEGORIES)
        priorities = _parse_choices(payload, 'priorities', PRIORITIES)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)

    try:
        result = ReleaseScheduler().release(day, categories=categories, priorities=priorities)
    except InvalidReleaseDayError as e:
        AuditLog.objects.create(
            user=request.user,
            action='ticket_release_rejected',
            visit_date=day,
            description=str(e),
        )
        return JsonResponse({'error': str(e), 'allowed_days': e.allowed_days}, status=400)
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)

    summary = result.to_dict()
    AuditLog.objects.create(
        user=request.user,
        action='ticket_release',
        visit_date=day,
        description=f'Released {result.total_released} tickets for {day}',
        details=summary,
    )
    logger.info('Ticket release for %s triggered by %s', day, request.user)
    return JsonResponse({'message': 'Ticket release completed', 'results': summary})


@staff_member_required
@require_GET
def capacity_overview(request):
    """Capacity snapshot for one date plus overbooking warnings for the week ahead."""
    try:
        day = _parse_date(request.GET.get('date'), default=timezone.localdate())
    except ValueError:
        return JsonResponse({'error': 'Invalid date format'}, status=400)

    reporter = QueueStatusReporter()
    warnings = reporter.capacity_warnings(day)
    return JsonResponse({
        'snapshot': reporter.queue_snapshot(day),
        'capacity_warnings': [w.to_dict() for w in warnings],
    })


@staff_member_required
@require_GET
def coverage_gaps(request):
    try:
        start = _parse_date(request.GET.get('start'), default=timezone.localdate())
        days = _parse_days(request.GET.get('days', 7))
    except ValueError as e:
        return JsonResponse({'error': str(e)}, status=400)

    gaps = QueueStatusReporter().coverage_gaps(start, days)
    return JsonResponse({'coverage_gaps': [gap.to_dict() for gap in gaps]})
