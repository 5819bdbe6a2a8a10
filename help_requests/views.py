from django.conf import settings
from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET

from capacity.calendar import OperatingCalendar
from capacity.registry import CapacityRegistry

from .models import CATEGORIES, ServiceRequest
from .queue import RequestQueue
from .reporting import QueueStatusReporter


@login_required
@require_GET
def ticket_detail(request, request_id):
    """Return ticket and queue position info for a help request.

    Response JSON:
    - request_id, status, ticket_number, ticket_code, category, visit_date,
      position, requests_ahead, eta_minutes
    """
    service_request = get_object_or_404(ServiceRequest, pk=request_id)
    # Only owner or staff can see the ticket
    if request.user != service_request.requester and not request.user.is_staff:
        return JsonResponse({'error': 'forbidden'}, status=403)

    info = QueueStatusReporter().ticket_eta(service_request)
    info.update({
        'ticket_code': service_request.ticket_code or None,
        'category': service_request.category,
        'visit_date': service_request.visit_date.isoformat() if service_request.visit_date else None,
    })
    return JsonResponse(info)


@login_required
@require_GET
def available_days(request):
    """Operating days in the next two weeks that still have tickets left for ``category``."""
    category = request.GET.get('category') or CATEGORIES[0]
    if category not in CATEGORIES:
        return JsonResponse({'error': 'unknown_category'}, status=400)

    window = settings.ALLOCATION.get('AVAILABLE_DAYS_WINDOW', 14)
    calendar = OperatingCalendar()
    registry = CapacityRegistry(calendar)
    queue = RequestQueue()
    days = [
        day for day in calendar.operating_days(timezone.localdate(), window)
        if registry.limit_for(day, category) > queue.issued_count(day, category)
    ]
    return JsonResponse({
        'available_days': [day.isoformat() for day in days],
        'category': category,
    })
