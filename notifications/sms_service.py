"""SMS notifications for issued visit tickets.

Provides a Twilio adapter and the `notify_ticket_issued` entrypoint the
release scheduler calls after each ticket commits.

Design decisions:
- Read provider credentials only from environment variables.
- Normalise UK mobile numbers (07xxx) to E.164 (+447xxx).
- Do not raise on provider errors; record results to `NotificationLog`.
- Background send so a slow provider never holds up a release.
"""
import logging
import os
import threading
from typing import Optional

from django.db import connections
from django.utils import timezone

logger = logging.getLogger(__name__)


def _get_env(name: str) -> Optional[str]:
    return os.environ.get(name)


class _ProviderError(Exception):
    pass


class TwilioAdapter:
    def __init__(self):
        self.account_sid = _get_env('SMS_ACCOUNT_SID')
        self.auth_token = _get_env('SMS_AUTH_TOKEN')
        self.from_number = _get_env('SMS_FROM_NUMBER')
        if not (self.account_sid and self.auth_token and self.from_number):
            raise _ProviderError('Missing SMS provider credentials in env')

        from twilio.rest import Client
        self._client = Client(self.account_sid, self.auth_token)

    def send(self, to_number: str, body: str) -> dict:
        try:
            # A Messaging Service SID (starts with 'MG') replaces the sender number
            if self.from_number.upper().startswith('MG'):
                msg = self._client.messages.create(body=body, messaging_service_sid=self.from_number, to=to_number)
            else:
                msg = self._client.messages.create(body=body, from_=self.from_number, to=to_number)
        except Exception as e:
            raise _ProviderError(str(e)) from e
        return {'sid': getattr(msg, 'sid', None), 'status': getattr(msg, 'status', None)}


def format_phone(phone: str) -> Optional[str]:
    """Validate and format a UK number to E.164 (+44XXXXXXXXXX).

    Returns formatted string or None if invalid.
    """
    if not phone:
        return None
    digits = ''.join(c for c in phone if c.isdigit())
    if len(digits) == 11 and digits.startswith('0'):
        return f'+44{digits[1:]}'
    # Already international with the 44 country code
    if len(digits) == 12 and digits.startswith('44'):
        return f'+{digits}'
    return None


def ticket_message(service_request, ticket_number: str) -> str:
    day = service_request.visit_date.strftime('%a %d %b') if service_request.visit_date else 'your visit day'
    return f'Your {service_request.get_category_display()} visit ticket {ticket_number} is ready for {day}. Please bring ID.'


def _background_send(log_obj, to_number: str, body: str):
    """Background worker that calls provider and updates NotificationLog. Never raises."""
    simulate = (_get_env('SMS_SIMULATE') or '').lower() in ('1', 'true', 'yes')
    try:
        try:
            provider = TwilioAdapter()
        except _ProviderError as e:
            if simulate:
                log_obj.success = True
                log_obj.provider_id = 'SIMULATED'
                log_obj.details = f'Simulated send: {e}'
                log_obj.sent_at = timezone.now()
                log_obj.save()
                logger.info('Simulated SMS send to %s for request %s', to_number, log_obj.request_id)
                return
            logger.error('SMS provider unavailable: %s', e)
            log_obj.success = False
            log_obj.details = str(e)
            log_obj.sent_at = timezone.now()
            log_obj.save()
            return

        try:
            resp = provider.send(to_number, body)
        except _ProviderError as e:
            logger.exception('Ticket SMS failed for request %s', log_obj.request_id)
            log_obj.success = False
            log_obj.details = str(e)
        else:
            log_obj.success = True
            log_obj.provider_id = resp.get('sid')
            log_obj.details = str(resp)
            logger.info('Ticket SMS sent to %s for request %s', to_number, log_obj.request_id)
        log_obj.sent_at = timezone.now()
        log_obj.save()
    except Exception:
        logger.exception('Could not record SMS result for request %s', log_obj.request_id)
    finally:
        # Runs on its own thread, so it owns its own connection
        connections.close_all()


def notify_ticket_issued(service_request, ticket_number: str, ticket_code: str):
    """Announce a freshly issued ticket to the requester.

    - Creates one `NotificationLog` per request (duplicates are ignored)
    - Skips requests without a usable phone number, recording why
    - Spawns a daemon thread to call the provider

    Returns the NotificationLog, or None when this ticket was already announced.
    Safety: does not raise provider errors to caller.
    """
    from notifications.models import NotificationLog

    formatted = format_phone(service_request.contact_phone)
    body = ticket_message(service_request, ticket_number)
    log, created = NotificationLog.objects.get_or_create(
        request_id=service_request.pk,
        event_type='ticket_issued',
        defaults={'phone_number': formatted or '', 'message': body[:160]},
    )
    if not created:
        logger.info('Ticket %s for request %s already announced', ticket_number, service_request.pk)
        return None

    if not formatted:
        log.details = f'No valid phone number; ticket code {ticket_code} not sent'
        log.save(update_fields=['details'])
        logger.info('Request %s has no valid phone, skipping SMS', service_request.pk)
        return log

    thread = threading.Thread(target=_background_send, args=(log, formatted, log.message), daemon=True)
    thread.start()
    return log
