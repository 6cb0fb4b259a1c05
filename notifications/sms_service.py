"""SMS channel for "your turn" alerts.

Provides a Twilio adapter and a `send_serving_sms` entrypoint used by the
serving notification.

Design decisions:
- Read provider credentials only from environment variables.
- Prefix bare 10-digit numbers with SMS_DEFAULT_COUNTRY_CODE.
- Do not raise on provider errors; record results to `SMSLog`.
- Background send to avoid blocking the ledger.
"""
import os
import threading
import logging
from typing import Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

logger = logging.getLogger(__name__)

SERVING_EVENT = 'token_serving'


def _get_env(name: str) -> Optional[str]:
    return os.environ.get(name)


class ProviderError(Exception):
    pass


class TwilioAdapter:
    def __init__(self):
        self.account_sid = _get_env('SMS_ACCOUNT_SID')
        self.auth_token = _get_env('SMS_AUTH_TOKEN')
        self.from_number = _get_env('SMS_FROM_NUMBER')
        if not (self.account_sid and self.auth_token and self.from_number):
            raise ProviderError('Missing SMS provider credentials in env')

        from twilio.rest import Client
        self._client = Client(self.account_sid, self.auth_token)

    def send(self, to_number: str, body: str) -> dict:
        try:
            # If a Messaging Service SID (starts with 'MG') was supplied, use it
            if self.from_number.upper().startswith('MG'):
                msg = self._client.messages.create(body=body, messaging_service_sid=self.from_number, to=to_number)
            else:
                msg = self._client.messages.create(body=body, from_=self.from_number, to=to_number)
        except Exception as e:
            raise ProviderError(str(e))
        return {'sid': getattr(msg, 'sid', None), 'status': getattr(msg, 'status', None)}


def format_phone(phone: str) -> Optional[str]:
    """Format a stored phone number to E.164.

    Returns formatted string or None if invalid.
    """
    if not phone:
        return None
    digits = ''.join(c for c in phone if c.isdigit())
    country = (_get_env('SMS_DEFAULT_COUNTRY_CODE') or '91').lstrip('+')
    if len(digits) == 10:
        return f'+{country}{digits}'
    # already carries a country code
    if 11 <= len(digits) <= 15:
        return f'+{digits}'
    return None


def _background_send(log_obj, to_number: str, body: str):
    """Background worker that calls provider and updates SMSLog. Never raises."""
    simulate = os.environ.get('SMS_SIMULATE', '').lower() in ('1', 'true', 'yes')
    try:
        provider = TwilioAdapter()
    except ProviderError as e:
        if simulate:
            log_obj.success = True
            log_obj.provider_id = 'SIMULATED'
            log_obj.details = f'Simulated send: {e}'
            log_obj.sent_at = timezone.now()
            log_obj.save()
            logger.info('Simulated SMS send to %s for token %s', to_number, log_obj.token_id)
            return
        logger.warning('SMS provider unavailable: %s', e)
        log_obj.success = False
        log_obj.details = str(e)
        log_obj.sent_at = timezone.now()
        log_obj.save()
        return

    try:
        resp = provider.send(to_number, body)
        log_obj.success = True
        log_obj.provider_id = resp.get('sid')
        log_obj.details = str(resp)
        log_obj.sent_at = timezone.now()
        log_obj.save()
        logger.info('Serving SMS sent to %s for token %s', to_number, log_obj.token_id)
    except Exception as e:
        logger.exception('Serving SMS send failed for %s: %s', to_number, e)
        log_obj.success = False
        log_obj.details = str(e)
        log_obj.sent_at = timezone.now()
        log_obj.save()


def send_serving_sms(token, message: str, background: bool = True):
    """Text the token holder that they are being served.

    Returns the SMSLog instance, or None when the user cannot be texted or
    the alert already went out for this token.
    """
    from notifications.models import SMSLog

    user = token.user
    if not user.sms_opt_in:
        return None

    formatted = format_phone(user.phone_number)
    if not formatted:
        return None

    try:
        with transaction.atomic():
            log = SMSLog.objects.create(
                token_id=token.pk,
                event_type=SERVING_EVENT,
                phone_number=formatted,
                message=message[:160],
                success=False,
            )
    except IntegrityError:
        logger.info('Serving SMS for token %s already sent', token.pk)
        return None

    if background:
        thread = threading.Thread(target=_background_send, args=(log, formatted, log.message), daemon=True)
        thread.start()
    else:
        _background_send(log, formatted, log.message)

    return log
