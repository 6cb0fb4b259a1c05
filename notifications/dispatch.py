"""Fire-and-forget delivery of ledger events.

Nothing here raises: a client that is not connected simply misses the
event and picks up the new state on its next read.
"""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.conf import settings

from .sms_service import send_serving_sms

logger = logging.getLogger(__name__)


def user_group(user_id):
    return f'user_{user_id}'


def business_group(business_id):
    return f'business_{business_id}'


def serving_message(token):
    return f"It's your turn! Your token {token.token_number} is being served."


def _group_send(group, event):
    layer = get_channel_layer()
    if layer is None:
        logger.debug('No channel layer configured; dropping %s for %s', event['type'], group)
        return
    async_to_sync(layer.group_send)(group, event)


def publish_token_change(token):
    """Push the changed token to everyone watching its business."""
    try:
        _group_send(business_group(token.business_id), {
            'type': 'ledger.change',
            'business_id': str(token.business_id),
            'token': token.as_dict(),
        })
    except Exception:
        logger.exception('Could not publish change for token %s', token.pk)


def notify_token_serving(token):
    """Tell the token holder it is their turn (in-app, then SMS)."""
    message = serving_message(token)
    try:
        _group_send(user_group(token.user_id), {
            'type': 'token.serving',
            'message': message,
            'token_id': str(token.pk),
            'token_number': token.token_number,
        })
    except Exception:
        logger.exception('Could not push serving alert for token %s', token.pk)

    try:
        send_serving_sms(token, message, background=settings.SMS_BACKGROUND)
    except Exception:
        logger.exception('Could not queue serving SMS for token %s', token.pk)
