"""Queue ledger: the only place that creates tokens or changes their status.

Every mutating operation runs in one transaction that starts by locking the
business row, so "count then insert" in ``join`` and "read then promote" in
``call_next`` cannot interleave for the same business. Change events are
published after commit.
"""
import logging
import random

from django.core.exceptions import ObjectDoesNotExist
from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from admin_panel.models import BusinessLog, LogAction
from businesses.models import Business
from notifications.dispatch import notify_token_serving, publish_token_change
from .errors import BookingFailed, InvalidTransition, LedgerError, NotPermitted
from .models import ACTIVE_STATUSES, Token, TokenStatus, can_transition

logger = logging.getLogger(__name__)

# Arrival order; position only separates identical timestamps
ARRIVAL_ORDER = ('joined_at', 'position')

_ACTIONS = {
    TokenStatus.SERVING: LogAction.SERVE,
    TokenStatus.COMPLETED: LogAction.COMPLETE,
    TokenStatus.CANCELLED: LogAction.CANCEL,
}


def make_token_number(service_name):
    """First letter of the service name plus a random suffix in [100, 999]."""
    initial = (service_name.strip()[:1] or 'Q').upper()
    return f"{initial}-{random.randint(100, 999)}"


def _lock_business(business_id):
    return Business.objects.select_for_update().get(pk=business_id)


def _locked_token(token_id):
    business_id = Token.objects.values_list('business_id', flat=True).get(pk=token_id)
    business = _lock_business(business_id)
    token = (
        Token.objects.select_for_update()
        .select_related('user', 'service')
        .get(pk=token_id)
    )
    token.business = business
    return token


def _log(business, actor, action, token=None, description=''):
    metadata = {}
    if token is not None:
        metadata = {'customer_name': token.customer_name, 'token_number': token.token_number}
    BusinessLog.objects.create(
        business=business,
        actor=actor,
        token=token,
        action=action,
        description=description,
        metadata=metadata,
    )


def _transition(token, target, actor=None):
    """Apply one lifecycle edge. Must run inside the caller's transaction."""
    if not can_transition(token.status, target):
        raise InvalidTransition(token.status, target)

    now = timezone.now()
    token.status = target
    if target == TokenStatus.SERVING:
        token.served_at = now
        update_fields = ['status', 'served_at']
    else:
        token.closed_at = now
        update_fields = ['status', 'closed_at']
    token.save(update_fields=update_fields)

    _log(
        token.business,
        actor,
        _ACTIONS[target],
        token,
        f"Token {token.token_number} ({token.customer_name}) is now {target.label.lower()}",
    )

    transaction.on_commit(lambda: publish_token_change(token))
    if target == TokenStatus.SERVING:
        transaction.on_commit(lambda: notify_token_serving(token))
    return token


def _is_owner(business, user):
    return user is not None and business.owner_id is not None and business.owner_id == user.pk


# -------------------- mutations --------------------

def join(business, service, user, notes=None):
    """Create a WAITING token for ``user`` in ``business``'s queue.

    position is 1 + the number of WAITING tokens at the moment of insertion
    and is never recomputed afterwards.
    """
    if user is None or not user.is_authenticated:
        raise NotPermitted('Sign in to join a queue')
    if service.business_id != business.pk:
        logger.warning('Service %s does not belong to business %s', service.pk, business.pk)
        raise BookingFailed()

    try:
        with transaction.atomic():
            biz = _lock_business(business.pk)
            waiting = Token.objects.filter(business=biz, status=TokenStatus.WAITING).count()
            token = Token.objects.create(
                user=user,
                business=biz,
                service=service,
                token_number=make_token_number(service.name),
                position=waiting + 1,
                status=TokenStatus.WAITING,
                notes=notes or None,
            )
            _log(
                biz,
                user,
                LogAction.JOIN,
                token,
                f"{user.display_name} joined the queue for {service.name}",
            )
            transaction.on_commit(lambda: publish_token_change(token))
    except (DatabaseError, ObjectDoesNotExist):
        logger.exception('Booking failed for user %s at business %s', user.pk, business.pk)
        raise BookingFailed()

    logger.info('Token %s issued at %s (position %s)', token.token_number, biz.name, token.position)
    return token


def cancel(token_id, user):
    """Customer cancels their own WAITING token.

    Other tokens keep their stored position.
    """
    with transaction.atomic():
        token = _locked_token(token_id)
        if user is None or token.user_id != user.pk:
            raise NotPermitted('Only the token holder can cancel it')
        return _transition(token, TokenStatus.CANCELLED, actor=user)


def call_next(business, current_serving_id=None, actor=None):
    """Complete the token being served (if any) and serve the earliest WAITING one.

    Returns ``(completed, serving)``; either may be None. With no WAITING
    tokens the station is left idle. A paused business completes but does
    not promote.
    """
    with transaction.atomic():
        biz = _lock_business(business.pk)
        if actor is not None and not _is_owner(biz, actor):
            raise NotPermitted('Only the business owner can call the next customer')

        serving = Token.objects.select_for_update().select_related('user').filter(
            business=biz, status=TokenStatus.SERVING
        )
        current = None
        if current_serving_id is not None:
            current = serving.filter(pk=current_serving_id).first()
        if current is None:
            current = serving.order_by(*ARRIVAL_ORDER).first()

        completed = None
        if current is not None:
            current.business = biz
            completed = _transition(current, TokenStatus.COMPLETED, actor=actor)

        if not biz.is_open:
            logger.info('Business %s is paused; not promoting a waiting token', biz.pk)
            _log(biz, actor, LogAction.CALL_NEXT, description='Queue paused; nobody called')
            return (completed, None)

        next_token = (
            Token.objects.select_for_update()
            .select_related('user')
            .filter(business=biz, status=TokenStatus.WAITING)
            .order_by(*ARRIVAL_ORDER)
            .first()
        )
        if next_token is not None:
            next_token.business = biz
            _transition(next_token, TokenStatus.SERVING, actor=actor)
            _log(biz, actor, LogAction.CALL_NEXT, next_token, f"Called token {next_token.token_number}")
        else:
            _log(biz, actor, LogAction.CALL_NEXT, description='Queue empty; station idle')

        return (completed, next_token)


def set_status(token_id, status, actor=None):
    """Generic transition primitive.

    The business owner may apply any legal edge; the token holder may only
    cancel. ``actor=None`` is a system call and skips the permission check.
    """
    try:
        target = TokenStatus(status)
    except ValueError:
        raise LedgerError(f'Unknown status {status!r}')

    with transaction.atomic():
        token = _locked_token(token_id)
        if actor is not None and not _is_owner(token.business, actor):
            if token.user_id != actor.pk or target != TokenStatus.CANCELLED:
                raise NotPermitted('Not allowed to change this token')
        return _transition(token, target, actor=actor)


def set_business_open(business, is_open, actor=None):
    """Pause or resume a business's queue."""
    with transaction.atomic():
        biz = _lock_business(business.pk)
        if actor is not None and not _is_owner(biz, actor):
            raise NotPermitted('Only the business owner can pause or resume the queue')
        biz.is_open = is_open
        biz.save(update_fields=['is_open'])
        _log(
            biz,
            actor,
            LogAction.RESUME if is_open else LogAction.PAUSE,
            description='Queue resumed' if is_open else 'Queue paused',
        )
    return biz


# -------------------- queries --------------------

def list_tokens(business=None):
    """All tokens (optionally for one business) in arrival order, names joined."""
    qs = Token.objects.select_related('user', 'business', 'service')
    if business is not None:
        qs = qs.filter(business=business)
    return qs.order_by(*ARRIVAL_ORDER)


def waiting_tokens(business):
    return list(list_tokens(business).filter(status=TokenStatus.WAITING))


def serving_token(business):
    return list_tokens(business).filter(status=TokenStatus.SERVING).first()


def list_active_for_user(user):
    """The user's WAITING or SERVING token, earliest first if there are several."""
    return (
        Token.objects.select_related('user', 'business', 'service')
        .filter(user=user, status__in=ACTIVE_STATUSES)
        .order_by(*ARRIVAL_ORDER)
        .first()
    )


def live_rank(token):
    """Current 1-based rank among WAITING tokens, or None if not waiting."""
    if token.status != TokenStatus.WAITING:
        return None
    ahead = Token.objects.filter(
        Q(joined_at__lt=token.joined_at) | Q(joined_at=token.joined_at, position__lt=token.position),
        business_id=token.business_id,
        status=TokenStatus.WAITING,
    ).count()
    return ahead + 1


def queue_eta(token):
    """Return ETA information for a token.

    Returns dict: {
        'token_id': str,
        'token_number': str,
        'status': str,
        'position': int,
        'live_rank': int|None,
        'tokens_ahead': int,
        'eta_minutes': int,
        'current_serving': str|None,
    }
    """
    rank = live_rank(token)
    current = serving_token(token.business)

    tokens_ahead = 0
    if rank is not None:
        tokens_ahead = rank - 1
        # the customer at the counter still has to finish
        if current is not None:
            tokens_ahead += 1

    return {
        'token_id': str(token.pk),
        'token_number': token.token_number,
        'status': token.status,
        'position': token.position,
        'live_rank': rank,
        'tokens_ahead': tokens_ahead,
        'eta_minutes': tokens_ahead * token.service.average_service_time,
        'current_serving': current.token_number if current else None,
    }
