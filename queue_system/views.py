from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from businesses.models import Business
from . import ledger
from .errors import LedgerError
from .models import Token


@login_required
@require_GET
def token_list(request):
    """Full ledger in arrival order, optionally for one business."""
    business = None
    business_id = request.GET.get('business')
    if business_id:
        business = get_object_or_404(Business, id=business_id)
    tokens = ledger.list_tokens(business)
    return JsonResponse({'tokens': [t.as_dict() for t in tokens]})


@login_required
@require_GET
def my_tokens(request):
    tokens = ledger.list_tokens().filter(user=request.user).order_by('-joined_at')
    return JsonResponse({'tokens': [t.as_dict() for t in tokens]})


@login_required
@require_GET
def active_token(request):
    token = ledger.list_active_for_user(request.user)
    if token is None:
        return JsonResponse({'token': None})
    return JsonResponse({'token': token.as_dict(), 'eta': ledger.queue_eta(token)})


@login_required
@require_GET
def token_status(request, token_id):
    """Return ETA and status info for a token.

    Only the token holder or the business owner may read it.
    """
    token = get_object_or_404(Token.objects.select_related('user', 'business', 'service'), pk=token_id)
    if request.user.pk not in (token.user_id, token.business.owner_id):
        return JsonResponse({'error': 'forbidden'}, status=403)
    return JsonResponse({'token': token.as_dict(), 'eta': ledger.queue_eta(token)})


@login_required
@require_POST
def cancel_own_token(request, token_id):
    """Allow a user to cancel their own waiting token."""
    token = get_object_or_404(Token, pk=token_id, user=request.user)
    try:
        cancelled = ledger.cancel(token.pk, request.user)
    except LedgerError as e:
        return JsonResponse({'error': e.code, 'message': str(e)}, status=e.status)
    return JsonResponse({'status': cancelled.status, 'token_id': str(cancelled.pk)})
