import uuid

from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from accounts.decorators import role_required
from accounts.models import Role
from businesses.models import Business
from predictions.gemini import get_admin_analytics
from queue_system import ledger
from queue_system.errors import LedgerError
from queue_system.models import Token

owner_required = role_required(Role.ADMIN)


def _owned_business(request, business_id):
    return get_object_or_404(Business.objects.prefetch_related('services'), id=business_id, owner=request.user)


def _ledger_error(e):
    return JsonResponse({'error': e.code, 'message': str(e)}, status=e.status)


def _queue_snapshot(business):
    waiting = ledger.waiting_tokens(business)
    serving = ledger.serving_token(business)
    return {
        'business': business.as_dict(),
        'waiting': [dict(t.as_dict(), index=i) for i, t in enumerate(waiting, start=1)],
        'serving': serving.as_dict() if serving else None,
    }


@owner_required
@require_GET
def owner_dashboard(request):
    business = Business.objects.filter(owner=request.user).prefetch_related('services').first()
    if business is None:
        return JsonResponse({'view': Role.ADMIN, 'business': None, 'waiting': [], 'serving': None})
    return JsonResponse(dict(_queue_snapshot(business), view=Role.ADMIN))


@owner_required
@require_GET
def business_queue(request, business_id):
    business = _owned_business(request, business_id)
    return JsonResponse(_queue_snapshot(business))


@owner_required
@require_POST
def call_next(request, business_id):
    business = _owned_business(request, business_id)
    current_id = request.POST.get('current_serving_id') or None
    try:
        if current_id is not None:
            current_id = uuid.UUID(current_id)
    except ValueError:
        return JsonResponse({'error': 'bad_request', 'message': 'current_serving_id must be a UUID'}, status=400)
    try:
        completed, serving = ledger.call_next(business, current_serving_id=current_id, actor=request.user)
    except LedgerError as e:
        return _ledger_error(e)
    return JsonResponse({
        'completed': completed.as_dict() if completed else None,
        'serving': serving.as_dict() if serving else None,
    })


@owner_required
@require_POST
def set_token_status(request, token_id):
    token = get_object_or_404(Token, id=token_id, business__owner=request.user)
    try:
        token = ledger.set_status(token.pk, request.POST.get('status', ''), actor=request.user)
    except LedgerError as e:
        return _ledger_error(e)
    return JsonResponse({'token': token.as_dict()})


@owner_required
@require_POST
def pause_business(request, business_id):
    business = ledger.set_business_open(_owned_business(request, business_id), False, actor=request.user)
    return JsonResponse({'business_id': str(business.pk), 'isOpen': business.is_open})


@owner_required
@require_POST
def resume_business(request, business_id):
    business = ledger.set_business_open(_owned_business(request, business_id), True, actor=request.user)
    return JsonResponse({'business_id': str(business.pk), 'isOpen': business.is_open})


@owner_required
@require_GET
def business_logs(request, business_id):
    business = _owned_business(request, business_id)
    logs = business.logs.all()[:20]
    return JsonResponse({'logs': [log.as_dict() for log in logs]})


@owner_required
@require_GET
def queue_analytics(request, business_id):
    business = _owned_business(request, business_id)
    snapshot = _queue_snapshot(business)
    queue_data = {
        'business': business.name,
        'waiting': len(snapshot['waiting']),
        'serving': snapshot['serving']['tokenNumber'] if snapshot['serving'] else None,
        'services': [
            {'name': s.name, 'averageServiceTime': s.average_service_time}
            for s in business.services.all()
        ],
    }
    return JsonResponse({'suggestion': get_admin_analytics(queue_data)})
