from django.contrib.auth.decorators import login_required
from django.db.models import Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from queue_system import ledger
from queue_system.errors import LedgerError
from .models import Business, LikedPlace, Service


def _liked_ids(user):
    return set(LikedPlace.objects.filter(user=user).values_list('business_id', flat=True))


@login_required
@require_GET
def business_list(request):
    businesses = Business.objects.prefetch_related('services')
    term = request.GET.get('q', '').strip()
    if term:
        businesses = businesses.filter(Q(name__icontains=term) | Q(category__icontains=term))

    liked = _liked_ids(request.user)
    return JsonResponse({'businesses': [b.as_dict(liked_ids=liked) for b in businesses]})


@login_required
@require_GET
def business_detail(request, business_id):
    business = get_object_or_404(Business.objects.prefetch_related('services'), id=business_id)
    return JsonResponse({'business': business.as_dict(liked_ids=_liked_ids(request.user))})


@login_required
@require_POST
def toggle_like(request, business_id):
    business = get_object_or_404(Business, id=business_id)
    deleted, _ = LikedPlace.objects.filter(user=request.user, business=business).delete()
    if not deleted:
        LikedPlace.objects.create(user=request.user, business=business)
    return JsonResponse({'business_id': str(business.pk), 'isLiked': not deleted})


@login_required
@require_POST
def join_queue(request, business_id, service_id):
    business = get_object_or_404(Business, id=business_id)
    service = get_object_or_404(Service, id=service_id, business=business)

    # One active booking per customer, across all businesses
    existing = ledger.list_active_for_user(request.user)
    if existing:
        return JsonResponse({'error': 'already_in_queue', 'token': existing.as_dict()}, status=409)

    try:
        token = ledger.join(business, service, request.user, notes=request.POST.get('notes'))
    except LedgerError as e:
        return JsonResponse({'error': e.code, 'message': str(e)}, status=e.status)

    return JsonResponse({'token': token.as_dict()}, status=201)
