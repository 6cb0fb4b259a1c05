from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET

from businesses.models import Service
from queue_system.models import Token, TokenStatus
from .gemini import get_wait_time_prediction


@login_required
@require_GET
def service_prediction(request, service_id):
    service = get_object_or_404(Service.objects.select_related('business'), id=service_id)
    queue_length = Token.objects.filter(business=service.business, status=TokenStatus.WAITING).count()

    prediction = get_wait_time_prediction(service.name, queue_length, service.average_service_time)
    return JsonResponse({
        'service_id': str(service.pk),
        'queue_length': queue_length,
        **prediction,
    })
