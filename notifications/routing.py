# notifications/routing.py
from django.urls import path
from . import consumers

websocket_urlpatterns = [
    path('ws/alerts/', consumers.TokenAlertConsumer.as_asgi()),
    path('ws/businesses/<uuid:business_id>/', consumers.LedgerConsumer.as_asgi()),
]
