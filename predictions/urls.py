from django.urls import path
from . import views

urlpatterns = [
    path('services/<uuid:service_id>/', views.service_prediction, name='service_prediction'),
]
