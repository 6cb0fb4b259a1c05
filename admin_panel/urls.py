from django.urls import path
from . import views

urlpatterns = [
    path('', views.owner_dashboard, name='owner_dashboard'),
    path('business/<uuid:business_id>/', views.business_queue, name='business_queue'),
    path('business/<uuid:business_id>/call-next/', views.call_next, name='call_next'),
    path('business/<uuid:business_id>/pause/', views.pause_business, name='pause_business'),
    path('business/<uuid:business_id>/resume/', views.resume_business, name='resume_business'),
    path('business/<uuid:business_id>/logs/', views.business_logs, name='business_logs'),
    path('business/<uuid:business_id>/analytics/', views.queue_analytics, name='queue_analytics'),
    path('token/<uuid:token_id>/status/', views.set_token_status, name='set_token_status'),
]
