from django.urls import path
from . import views

urlpatterns = [
    path('', views.business_list, name='business_list'),
    path('<uuid:business_id>/', views.business_detail, name='business_detail'),
    path('<uuid:business_id>/like/', views.toggle_like, name='toggle_like'),
    path('<uuid:business_id>/services/<uuid:service_id>/join/', views.join_queue, name='join_queue'),
]
