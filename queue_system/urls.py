from django.urls import path
from . import views

urlpatterns = [
    path('tokens/', views.token_list, name='token_list'),
    path('tokens/mine/', views.my_tokens, name='my_tokens'),
    path('tokens/active/', views.active_token, name='active_token'),
    path('tokens/<uuid:token_id>/', views.token_status, name='token_status'),
    path('tokens/<uuid:token_id>/cancel/', views.cancel_own_token, name='cancel_own_token'),
]
