from django.contrib import admin
from django.urls import include, path

from . import views

urlpatterns = [
    path('', views.home, name='home'),
    path('django-admin/', admin.site.urls),
    path('accounts/', include('accounts.urls')),
    path('businesses/', include('businesses.urls')),
    path('queue/', include('queue_system.urls')),
    path('owner/', include('admin_panel.urls')),
    path('predictions/', include('predictions.urls')),
]
