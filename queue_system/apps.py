from django.apps import AppConfig


class QueueSystemConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'queue_system'
