from django.conf import settings
from django.db import models

from businesses.models import Business
from queue_system.models import Token


class LogAction(models.TextChoices):
    JOIN = 'join', 'Join'
    SERVE = 'serve', 'Serve'
    COMPLETE = 'complete', 'Complete'
    CANCEL = 'cancel', 'Cancel'
    CALL_NEXT = 'call_next', 'Call Next'
    PAUSE = 'pause', 'Pause'
    RESUME = 'resume', 'Resume'


class BusinessLog(models.Model):
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='logs')
    actor = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True)
    token = models.ForeignKey(Token, on_delete=models.SET_NULL, null=True, blank=True)
    action = models.CharField(max_length=20, choices=LogAction.choices)
    description = models.CharField(max_length=255)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'business_logs'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"{self.get_action_display()} by {self.actor} on {self.business} at {self.created_at}"

    def as_dict(self):
        return {
            'id': self.pk,
            'action': self.action,
            'description': self.description,
            'metadata': self.metadata,
            'token_id': str(self.token_id) if self.token_id else None,
            'created_at': self.created_at.isoformat(),
        }
