from django.db import models


class SMSLog(models.Model):
    """Record of automated SMS notifications.

    Keeps the simple (token_id, event_type) uniqueness so the same event
    is never texted twice.
    """
    EVENT_CHOICES = [
        ('token_serving', 'Token Serving'),
    ]

    token_id = models.UUIDField(db_index=True)
    event_type = models.CharField(max_length=32, choices=EVENT_CHOICES)
    phone_number = models.CharField(max_length=20)
    message = models.CharField(max_length=160)
    sent_at = models.DateTimeField(auto_now_add=True)
    success = models.BooleanField(default=False)
    provider_id = models.CharField(max_length=200, blank=True, null=True)
    details = models.TextField(blank=True, null=True)

    class Meta:
        unique_together = ('token_id', 'event_type')

    def __str__(self):
        return f"SMSLog(token={self.token_id}, event={self.event_type}, success={self.success})"
