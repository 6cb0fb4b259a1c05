import uuid

from django.conf import settings
from django.db import models

from businesses.models import Business, Service


class TokenStatus(models.TextChoices):
    WAITING = 'WAITING', 'Waiting'
    SERVING = 'SERVING', 'Serving'
    COMPLETED = 'COMPLETED', 'Completed'
    CANCELLED = 'CANCELLED', 'Cancelled'


# Legal lifecycle edges. COMPLETED and CANCELLED are terminal and nothing
# leads back to WAITING.
TRANSITIONS = {
    TokenStatus.WAITING: frozenset({TokenStatus.SERVING, TokenStatus.CANCELLED}),
    TokenStatus.SERVING: frozenset({TokenStatus.COMPLETED}),
    TokenStatus.COMPLETED: frozenset(),
    TokenStatus.CANCELLED: frozenset(),
}

ACTIVE_STATUSES = (TokenStatus.WAITING, TokenStatus.SERVING)


def can_transition(current, target):
    return target in TRANSITIONS[TokenStatus(current)]


class Token(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='tokens')
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='tokens')
    service = models.ForeignKey(Service, on_delete=models.CASCADE, related_name='tokens')
    # Display label like "H-482"; not unique, never used for lookups
    token_number = models.CharField(max_length=8)
    # Rank at join time; never recomputed (see ledger.live_rank for the current rank)
    position = models.PositiveIntegerField()
    status = models.CharField(max_length=10, choices=TokenStatus.choices, default=TokenStatus.WAITING)
    joined_at = models.DateTimeField(auto_now_add=True, db_index=True)
    notes = models.TextField(blank=True, null=True)
    # When the token was promoted to SERVING / left the queue
    served_at = models.DateTimeField(null=True, blank=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'tokens'
        ordering = ['joined_at']
        indexes = [models.Index(fields=['business', 'status'], name='tokens_business_status_idx')]

    def __str__(self):
        return f"Token {self.token_number} - {self.user} at {self.business.name}"

    @property
    def is_active(self):
        return self.status in ACTIVE_STATUSES

    @property
    def customer_name(self):
        return self.user.display_name

    @property
    def business_name(self):
        return self.business.name

    def as_dict(self):
        return {
            'id': str(self.pk),
            'businessId': str(self.business_id),
            'serviceId': str(self.service_id),
            'tokenNumber': self.token_number,
            'position': self.position,
            'status': self.status,
            'joinedAt': self.joined_at.isoformat() if self.joined_at else None,
            'notes': self.notes,
            'isActive': self.is_active,
            'userId': self.user_id,
            'customer_name': self.customer_name,
            'business_name': self.business_name,
        }
