import uuid

from django.conf import settings
from django.db import models


class Business(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='businesses',
    )
    name = models.CharField(max_length=150)
    category = models.CharField(max_length=50)
    location = models.CharField(max_length=200)
    image_url = models.URLField(blank=True)
    # Allow pausing the queue (call next completes but does not promote)
    is_open = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'businesses'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} - {self.location}"

    def as_dict(self, liked_ids=None):
        data = {
            'id': str(self.pk),
            'owner_id': self.owner_id,
            'name': self.name,
            'category': self.category,
            'location': self.location,
            'imageUrl': self.image_url,
            'isOpen': self.is_open,
            'services': [s.as_dict() for s in self.services.all()],
        }
        if liked_ids is not None:
            data['isLiked'] = self.pk in liked_ids
        return data


class Service(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='services')
    name = models.CharField(max_length=100)
    description = models.CharField(max_length=255, blank=True)
    average_service_time = models.PositiveIntegerField(default=10)  # in minutes

    class Meta:
        db_table = 'services'
        ordering = ['name']

    def __str__(self):
        return f"{self.name} ({self.business.name})"

    def as_dict(self):
        return {
            'id': str(self.pk),
            'name': self.name,
            'description': self.description,
            'averageServiceTime': self.average_service_time,
        }


class LikedPlace(models.Model):
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='liked_places')
    business = models.ForeignKey(Business, on_delete=models.CASCADE, related_name='likes')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'liked_places'
        unique_together = ('user', 'business')

    def __str__(self):
        return f"{self.user} likes {self.business.name}"
