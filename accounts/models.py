from django.db import models
from django.contrib.auth.models import AbstractUser


class Role(models.TextChoices):
    CUSTOMER = 'CUSTOMER', 'Customer'
    ADMIN = 'ADMIN', 'Business owner'


class User(AbstractUser):
    # username mirrors email so the stock auth backend can sign people in by email
    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=150, blank=True)
    role = models.CharField(max_length=10, choices=Role.choices, default=Role.CUSTOMER)
    # canonical phone field (digits only, no country code)
    phone_number = models.CharField(max_length=15, blank=True, null=True)
    sms_opt_in = models.BooleanField(default=True)

    @property
    def display_name(self):
        return self.full_name or 'Anonymous'

    @property
    def is_owner(self):
        return self.role == Role.ADMIN

    def save(self, *args, **kwargs):
        if self.email and not self.username:
            self.username = self.email
        super().save(*args, **kwargs)

    def as_session(self):
        return {
            'id': self.pk,
            'email': self.email,
            'name': self.display_name,
            'role': self.role,
        }
