# users/models.py
from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models

from core.constants import ROLE_ADMIN, ROLE_MUSICIAN, ROLE_VENUE_MANAGER


class User(AbstractUser):
    ROLE_CHOICES = (
        (ROLE_MUSICIAN, 'Musician'),
        (ROLE_VENUE_MANAGER, 'Venue Manager'),
        (ROLE_ADMIN, 'Admin'),
    )

    # Mirrors the Supabase token role claim, refreshed on every request
    role = models.CharField(
        max_length=30,
        choices=ROLE_CHOICES,
        default=ROLE_MUSICIAN
    )

    # Supabase auth.users id ("sub" claim)
    supabase_id = models.CharField(max_length=64, unique=True, blank=True, null=True)

    def __str__(self):
        return self.username


class Musician(models.Model):
    """
    Public musician profile. One per user, created on first invitation
    acceptance or from the profile screen.
    """
    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='musician',
    )
    name = models.CharField(max_length=255)
    email = models.EmailField(blank=True, default='')
    phone = models.CharField(max_length=32, blank=True, null=True)
    # Instrument tags from core.constants.INSTRUMENTS
    instruments = models.JSONField(default=list, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    def plays(self, instrument: str) -> bool:
        return instrument in (self.instruments or [])
