# venues/models.py
from django.conf import settings
from django.db import models
from django.utils import timezone


class Venue(models.Model):
    name = models.CharField(max_length=255)
    address = models.CharField(max_length=512, blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_venues",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name


class VenueManager(models.Model):
    """Role grant: user may manage the venue's gigs, network and invitations."""
    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="managers")
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="managed_venues",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["venue", "user"], name="uniq_venue_manager"),
        ]

    def __str__(self):
        return f"{self.user} manages {self.venue}"


class NetworkMembership(models.Model):
    """
    A musician on a venue's trusted roster. Owned by neither side; either a
    venue manager or the musician may remove it.
    """
    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="network")
    musician = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="venue_networks",
    )
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["venue", "musician"], name="uniq_network_membership"),
        ]

    def __str__(self):
        return f"{self.musician} in {self.venue} network"


class MusicianConnection(models.Model):
    """A musician's own roster: owner keeps member in their personal network."""
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="connections",
    )
    member = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["owner", "member"], name="uniq_musician_connection"),
        ]

    def __str__(self):
        return f"{self.member} in {self.owner}'s network"


class InvitationBase(models.Model):
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_EXPIRED = "expired"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_EXPIRED, "Expired"),
    ]

    invitation_code = models.CharField(max_length=16, unique=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    expires_at = models.DateTimeField(blank=True, null=True)
    accepted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    accepted_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        abstract = True
        ordering = ["-created_at"]

    def __str__(self):
        return self.invitation_code

    def is_expired(self, now=None) -> bool:
        if self.expires_at is None:
            return False
        return (now or timezone.now()) > self.expires_at

    @property
    def effective_status(self) -> str:
        """Status as seen by readers; expiry is evaluated lazily, never swept."""
        if self.status == self.STATUS_PENDING and self.is_expired():
            return self.STATUS_EXPIRED
        return self.status


class VenueInvitation(InvitationBase):
    """Shareable code that puts the accepting musician on the venue's network."""
    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="invitations")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    # Optional prefill; overwritten with what the musician confirmed on accept
    musician_email = models.EmailField(blank=True, null=True)
    musician_first_name = models.CharField(max_length=100, blank=True, null=True)
    musician_last_name = models.CharField(max_length=100, blank=True, null=True)
    musician_phone = models.CharField(max_length=32, blank=True, null=True)
    musician_instruments = models.JSONField(default=list, blank=True)

    class Meta(InvitationBase.Meta):
        indexes = [
            models.Index(fields=["venue", "created_at"], name="venue_inv_venue_created_idx"),
        ]


class VenueManagerInvitation(InvitationBase):
    """Code that grants the venue-manager role to one specific email address."""
    venue = models.ForeignKey(Venue, on_delete=models.CASCADE, related_name="manager_invitations")
    email = models.EmailField()
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )

    class Meta(InvitationBase.Meta):
        indexes = [
            models.Index(fields=["venue", "created_at"], name="mgr_inv_venue_created_idx"),
        ]
