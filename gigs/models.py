# gigs/models.py
from django.conf import settings
from django.db import models
from django.db.models import Q


class Gig(models.Model):
    STATUS_OPEN = "open"
    STATUS_FILLED = "filled"
    STATUS_CANCELLED = "cancelled"

    STATUS_CHOICES = [
        (STATUS_OPEN, "Open"),
        (STATUS_FILLED, "Filled"),
        (STATUS_CANCELLED, "Cancelled"),
    ]

    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="posted_gigs",
    )
    venue = models.ForeignKey(
        "venues.Venue",
        on_delete=models.SET_NULL,
        related_name="gigs",
        null=True,
        blank=True,
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    location = models.CharField(max_length=255, blank=True, default="")
    start_time = models.DateTimeField(blank=True, null=True)
    end_time = models.DateTimeField(blank=True, null=True)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_OPEN)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [
            models.Index(fields=["owner", "start_time"], name="gig_owner_start_idx"),
            models.Index(fields=["status"], name="gig_status_idx"),
        ]

    def __str__(self):
        return self.title


class Slot(models.Model):
    """One musician position on a gig, claimable on any one of its instruments."""
    gig = models.ForeignKey(Gig, on_delete=models.CASCADE, related_name="slots")
    position = models.PositiveSmallIntegerField(default=0)
    instruments = models.JSONField(default=list)
    invite_only = models.BooleanField(default=False)
    payment = models.DecimalField(max_digits=10, decimal_places=2, blank=True, null=True)

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(fields=["gig", "position"], name="uniq_slot_position"),
        ]

    def __str__(self):
        return f"{self.gig.title} #{self.position} ({', '.join(self.instruments)})"

    def requires(self, instrument: str) -> bool:
        return instrument in (self.instruments or [])

    @property
    def is_paid(self) -> bool:
        return self.payment is not None and self.payment > 0


class Application(models.Model):
    STATUS_PENDING = "pending"
    STATUS_ACCEPTED = "accepted"
    STATUS_REJECTED = "rejected"

    STATUS_CHOICES = [
        (STATUS_PENDING, "Pending"),
        (STATUS_ACCEPTED, "Accepted"),
        (STATUS_REJECTED, "Rejected"),
    ]

    ACTIVE_STATUSES = (STATUS_PENDING, STATUS_ACCEPTED)

    gig = models.ForeignKey(Gig, on_delete=models.CASCADE, related_name="applications")
    slot = models.ForeignKey(Slot, on_delete=models.CASCADE, related_name="applications")
    applicant = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="gig_applications",
    )
    instrument = models.CharField(max_length=64)
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=STATUS_PENDING)
    submitted_at = models.DateTimeField(auto_now_add=True)
    decided_at = models.DateTimeField(blank=True, null=True)

    class Meta:
        ordering = ["submitted_at"]
        constraints = [
            # Last line of defence for concurrent accepts on one slot
            models.UniqueConstraint(
                fields=["slot"],
                condition=Q(status="accepted"),
                name="uniq_accepted_per_slot",
            ),
            models.UniqueConstraint(
                fields=["slot", "applicant"],
                condition=Q(status__in=["pending", "accepted"]),
                name="uniq_active_application_per_slot",
            ),
        ]
        indexes = [
            models.Index(fields=["gig", "status"], name="app_gig_status_idx"),
        ]

    def __str__(self):
        return f"{self.applicant} -> {self.slot} [{self.status}]"


class GigInvitation(models.Model):
    """Capability grant: lets one musician apply to invite-only slots for an instrument."""
    gig = models.ForeignKey(Gig, on_delete=models.CASCADE, related_name="invitations")
    instrument = models.CharField(max_length=64)
    musician = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="gig_invitations",
    )
    invited_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["gig", "instrument", "musician"],
                name="uniq_gig_invitation",
            ),
        ]

    def __str__(self):
        return f"{self.musician} invited to {self.gig} ({self.instrument})"
