from django.core.management.base import BaseCommand
from django.contrib.auth import get_user_model
from django.utils import timezone

from core.capabilities import resolve
from gigs import services as gig_services
from gigs.models import Gig
from users.models import Musician
from venues import invitations
from venues.models import Venue, VenueInvitation, VenueManager
from venues.network import NetworkRegistry

User = get_user_model()


class Command(BaseCommand):
    help = "Seeds the database with a sample venue, its manager, musicians, a gig and an invitation"

    def handle(self, *args, **options):
        self.stdout.write("🌱 Seeding data...")

        # 1. Ensure Users
        admin, _ = User.objects.get_or_create(username="admin", defaults={"email": "admin@example.com", "role": "admin"})
        if not admin.check_password("admin"):
            admin.set_password("admin")
            admin.save()

        manager, _ = User.objects.get_or_create(
            username="manager", defaults={"email": "manager@example.com", "role": "venue_manager"}
        )
        manager.set_password("password")
        manager.save()

        musicians = []
        for username, name, instruments in [
            ("alice", "Alice Coltrane", ["Piano", "Electric Piano"]),
            ("bob", "Bob Mintzer", ["Tenor Sax", "Alto Sax"]),
            ("cleo", "Cleo Laine", ["Vocals"]),
        ]:
            user, _ = User.objects.get_or_create(username=username, defaults={"email": f"{username}@example.com"})
            user.set_password("password")
            user.save()
            Musician.objects.get_or_create(
                user=user,
                defaults={"name": name, "email": user.email, "instruments": instruments},
            )
            musicians.append(user)

        # 2. Venue, manager grant and network
        venue, _ = Venue.objects.get_or_create(
            name="The Blue Lamp",
            defaults={"address": "1 Canal Street", "created_by": manager},
        )
        VenueManager.objects.get_or_create(venue=venue, user=manager)
        self.stdout.write(f"Used Venue: {venue.name}")

        for user in musicians:
            NetworkRegistry.add(venue.id, user.id, added_by_id=manager.id)

        # 3. Gig with slots
        caps = resolve(manager)
        if not Gig.objects.filter(venue=venue, title="Friday Late Jazz").exists():
            gig = gig_services.create_gig(
                caps,
                title="Friday Late Jazz",
                venue_id=venue.id,
                location=venue.address,
                slots=[
                    {"instruments": ["Piano"], "payment": "120.00"},
                    {"instruments": ["Alto Sax"], "payment": "120.00"},
                    {"instruments": ["Vocals"], "invite_only": True, "payment": "150.00"},
                ],
            )
            self.stdout.write(f"Created Gig: {gig.title}")

        # 4. Open invitation for the next musician
        invitation = VenueInvitation.objects.filter(
            venue=venue,
            musician_email="newcomer@example.com",
            status=VenueInvitation.STATUS_PENDING,
            expires_at__gt=timezone.now(),
        ).first()
        if invitation is None:
            invitation = invitations.create_invitation(caps, venue.id, prefill={"email": "newcomer@example.com"})
        self.stdout.write(f"Invitation code: {invitation.invitation_code}")

        self.stdout.write("✅ Seeding Complete!")
