from rest_framework import serializers

from core.constants import INSTRUMENTS
from users.models import Musician
from .models import MusicianConnection, NetworkMembership, VenueInvitation, VenueManagerInvitation


class VenueInvitationSerializer(serializers.ModelSerializer):
    venue_name = serializers.CharField(source="venue.name", read_only=True)
    status = serializers.CharField(source="effective_status", read_only=True)

    class Meta:
        model = VenueInvitation
        fields = [
            "id",
            "venue",
            "venue_name",
            "invitation_code",
            "status",
            "expires_at",
            "musician_email",
            "musician_first_name",
            "musician_last_name",
            "musician_phone",
            "musician_instruments",
            "accepted_by",
            "accepted_at",
            "created_at",
        ]
        read_only_fields = fields


class VenueManagerInvitationSerializer(serializers.ModelSerializer):
    venue_name = serializers.CharField(source="venue.name", read_only=True)
    status = serializers.CharField(source="effective_status", read_only=True)

    class Meta:
        model = VenueManagerInvitation
        fields = [
            "id",
            "venue",
            "venue_name",
            "email",
            "invitation_code",
            "status",
            "expires_at",
            "accepted_by",
            "accepted_at",
            "created_at",
        ]
        read_only_fields = fields


class ManagerInvitationLookupSerializer(serializers.ModelSerializer):
    """Public view of a manager invitation; the invited address is not echoed."""
    venue_name = serializers.CharField(source="venue.name", read_only=True)
    status = serializers.CharField(source="effective_status", read_only=True)

    class Meta:
        model = VenueManagerInvitation
        fields = ["venue", "venue_name", "invitation_code", "status", "expires_at"]
        read_only_fields = fields


class NetworkMemberSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()
    email = serializers.EmailField(source="musician.email", read_only=True)
    instruments = serializers.SerializerMethodField()

    class Meta:
        model = NetworkMembership
        fields = ["id", "venue", "musician", "name", "email", "instruments", "added_by", "created_at"]
        read_only_fields = fields

    def _profile(self, obj):
        return getattr(obj.musician, "musician", None)

    def get_name(self, obj):
        profile = self._profile(obj)
        return profile.name if profile else obj.musician.username

    def get_instruments(self, obj):
        profile = self._profile(obj)
        return list(profile.instruments or []) if profile else []


class ConnectionSerializer(serializers.ModelSerializer):
    name = serializers.SerializerMethodField()
    email = serializers.SerializerMethodField()
    instruments = serializers.SerializerMethodField()

    class Meta:
        model = MusicianConnection
        fields = ["id", "member", "name", "email", "instruments", "created_at"]
        read_only_fields = fields

    def _profile(self, obj):
        return getattr(obj.member, "musician", None)

    def get_name(self, obj):
        profile = self._profile(obj)
        return profile.name if profile else obj.member.username

    def get_email(self, obj):
        profile = self._profile(obj)
        return (profile.email if profile else "") or obj.member.email

    def get_instruments(self, obj):
        profile = self._profile(obj)
        return list(profile.instruments or []) if profile else []


class MusicianSearchResultSerializer(serializers.ModelSerializer):
    musician_id = serializers.IntegerField(source="user_id", read_only=True)

    class Meta:
        model = Musician
        fields = ["musician_id", "name", "email", "instruments"]
        read_only_fields = fields


class VenueMembershipSerializer(serializers.ModelSerializer):
    venue_name = serializers.CharField(source="venue.name", read_only=True)

    class Meta:
        model = NetworkMembership
        fields = ["id", "venue", "venue_name", "created_at"]
        read_only_fields = fields


# -----------------------------------------
# INPUT
# -----------------------------------------
class InvitationCreateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False, allow_blank=True)
    first_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    instruments = serializers.ListField(
        child=serializers.ChoiceField(choices=INSTRUMENTS),
        required=False,
    )
    ttl_days = serializers.IntegerField(required=False, min_value=1)


class InvitationAcceptSerializer(serializers.Serializer):
    """Fields the musician confirmed on the join form. All optional."""
    email = serializers.EmailField(required=False, allow_blank=True)
    first_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    last_name = serializers.CharField(max_length=100, required=False, allow_blank=True)
    phone = serializers.CharField(max_length=32, required=False, allow_blank=True)
    instruments = serializers.ListField(
        child=serializers.ChoiceField(choices=INSTRUMENTS),
        required=False,
    )


class ManagerInvitationCreateSerializer(serializers.Serializer):
    email = serializers.EmailField()
    ttl_days = serializers.IntegerField(required=False, min_value=1)


class NetworkMemberInputSerializer(serializers.Serializer):
    musician_id = serializers.IntegerField()
