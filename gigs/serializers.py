from rest_framework import serializers

from core.constants import INSTRUMENTS
from .models import Application, Gig, GigInvitation, Slot


# -----------------------------------------
# OUTPUT
# -----------------------------------------
class SlotSerializer(serializers.ModelSerializer):
    is_filled = serializers.SerializerMethodField()

    class Meta:
        model = Slot
        fields = ["id", "position", "instruments", "invite_only", "payment", "is_filled"]

    def get_is_filled(self, obj):
        return obj.applications.filter(status=Application.STATUS_ACCEPTED).exists()


class GigSerializer(serializers.ModelSerializer):
    slots = SlotSerializer(many=True, read_only=True)

    class Meta:
        model = Gig
        fields = [
            "id",
            "owner",
            "venue",
            "title",
            "description",
            "location",
            "start_time",
            "end_time",
            "status",
            "slots",
            "created_at",
        ]
        read_only_fields = fields


class ApplicationSerializer(serializers.ModelSerializer):
    applicant_name = serializers.SerializerMethodField()

    class Meta:
        model = Application
        fields = [
            "id",
            "gig",
            "slot",
            "applicant",
            "applicant_name",
            "instrument",
            "status",
            "submitted_at",
            "decided_at",
        ]
        read_only_fields = fields

    def get_applicant_name(self, obj):
        musician = getattr(obj.applicant, "musician", None)
        return musician.name if musician else obj.applicant.username


class GigInvitationSerializer(serializers.ModelSerializer):
    class Meta:
        model = GigInvitation
        fields = ["id", "gig", "instrument", "musician", "invited_by", "created_at"]
        read_only_fields = fields


# -----------------------------------------
# INPUT
# -----------------------------------------
class SlotInputSerializer(serializers.Serializer):
    instruments = serializers.ListField(
        child=serializers.ChoiceField(choices=INSTRUMENTS),
        allow_empty=False,
    )
    invite_only = serializers.BooleanField(default=False)
    payment = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        min_value=0,
        required=False,
        allow_null=True,
    )


class GigCreateSerializer(serializers.Serializer):
    title = serializers.CharField(max_length=255)
    description = serializers.CharField(required=False, allow_blank=True, default="")
    location = serializers.CharField(max_length=255, required=False, allow_blank=True, default="")
    start_time = serializers.DateTimeField(required=False, allow_null=True, default=None)
    end_time = serializers.DateTimeField(required=False, allow_null=True, default=None)
    venue_id = serializers.IntegerField(required=False, allow_null=True, default=None)
    slots = SlotInputSerializer(many=True, allow_empty=False)


class ApplicationSubmitSerializer(serializers.Serializer):
    instrument = serializers.ChoiceField(choices=INSTRUMENTS)


class GigInvitationInputSerializer(serializers.Serializer):
    musician_id = serializers.IntegerField()
    instrument = serializers.ChoiceField(choices=INSTRUMENTS)
