from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from rest_framework import status

from core.capabilities import resolve
from . import services
from .serializers import (
    ApplicationSerializer,
    ApplicationSubmitSerializer,
    GigCreateSerializer,
    GigInvitationInputSerializer,
    GigInvitationSerializer,
    GigSerializer,
)


class GigCreateView(APIView):
    """
    POST /api/gigs/
    Body: { "title": "...", "slots": [{"instruments": ["Alto Sax"], "invite_only": false, "payment": "80.00"}] }
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        caps = resolve(request.user)
        serializer = GigCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        gig = services.create_gig(caps, **serializer.validated_data)
        return Response(GigSerializer(gig).data, status=status.HTTP_201_CREATED)


class GigDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, gig_id):
        resolve(request.user)
        gig = services.get_gig(gig_id)
        return Response(GigSerializer(gig).data)


class GigCancelView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, gig_id):
        caps = resolve(request.user)
        gig = services.cancel_gig(caps, services.get_gig(gig_id))
        return Response(GigSerializer(gig).data)


class GigApplicationsView(APIView):
    """
    GET /api/gigs/<gig_id>/applications/  (gig poster only)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, gig_id):
        caps = resolve(request.user)
        applications = services.list_applications(caps, services.get_gig(gig_id))
        return Response(ApplicationSerializer(applications, many=True).data)


class SubmitApplicationView(APIView):
    """
    POST /api/gigs/<gig_id>/slots/<slot_id>/apply/
    Body: { "instrument": "Alto Sax" }
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, gig_id, slot_id):
        caps = resolve(request.user)
        serializer = ApplicationSubmitSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        application = services.submit_application(
            caps,
            services.get_gig(gig_id),
            slot_id,
            serializer.validated_data["instrument"],
        )
        return Response(ApplicationSerializer(application).data, status=status.HTTP_201_CREATED)


class AcceptApplicationView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, application_id):
        caps = resolve(request.user)
        application = services.accept_application(caps, application_id)
        return Response({
            "success": True,
            "application": ApplicationSerializer(application).data,
            "gig_status": application.gig.status,
        })


class RejectApplicationView(APIView):
    permission_classes = [IsAuthenticated]

    def post(self, request, application_id):
        caps = resolve(request.user)
        application = services.reject_application(caps, application_id)
        return Response({
            "success": True,
            "application": ApplicationSerializer(application).data,
        })


class GigInvitationView(APIView):
    """
    POST   /api/gigs/<gig_id>/invitations/   grant invite-only access
    DELETE /api/gigs/<gig_id>/invitations/   revoke it
    Body: { "musician_id": 12, "instrument": "Trumpet" }
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, gig_id):
        caps = resolve(request.user)
        serializer = GigInvitationInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invitation, created = services.invite_to_gig(
            caps,
            services.get_gig(gig_id),
            serializer.validated_data["musician_id"],
            serializer.validated_data["instrument"],
        )
        return Response(
            {"invitation": GigInvitationSerializer(invitation).data, "created": created},
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def delete(self, request, gig_id):
        caps = resolve(request.user)
        serializer = GigInvitationInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        revoked = services.revoke_gig_invitation(
            caps,
            services.get_gig(gig_id),
            serializer.validated_data["musician_id"],
            serializer.validated_data["instrument"],
        )
        return Response({"success": True, "revoked": revoked})
