from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import status

from core.capabilities import resolve
from . import invitations, services
from .serializers import (
    ConnectionSerializer,
    InvitationAcceptSerializer,
    InvitationCreateSerializer,
    ManagerInvitationCreateSerializer,
    ManagerInvitationLookupSerializer,
    MusicianSearchResultSerializer,
    NetworkMemberInputSerializer,
    NetworkMemberSerializer,
    VenueInvitationSerializer,
    VenueManagerInvitationSerializer,
    VenueMembershipSerializer,
)


# -----------------------------------------
# Venue-scoped (manager side)
# -----------------------------------------
class VenueInvitationListCreateView(APIView):
    """
    GET  /api/venues/<venue_id>/invitations/
    POST /api/venues/<venue_id>/invitations/
    Body (all optional): { "email", "first_name", "last_name", "phone", "instruments", "ttl_days" }
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, venue_id):
        caps = resolve(request.user)
        qs = invitations.list_invitations(caps, venue_id)
        return Response(VenueInvitationSerializer(qs, many=True).data)

    def post(self, request, venue_id):
        caps = resolve(request.user)
        serializer = InvitationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        data = dict(serializer.validated_data)
        ttl_days = data.pop("ttl_days", None)
        invitation = invitations.create_invitation(caps, venue_id, prefill=data, ttl_days=ttl_days)
        return Response(VenueInvitationSerializer(invitation).data, status=status.HTTP_201_CREATED)


class VenueManagerInvitationListCreateView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, venue_id):
        caps = resolve(request.user)
        qs = invitations.list_manager_invitations(caps, venue_id)
        return Response(VenueManagerInvitationSerializer(qs, many=True).data)

    def post(self, request, venue_id):
        caps = resolve(request.user)
        serializer = ManagerInvitationCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        invitation = invitations.create_manager_invitation(
            caps,
            venue_id,
            serializer.validated_data["email"],
            ttl_days=serializer.validated_data.get("ttl_days"),
        )
        return Response(VenueManagerInvitationSerializer(invitation).data, status=status.HTTP_201_CREATED)


class VenueNetworkView(APIView):
    """
    GET    /api/venues/<venue_id>/network/
    POST   /api/venues/<venue_id>/network/   { "musician_id": 12 }
    DELETE /api/venues/<venue_id>/network/   { "musician_id": 12 }
    """
    permission_classes = [IsAuthenticated]

    def get(self, request, venue_id):
        caps = resolve(request.user)
        members = services.list_network(caps, venue_id)
        return Response(NetworkMemberSerializer(members, many=True).data)

    def post(self, request, venue_id):
        caps = resolve(request.user)
        serializer = NetworkMemberInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        membership, created = services.add_to_network(
            caps, venue_id, serializer.validated_data["musician_id"]
        )
        return Response(
            {
                "success": True,
                "created": created,
                "message": "Added to network" if created else "Already in network",
                "member": NetworkMemberSerializer(membership).data,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def delete(self, request, venue_id):
        caps = resolve(request.user)
        serializer = NetworkMemberInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        removed = services.remove_from_network(caps, venue_id, serializer.validated_data["musician_id"])
        return Response({"success": True, "removed": removed})


class VenueIsManagerView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request, venue_id):
        caps = resolve(request.user)
        return Response({"venue_id": venue_id, "is_manager": services.is_manager(caps, venue_id)})


# -----------------------------------------
# Musician-scoped (own network)
# -----------------------------------------
class MyNetworkView(APIView):
    """
    GET    /api/network/
    POST   /api/network/   { "musician_id": 12 }
    DELETE /api/network/   { "musician_id": 12 }
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        caps = resolve(request.user)
        return Response(ConnectionSerializer(services.list_my_network(caps), many=True).data)

    def post(self, request):
        caps = resolve(request.user)
        serializer = NetworkMemberInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        connection, created = services.add_to_my_network(caps, serializer.validated_data["musician_id"])
        return Response(
            {
                "success": True,
                "created": created,
                "message": "Added to network" if created else "Already in network",
                "member": ConnectionSerializer(connection).data,
            },
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def delete(self, request):
        caps = resolve(request.user)
        serializer = NetworkMemberInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        removed = services.remove_from_my_network(caps, serializer.validated_data["musician_id"])
        return Response({"success": True, "removed": removed})


class MusicianSearchView(APIView):
    """
    GET /api/network/search/?q=<name or email>
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        caps = resolve(request.user)
        results = services.search_musicians(caps, request.query_params.get("q", ""))
        return Response(MusicianSearchResultSerializer(results, many=True).data)


class MyVenueNetworksView(APIView):
    """
    GET /api/network/venues/
    Venues that list the current musician on their roster.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        caps = resolve(request.user)
        return Response(VenueMembershipSerializer(services.my_venue_networks(caps), many=True).data)


# -----------------------------------------
# Code-scoped (invitee side)
# -----------------------------------------
class InvitationLookupView(APIView):
    """
    GET /api/invitations/<code>/
    Public: the join page reads the prefill before the musician signs in.
    """
    permission_classes = [AllowAny]
    throttle_scope = "invitation-lookup"

    def get(self, request, code):
        invitation = invitations.get_invitation(code)
        return Response(VenueInvitationSerializer(invitation).data)


class InvitationAcceptView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "invitation-accept"

    def post(self, request, code):
        caps = resolve(request.user)
        serializer = InvitationAcceptSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = invitations.accept_invitation(caps, code, overrides=serializer.validated_data)
        payload = {
            "success": True,
            "venue_id": result.venue_id,
            "membership_created": result.created,
        }
        if result.warnings:
            payload["warnings"] = list(result.warnings)
        return Response(payload)


class ManagerInvitationLookupView(APIView):
    permission_classes = [AllowAny]
    throttle_scope = "invitation-lookup"

    def get(self, request, code):
        invitation = invitations.get_manager_invitation(code)
        return Response(ManagerInvitationLookupSerializer(invitation).data)


class ManagerInvitationAcceptView(APIView):
    permission_classes = [IsAuthenticated]
    throttle_scope = "invitation-accept"

    def post(self, request, code):
        caps = resolve(request.user)
        result = invitations.accept_manager_invitation(caps, code)
        return Response({
            "success": True,
            "venue_id": result.venue_id,
            "role_granted": result.created,
        })
