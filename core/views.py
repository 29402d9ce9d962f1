from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework import serializers, status
from django.db import connections
from django.db.utils import OperationalError
from django.conf import settings
import time

from .messaging import build_whatsapp_link


class HealthCheckView(APIView):
    """
    Lightweight health endpoint for uptime checks.
    - Checks DB connectivity
    - Returns env and simple latency
    """
    permission_classes = [AllowAny]
    authentication_classes = []  # public endpoint

    def get(self, request, *args, **kwargs):
        start = time.time()

        db_ok = True
        try:
            connections["default"].cursor()
        except OperationalError:
            db_ok = False

        duration_ms = int((time.time() - start) * 1000)

        return Response(
            {
                "status": "ok" if db_ok else "degraded",
                "db": db_ok,
                "env": getattr(settings, "ENV", "unknown"),
                "latency_ms": duration_ms,
            }
        )


class WhatsAppLinkSerializer(serializers.Serializer):
    recipient_phone = serializers.CharField(max_length=32)
    message = serializers.CharField()


class WhatsAppLinkView(APIView):
    """
    POST /api/messages/whatsapp-link/
    Body: { "recipient_phone": "+44 7700 900123", "message": "..." }

    Messages are sent from the user's own WhatsApp; we only build the link.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request):
        serializer = WhatsAppLinkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            url = build_whatsapp_link(
                serializer.validated_data["recipient_phone"],
                serializer.validated_data["message"],
            )
        except ValueError as e:
            raise serializers.ValidationError({"recipient_phone": [str(e)]})

        return Response({"success": True, "whatsapp_url": url}, status=status.HTTP_200_OK)
