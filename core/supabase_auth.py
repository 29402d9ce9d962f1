# core/supabase_auth.py
# Custom DRF authentication class to verify Supabase JWTs

import os
import logging
import jwt
from django.contrib.auth import get_user_model
from rest_framework.authentication import BaseAuthentication
from rest_framework.exceptions import AuthenticationFailed

from core.constants import ROLE_ADMIN, ROLE_MUSICIAN, ROLE_VENUE_MANAGER

logger = logging.getLogger("gigboard.auth")

User = get_user_model()

KNOWN_ROLES = {ROLE_MUSICIAN, ROLE_VENUE_MANAGER, ROLE_ADMIN}


def role_claim(payload: dict) -> str:
    """
    Role carried by the token.

    app_metadata can only be written with the service key, so it is trusted
    for any role. user_metadata is editable by the user themselves and can
    never grant admin.
    """
    app_role = (payload.get("app_metadata") or {}).get("role")
    if app_role in KNOWN_ROLES:
        return app_role

    user_role = (payload.get("user_metadata") or {}).get("role")
    if user_role in KNOWN_ROLES and user_role != ROLE_ADMIN:
        return user_role
    return ROLE_MUSICIAN


class SupabaseJWTAuthentication(BaseAuthentication):
    """
    Custom authentication class that validates Supabase JWTs.

    This authenticator:
    1. Extracts the JWT from the Authorization header
    2. Verifies the token signature using the Supabase JWT secret
    3. Looks up or creates a Django user keyed on the Supabase user ID
    4. Refreshes email and role claim so role changes apply immediately
    """

    def authenticate(self, request):
        auth_header = request.headers.get("Authorization", "")

        if not auth_header.startswith("Bearer "):
            return None  # Let other auth backends handle it

        token = auth_header.split(" ")[1]

        supabase_jwt_secret = os.environ.get("SUPABASE_JWT_SECRET")
        if not supabase_jwt_secret:
            logger.warning("SUPABASE_JWT_SECRET not configured")
            return None

        try:
            # Supabase uses HS256 by default
            payload = jwt.decode(
                token,
                supabase_jwt_secret,
                algorithms=["HS256"],
                audience="authenticated",
            )
        except jwt.ExpiredSignatureError:
            raise AuthenticationFailed("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Invalid Supabase token: {e}")
            return None  # Let other auth backends try

        supabase_user_id = payload.get("sub")
        email = payload.get("email")

        if not supabase_user_id:
            raise AuthenticationFailed("Invalid token: missing user ID")
        if not email:
            raise AuthenticationFailed("Token missing email claim")

        user = self._sync_user(supabase_user_id, email, payload)
        return (user, payload)

    def authenticate_header(self, request):
        return 'Bearer realm="api"'

    def _sync_user(self, supabase_user_id: str, email: str, payload: dict):
        """
        Get or create the Django user for this Supabase identity and copy
        the token's email and role claim onto it.
        """
        role = role_claim(payload)

        user = User.objects.filter(supabase_id=supabase_user_id).first()
        if user is None:
            # Ensure unique username
            base_username = email.split("@")[0]
            username = base_username
            counter = 1
            while User.objects.filter(username=username).exists():
                username = f"{base_username}_{counter}"
                counter += 1

            user = User.objects.create(
                username=username,
                email=email,
                supabase_id=supabase_user_id,
                role=role,
                # Password is not used for Supabase auth
            )
            logger.info(f"Created new user from Supabase: {email}")
            return user

        changed = []
        if user.email != email:
            user.email = email
            changed.append("email")
        if user.role != role:
            logger.info(f"Role claim changed: user={user.id}, from={user.role}, to={role}")
            user.role = role
            changed.append("role")
        if changed:
            user.save(update_fields=changed)

        return user
