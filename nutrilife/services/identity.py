import logging
from dataclasses import dataclass
from typing import Optional

from supabase import AuthApiError

from nutrilife.core.config import settings
from nutrilife.models.session_state import Identity
from nutrilife.services.supabase_client import get_supabase

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    identity: Identity
    access_token: str


class IdentityProvider:
    def sign_up(self, email: str, password: str, name: str) -> bool:
        raise NotImplementedError

    def sign_in(self, email: str, password: str) -> Optional[AuthSession]:
        raise NotImplementedError

    def current_identity(self, token: str) -> Optional[Identity]:
        raise NotImplementedError

    def sign_out(self, token: str) -> None:
        raise NotImplementedError


def _identity_from_user(user) -> Identity:
    metadata = getattr(user, 'user_metadata', None) or {}
    return Identity(
        uid=str(user.id),
        email=getattr(user, 'email', None),
        display_name=metadata.get('name'),
    )


class SupabaseIdentityProvider(IdentityProvider):
    """Supabase Auth as the identity provider."""

    FRONTEND_URLS = {
        "dev": "http://localhost:5173",
        "prod": "https://nutrilife-ai.vercel.app",
    }

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase()
        return self._client

    def sign_up(self, email: str, password: str, name: str) -> bool:
        frontend_url = self.FRONTEND_URLS.get(settings.ENVIRONMENT, self.FRONTEND_URLS["dev"])
        response = self.client.auth.sign_up({
            "email": email,
            "password": password,
            "options": {
                "email_redirect_to": f"{frontend_url}/onboarding",
                "data": {"name": name},
            }
        })
        if response.user:
            logger.info(f"✅ User created: {email}")
            return True
        return False

    def sign_in(self, email: str, password: str) -> Optional[AuthSession]:
        try:
            response = self.client.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except Exception as e:
            logger.error(f"❌ Error during sign-in for {email}: {e}")
            return None

        if not response.session or not response.user:
            logger.error(f"❌ Sign-in for {email} returned no session")
            return None

        return AuthSession(
            identity=_identity_from_user(response.user),
            access_token=response.session.access_token,
        )

    def current_identity(self, token: str) -> Optional[Identity]:
        try:
            response = self.client.auth.get_user(token)
        except AuthApiError:
            return None
        except Exception as e:
            logger.error(f"❌ Could not resolve identity: {e}")
            return None

        if not response or not response.user:
            return None
        return _identity_from_user(response.user)

    def sign_out(self, token: str) -> None:
        try:
            self.client.auth.admin.sign_out(token)
        except Exception as e:
            logger.error(f"❌ Error signing out: {e}")
