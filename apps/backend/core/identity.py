"""
OAuth identity provider adapter.

Sign-in itself happens in the browser against Supabase Auth (Google OAuth).
The backend only verifies the resulting access token and reads the owner id
and email from it.
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from supabase import Client, create_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str = ""


class IdentityProvider:
    """Verifies provider-issued access tokens."""

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        self.url = url or os.getenv("SUPABASE_URL")
        self.key = key or os.getenv("SUPABASE_ANON_KEY")
        self._client: Optional[Client] = None

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.key)

    def _get_client(self) -> Client:
        if self._client is None:
            self._client = create_client(self.url, self.key)
        return self._client

    def verify_access_token(self, access_token: str) -> Optional[Identity]:
        """
        Resolve an access token to an Identity.

        Returns:
            Identity if the provider accepts the token, None otherwise
        """
        if not self.is_configured:
            raise RuntimeError("Identity provider not configured (SUPABASE_URL / SUPABASE_ANON_KEY)")

        try:
            response = self._get_client().auth.get_user(access_token)
        except Exception as e:
            # Provider raises for expired, malformed and revoked tokens alike
            logger.warning(f"[identity] Token rejected: {e}")
            return None

        user = getattr(response, "user", None)
        if not user or not getattr(user, "id", None):
            return None
        return Identity(user_id=str(user.id), email=getattr(user, "email", None) or "")


identity_provider = IdentityProvider()


def get_identity_provider() -> IdentityProvider:
    """FastAPI dependency returning the shared identity provider."""
    return identity_provider
