import logging

import httpx
from supabase import AsyncClient, AuthError, AuthRetryableError

from ..core.errors import AuthenticationError, DependencyUnavailable
from ..domain.model import Identity

logger = logging.getLogger(__name__)


class SupabaseIdentityProvider:
    """Verifies bearer tokens against Supabase Auth."""

    def __init__(self, client: AsyncClient) -> None:
        self.client = client

    async def verify(self, token: str) -> Identity:
        try:
            res = await self.client.auth.get_user(token)
        except (AuthRetryableError, httpx.TransportError) as exc:
            logger.error("Identity provider unreachable: %s", exc)
            raise DependencyUnavailable("Identity provider is temporarily unavailable") from exc
        except AuthError as exc:
            logger.info("Token rejected by identity provider: %s", exc)
            raise AuthenticationError("Invalid or expired token") from exc

        if res is None or res.user is None:
            raise AuthenticationError("Invalid or expired token")
        return Identity(user_id=str(res.user.id), email=res.user.email)
