# classquiz/core/supabase_client.py
import logging

from supabase import AsyncClient, acreate_client
from .config import Settings

logger = logging.getLogger(__name__)


async def create_supabase(settings: Settings) -> AsyncClient:
    """Build the Supabase client once at startup; callers receive it by injection."""
    # IMPORTANT: cast to str
    client = await acreate_client(
        str(settings.SUPABASE_URL),
        str(settings.SUPABASE_SERVICE_ROLE_KEY),
    )
    logger.info("Supabase client created for %s", settings.SUPABASE_URL.host)
    return client


async def close_supabase(client: AsyncClient) -> None:
    # postgrest and auth each keep their own httpx session
    await client.postgrest.aclose()
    await client.auth.close()
