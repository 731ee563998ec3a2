"""Process-wide resources, built once at startup and injected everywhere else."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from redis.asyncio import Redis
from supabase import AsyncClient

from ..auth.identity import SupabaseIdentityProvider
from ..repositories.profile_repository import ProfileRepository
from ..repositories.quiz_repository import QuizRepository
from ..repositories.submission_repository import SubmissionRepository
from ..services.profile_service import ProfileService
from ..services.quiz_service import QuizService
from ..ws.dispatcher import EventDispatcher, RedisEventRelay
from ..ws.hub import ConnectionHub
from .config import Settings
from .redis_manager import close_redis, connect_redis
from .supabase_client import close_supabase, create_supabase

logger = logging.getLogger(__name__)


@dataclass
class Resources:
    quiz_service: QuizService
    profile_service: ProfileService
    identity: Any  # anything with ``async verify(token) -> Identity``
    hub: ConnectionHub
    dispatcher: EventDispatcher
    supabase: Optional[AsyncClient] = None
    redis: Optional[Redis] = None
    relay: Optional[RedisEventRelay] = None


async def open_resources(settings: Settings) -> Resources:
    supabase = await create_supabase(settings)
    try:
        redis = await connect_redis(settings)
    except Exception:
        await close_supabase(supabase)
        raise

    hub = ConnectionHub()
    dispatcher = EventDispatcher(hub, redis, channel=settings.EVENTS_CHANNEL)
    return Resources(
        quiz_service=QuizService(
            QuizRepository(supabase),
            SubmissionRepository(supabase),
            leaderboard_limit=settings.LEADERBOARD_LIMIT,
        ),
        profile_service=ProfileService(ProfileRepository(supabase)),
        identity=SupabaseIdentityProvider(supabase),
        hub=hub,
        dispatcher=dispatcher,
        supabase=supabase,
        redis=redis,
        relay=RedisEventRelay(redis, dispatcher) if redis is not None else None,
    )


async def close_resources(resources: Resources) -> None:
    if resources.relay is not None:
        await resources.relay.stop()
    await close_redis(resources.redis)
    if resources.supabase is not None:
        await close_supabase(resources.supabase)
    logger.info("Resources released")
