import logging
from typing import AsyncIterator, Optional
from uuid import UUID

from fastapi import Depends, Header
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Tenant
# ---------------------------------------------------------------------------


async def get_organization_id(
    x_organization_id: UUID = Header(..., alias="X-Organization-Id"),
) -> UUID:
    """Organization the request acts on, supplied by the calling layer."""
    return x_organization_id


# ---------------------------------------------------------------------------
# Redis client factory
# ---------------------------------------------------------------------------


async def get_redis_client() -> AsyncIterator[Optional[Redis]]:
    """Yield a per-request Redis client, closing its pool afterwards.

    Yields ``None`` when Redis cannot be reached, which turns caching and
    run cooldowns into no-ops for the request.
    """
    client = None
    try:
        client = Redis.from_url(settings.REDIS_URL, decode_responses=True)
        await client.ping()
    except Exception:
        logger.warning("Redis unavailable, caching disabled for this request")
        if client is not None:
            await client.aclose()
        yield None
        return

    try:
        yield client
    finally:
        await client.aclose()


async def get_cache_service(
    redis_client: Optional[Redis] = Depends(get_redis_client),
):
    """Build a :class:`CacheService` backed by the shared Redis client."""
    from app.core.cache import CacheService

    return CacheService(redis_client=redis_client)


# ---------------------------------------------------------------------------
# Repository factory functions (one per repository, each gets the shared db)
# ---------------------------------------------------------------------------


async def get_lead_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.lead_repository import LeadRepository

    return LeadRepository(db)


async def get_trigger_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.interest_trigger_repository import (
        InterestTriggerRepository,
    )

    return InterestTriggerRepository(db)


async def get_rule_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.temperature_rule_repository import (
        TemperatureRuleRepository,
    )

    return TemperatureRuleRepository(db)


async def get_settings_repo(
    db: AsyncSession = Depends(get_db),
):
    from app.repositories.crm_settings_repository import CRMSettingsRepository

    return CRMSettingsRepository(db)


# ---------------------------------------------------------------------------
# Service factory functions
# ---------------------------------------------------------------------------


async def get_trigger_service(
    trigger_repo=Depends(get_trigger_repo),
    lead_repo=Depends(get_lead_repo),
    cache=Depends(get_cache_service),
):
    from app.services.trigger_service import InterestTriggerService

    return InterestTriggerService(
        trigger_repo=trigger_repo, lead_repo=lead_repo, cache=cache
    )


async def get_rule_service(
    rule_repo=Depends(get_rule_repo),
    settings_repo=Depends(get_settings_repo),
):
    from app.services.temperature_rule_service import TemperatureRuleService

    return TemperatureRuleService(rule_repo=rule_repo, settings_repo=settings_repo)


async def get_crm_settings_service(
    settings_repo=Depends(get_settings_repo),
):
    from app.services.temperature_rule_service import CRMSettingsService

    return CRMSettingsService(settings_repo=settings_repo)


async def get_lead_temperature_service(
    lead_repo=Depends(get_lead_repo),
):
    from app.services.lead_temperature_service import LeadTemperatureService

    return LeadTemperatureService(lead_repo=lead_repo)
