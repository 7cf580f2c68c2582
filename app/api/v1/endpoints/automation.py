from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_cache_service, get_db, get_organization_id
from app.core.cache import CacheService
from app.schemas.automation import TransitionRunResponse
from app.services.auto_transitions import run_manual_transitions

router = APIRouter(prefix="/automation", tags=["Automation"])


@router.post("/transitions/run", response_model=TransitionRunResponse)
async def run_transitions(
    organization_id: UUID = Depends(get_organization_id),
    db: AsyncSession = Depends(get_db),
    cache: CacheService = Depends(get_cache_service),
) -> TransitionRunResponse:
    """Run the temperature transition sweep for this organization now.

    Returns 429 if a manual run happened within the cooldown window.
    """
    return await run_manual_transitions(db, organization_id, cache)
