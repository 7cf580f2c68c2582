from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request

from app.api.deps import get_organization_id, get_trigger_service
from app.core.config import settings
from app.core.rate_limit import limiter
from app.schemas.common import SuccessResponse
from app.schemas.interest_trigger import (
    InterestTriggerCreate,
    InterestTriggerOut,
    InterestTriggerUpdate,
    MessageContext,
    TriggerMatchResponse,
    TriggerReorderRequest,
    TriggerTestRequest,
    TriggerTestResponse,
)
from app.services.trigger_service import InterestTriggerService

router = APIRouter(prefix="/interest-triggers", tags=["Interest Triggers"])


@router.get("", response_model=List[InterestTriggerOut])
async def list_triggers(
    include_inactive: bool = Query(False),
    organization_id: UUID = Depends(get_organization_id),
    service: InterestTriggerService = Depends(get_trigger_service),
) -> List[InterestTriggerOut]:
    """Triggers in evaluation order (ascending priority)."""
    return await service.list_triggers(organization_id, include_inactive)


@router.post("", response_model=InterestTriggerOut, status_code=201)
async def create_trigger(
    body: InterestTriggerCreate,
    organization_id: UUID = Depends(get_organization_id),
    service: InterestTriggerService = Depends(get_trigger_service),
):
    return await service.create_trigger(organization_id, body)


@router.put("/reorder", response_model=List[InterestTriggerOut])
async def reorder_triggers(
    body: TriggerReorderRequest,
    organization_id: UUID = Depends(get_organization_id),
    service: InterestTriggerService = Depends(get_trigger_service),
) -> List[InterestTriggerOut]:
    return await service.reorder_triggers(organization_id, body.triggers)


@router.post("/match", response_model=TriggerMatchResponse)
@limiter.limit(settings.CLASSIFY_RATE_LIMIT)
async def match_message(
    request: Request,
    body: MessageContext,
    organization_id: UUID = Depends(get_organization_id),
    service: InterestTriggerService = Depends(get_trigger_service),
) -> TriggerMatchResponse:
    """Dry run: report which trigger would classify the message.

    Rate-limited per IP since it sits on the inbound-message path.
    """
    return await service.match(organization_id, body)


@router.patch("/{trigger_id}", response_model=InterestTriggerOut)
async def update_trigger(
    trigger_id: UUID,
    body: InterestTriggerUpdate,
    organization_id: UUID = Depends(get_organization_id),
    service: InterestTriggerService = Depends(get_trigger_service),
):
    return await service.update_trigger(organization_id, trigger_id, body)


@router.delete("/{trigger_id}", response_model=SuccessResponse)
async def delete_trigger(
    trigger_id: UUID,
    organization_id: UUID = Depends(get_organization_id),
    service: InterestTriggerService = Depends(get_trigger_service),
) -> SuccessResponse:
    """Soft delete: the trigger stays stored but stops matching."""
    await service.delete_trigger(organization_id, trigger_id)
    return SuccessResponse()


@router.post("/{trigger_id}/test", response_model=TriggerTestResponse)
async def test_trigger(
    trigger_id: UUID,
    body: TriggerTestRequest,
    organization_id: UUID = Depends(get_organization_id),
    service: InterestTriggerService = Depends(get_trigger_service),
) -> TriggerTestResponse:
    return await service.test_trigger(organization_id, trigger_id, body.value)
