from uuid import UUID

from fastapi import APIRouter, Depends, Request

from app.api.deps import (
    get_lead_temperature_service,
    get_organization_id,
    get_trigger_service,
)
from app.core.config import settings
from app.core.rate_limit import limiter
from app.schemas.interest_trigger import ClassifyLeadResponse, MessageContext
from app.schemas.lead import LeadOut, SubstatusUpdate, TemperatureUpdate
from app.services.lead_temperature_service import LeadTemperatureService
from app.services.trigger_service import InterestTriggerService

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.get("/{lead_id}", response_model=LeadOut)
async def get_lead(
    lead_id: UUID,
    organization_id: UUID = Depends(get_organization_id),
    service: LeadTemperatureService = Depends(get_lead_temperature_service),
):
    return await service.get_lead(organization_id, lead_id)


@router.patch("/{lead_id}/temperature", response_model=LeadOut)
async def update_temperature(
    lead_id: UUID,
    body: TemperatureUpdate,
    organization_id: UUID = Depends(get_organization_id),
    service: LeadTemperatureService = Depends(get_lead_temperature_service),
):
    """Manual temperature change.

    Leaving ``quente`` clears the substatus; ``perdido`` records the
    optional ``lost_reason``.
    """
    return await service.update_temperature(organization_id, lead_id, body)


@router.patch("/{lead_id}/substatus", response_model=LeadOut)
async def update_substatus(
    lead_id: UUID,
    body: SubstatusUpdate,
    organization_id: UUID = Depends(get_organization_id),
    service: LeadTemperatureService = Depends(get_lead_temperature_service),
):
    return await service.update_substatus(organization_id, lead_id, body)


@router.post("/{lead_id}/classify", response_model=ClassifyLeadResponse)
@limiter.limit(settings.CLASSIFY_RATE_LIMIT)
async def classify_lead(
    request: Request,
    lead_id: UUID,
    body: MessageContext,
    organization_id: UUID = Depends(get_organization_id),
    service: InterestTriggerService = Depends(get_trigger_service),
) -> ClassifyLeadResponse:
    """Run the interest triggers on an inbound message and apply the winner.

    Rate-limited per IP since it is called for every inbound message.
    """
    return await service.classify_lead(organization_id, lead_id, body)
