from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_organization_id, get_rule_service
from app.schemas.automation import SeedDefaultsResponse
from app.schemas.common import SuccessResponse
from app.schemas.temperature_rule import (
    RuleReorderRequest,
    RuleTestResponse,
    TemperatureRuleCreate,
    TemperatureRuleOut,
    TemperatureRuleUpdate,
    TestLeadConditions,
)
from app.services.temperature_rule_service import TemperatureRuleService

router = APIRouter(prefix="/temperature-rules", tags=["Temperature Rules"])


@router.get("", response_model=List[TemperatureRuleOut])
async def list_rules(
    organization_id: UUID = Depends(get_organization_id),
    service: TemperatureRuleService = Depends(get_rule_service),
):
    return await service.list_rules(organization_id)


@router.post("", response_model=TemperatureRuleOut, status_code=201)
async def create_rule(
    body: TemperatureRuleCreate,
    organization_id: UUID = Depends(get_organization_id),
    service: TemperatureRuleService = Depends(get_rule_service),
):
    return await service.create_rule(organization_id, body)


@router.put("/reorder", response_model=List[TemperatureRuleOut])
async def reorder_rules(
    body: RuleReorderRequest,
    organization_id: UUID = Depends(get_organization_id),
    service: TemperatureRuleService = Depends(get_rule_service),
):
    """Priorities become the positions in ``ordered_ids``."""
    return await service.reorder_rules(organization_id, body.ordered_ids)


@router.post("/seed-defaults", response_model=SeedDefaultsResponse)
async def seed_default_rules(
    organization_id: UUID = Depends(get_organization_id),
    service: TemperatureRuleService = Depends(get_rule_service),
) -> SeedDefaultsResponse:
    """Create the starter rules from CRM settings if none exist yet."""
    created = await service.seed_defaults(organization_id)
    return SeedDefaultsResponse(created=created)


@router.patch("/{rule_id}", response_model=TemperatureRuleOut)
async def update_rule(
    rule_id: UUID,
    body: TemperatureRuleUpdate,
    organization_id: UUID = Depends(get_organization_id),
    service: TemperatureRuleService = Depends(get_rule_service),
):
    return await service.update_rule(organization_id, rule_id, body)


@router.delete("/{rule_id}", response_model=SuccessResponse)
async def delete_rule(
    rule_id: UUID,
    organization_id: UUID = Depends(get_organization_id),
    service: TemperatureRuleService = Depends(get_rule_service),
) -> SuccessResponse:
    await service.delete_rule(organization_id, rule_id)
    return SuccessResponse()


@router.post("/{rule_id}/test", response_model=RuleTestResponse)
async def test_rule(
    rule_id: UUID,
    body: TestLeadConditions,
    organization_id: UUID = Depends(get_organization_id),
    service: TemperatureRuleService = Depends(get_rule_service),
) -> RuleTestResponse:
    """Check the rule against a hypothetical lead; nothing is written.

    The response lists every filter with its actual and expected value,
    plus one formatted line per filter for display.
    """
    return await service.test_rule(organization_id, rule_id, body)
