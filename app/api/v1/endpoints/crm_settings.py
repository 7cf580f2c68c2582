from uuid import UUID

from fastapi import APIRouter, Depends

from app.api.deps import get_crm_settings_service, get_organization_id
from app.schemas.crm_settings import CRMSettingsOut, CRMSettingsUpdate
from app.services.temperature_rule_service import CRMSettingsService

router = APIRouter(prefix="/crm-settings", tags=["CRM Settings"])


@router.get("", response_model=CRMSettingsOut)
async def get_crm_settings(
    organization_id: UUID = Depends(get_organization_id),
    service: CRMSettingsService = Depends(get_crm_settings_service),
) -> CRMSettingsOut:
    """Stored settings, or the defaults when the organization has none."""
    return await service.get_settings(organization_id)


@router.put("", response_model=CRMSettingsOut)
async def update_crm_settings(
    body: CRMSettingsUpdate,
    organization_id: UUID = Depends(get_organization_id),
    service: CRMSettingsService = Depends(get_crm_settings_service),
) -> CRMSettingsOut:
    return await service.update_settings(organization_id, body)
