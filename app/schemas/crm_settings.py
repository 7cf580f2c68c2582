"""CRM automation settings schemas."""

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class CRMSettingsUpdate(BaseModel):
    """Request body for PUT /api/v1/crm-settings (partial upsert)."""

    new_to_cold_minutes: Optional[int] = Field(None, ge=1)
    hot_to_cold_days: Optional[int] = Field(None, ge=0)
    hot_to_cold_hours: Optional[int] = Field(None, ge=0, le=23)
    enable_auto_temperature: Optional[bool] = None
    em_conversa_timeout_minutes: Optional[int] = Field(None, ge=1)
    enable_substatus_timeout: Optional[bool] = None
    aguardando_to_cold_hours: Optional[int] = Field(None, ge=1)


class CRMSettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    organization_id: UUID
    new_to_cold_minutes: int
    hot_to_cold_days: int
    hot_to_cold_hours: int
    enable_auto_temperature: bool
    em_conversa_timeout_minutes: int
    enable_substatus_timeout: bool
    aguardando_to_cold_hours: int

    @property
    def hot_to_cold_minutes(self) -> int:
        return self.hot_to_cold_days * 1440 + self.hot_to_cold_hours * 60
