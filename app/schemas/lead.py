"""Lead schemas for the temperature automation endpoints."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self

from app.schemas.common import HotSubstatus, Temperature


class TemperatureUpdate(BaseModel):
    """Request body for PATCH /api/v1/leads/{lead_id}/temperature."""

    temperature: Temperature
    hot_substatus: Optional[HotSubstatus] = None
    lost_reason: Optional[str] = Field(None, max_length=500)

    @model_validator(mode="after")
    def validate_substatus(self) -> Self:
        """A substatus only refines the ``quente`` temperature."""
        if self.hot_substatus is not None and self.temperature != Temperature.quente:
            raise ValueError(
                f"hot_substatus cannot be set when temperature is "
                f"'{self.temperature.value}'"
            )
        return self


class SubstatusUpdate(BaseModel):
    """Request body for PATCH /api/v1/leads/{lead_id}/substatus."""

    hot_substatus: Optional[HotSubstatus]


class LeadOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    name: str
    phone: Optional[str] = None
    temperature: Temperature
    hot_substatus: Optional[HotSubstatus] = None
    lost_reason: Optional[str] = None
    interest_id: Optional[UUID] = None
    source_id: Optional[UUID] = None
    status: Optional[str] = None
    last_interaction_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
