"""Interest-trigger Pydantic schemas (CRUD, reorder, test, match)."""

import re
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self

from app.schemas.common import ConditionField, ConditionOperator, RuleTemperature
from app.schemas.lead import LeadOut


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


def check_regex(operator: Optional[ConditionOperator], pattern: Optional[str]) -> None:
    """Reject patterns that would never compile.

    The evaluator treats a broken pattern as a non-match, so a trigger
    saved with one would silently never fire.
    """
    if operator != ConditionOperator.regex or pattern is None:
        return
    try:
        re.compile(pattern)
    except re.error as exc:
        raise ValueError(f"condition_value is not a valid regular expression: {exc}")


class MessageContext(BaseModel):
    """Candidate strings a trigger condition can look at."""

    first_message: Optional[str] = None
    any_message: Optional[str] = None
    push_name: Optional[str] = None
    source_name: Optional[str] = None


class InterestTriggerCreate(BaseModel):
    """Request body for POST /api/v1/interest-triggers."""

    name: str = Field(..., min_length=1, max_length=150)
    priority: Optional[int] = Field(
        None, ge=0, description="Defaults to the end of the active list."
    )
    condition_field: ConditionField
    condition_operator: ConditionOperator
    condition_value: str = ""
    case_sensitive: bool = False
    action_set_interest_id: Optional[UUID] = None
    action_set_source_id: Optional[UUID] = None
    action_set_temperature: Optional[RuleTemperature] = None
    action_set_status: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def validate_regex(self) -> Self:
        check_regex(self.condition_operator, self.condition_value)
        return self


class InterestTriggerUpdate(BaseModel):
    """Request body for PATCH /api/v1/interest-triggers/{trigger_id}."""

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    priority: Optional[int] = Field(None, ge=0)
    active: Optional[bool] = None
    condition_field: Optional[ConditionField] = None
    condition_operator: Optional[ConditionOperator] = None
    condition_value: Optional[str] = None
    case_sensitive: Optional[bool] = None
    action_set_interest_id: Optional[UUID] = None
    action_set_source_id: Optional[UUID] = None
    action_set_temperature: Optional[RuleTemperature] = None
    action_set_status: Optional[str] = Field(None, max_length=100)

    @model_validator(mode="after")
    def validate_regex(self) -> Self:
        check_regex(self.condition_operator, self.condition_value)
        return self


class TriggerPriority(BaseModel):
    id: UUID
    priority: int = Field(..., ge=0)


class TriggerReorderRequest(BaseModel):
    """New priorities for the whole active trigger set."""

    triggers: List[TriggerPriority] = Field(..., min_length=1)


class TriggerTestRequest(BaseModel):
    value: str


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class InterestTriggerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    name: str
    priority: int
    active: bool
    condition_field: ConditionField
    condition_operator: ConditionOperator
    condition_value: str
    case_sensitive: bool
    action_set_interest_id: Optional[UUID] = None
    action_set_source_id: Optional[UUID] = None
    action_set_temperature: Optional[RuleTemperature] = None
    action_set_status: Optional[str] = None
    created_at: Optional[datetime] = None


class TriggerTestResponse(BaseModel):
    trigger_id: UUID
    value: str
    matches: bool


class TriggerMatchResponse(BaseModel):
    """Dry-run result: which trigger would classify the message."""

    matched: bool
    trigger: Optional[InterestTriggerOut] = None


class ClassifyLeadResponse(BaseModel):
    """Result of running the triggers against a lead's inbound message."""

    lead_id: UUID
    matched: bool
    trigger_id: Optional[UUID] = None
    trigger_name: Optional[str] = None
    changes: dict = Field(default_factory=dict)
    lead: LeadOut
