"""Temperature transition rule schemas (CRUD, reorder, rule tester)."""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing_extensions import Self

from app.schemas.common import (
    HotSubstatus,
    RuleTemperature,
    Temperature,
    TriggerEvent,
)


def _check_actions(
    set_temperature: Optional[RuleTemperature],
    clear_substatus: Optional[bool],
    set_substatus: Optional[HotSubstatus],
) -> None:
    if clear_substatus and set_substatus is not None:
        raise ValueError(
            "action_clear_substatus and action_set_substatus are mutually exclusive"
        )
    if set_substatus is not None and set_temperature not in (
        None,
        RuleTemperature.quente,
    ):
        raise ValueError(
            "action_set_substatus requires action_set_temperature to be "
            "'quente' or unset"
        )


def check_rule_actions(
    set_temperature: Optional[RuleTemperature],
    clear_substatus: Optional[bool],
    set_substatus: Optional[HotSubstatus],
) -> None:
    """Validate a rule's complete action bundle."""
    if set_temperature is None and not clear_substatus and set_substatus is None:
        raise ValueError("A rule must define at least one action")
    _check_actions(set_temperature, clear_substatus, set_substatus)


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class TemperatureRuleCreate(BaseModel):
    """Request body for POST /api/v1/temperature-rules."""

    name: str = Field(..., min_length=1, max_length=150)
    priority: Optional[int] = Field(
        None, ge=0, description="Defaults to the end of the list."
    )
    trigger_event: TriggerEvent
    from_temperature: Optional[RuleTemperature] = None
    from_substatus: Optional[HotSubstatus] = None
    timer_minutes: int = Field(60, ge=1)
    action_set_temperature: Optional[RuleTemperature] = None
    action_clear_substatus: bool = False
    action_set_substatus: Optional[HotSubstatus] = None

    @model_validator(mode="after")
    def validate_actions(self) -> Self:
        check_rule_actions(
            self.action_set_temperature,
            self.action_clear_substatus,
            self.action_set_substatus,
        )
        return self


class TemperatureRuleUpdate(BaseModel):
    """Request body for PATCH /api/v1/temperature-rules/{rule_id}."""

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    priority: Optional[int] = Field(None, ge=0)
    active: Optional[bool] = None
    trigger_event: Optional[TriggerEvent] = None
    from_temperature: Optional[RuleTemperature] = None
    from_substatus: Optional[HotSubstatus] = None
    timer_minutes: Optional[int] = Field(None, ge=1)
    action_set_temperature: Optional[RuleTemperature] = None
    action_clear_substatus: Optional[bool] = None
    action_set_substatus: Optional[HotSubstatus] = None

    @model_validator(mode="after")
    def validate_actions(self) -> Self:
        _check_actions(
            self.action_set_temperature,
            self.action_clear_substatus,
            self.action_set_substatus,
        )
        return self


class RuleReorderRequest(BaseModel):
    """Rule ids in their new processing order (priority = position)."""

    ordered_ids: List[UUID] = Field(..., min_length=1)


class TestLeadConditions(BaseModel):
    """Hypothetical lead snapshot fed to the rule tester."""

    model_config = ConfigDict(use_enum_values=True)

    temperature: Temperature
    substatus: Optional[HotSubstatus] = None
    minutes_since_interaction: int = Field(..., ge=0)


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class TemperatureRuleOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    name: str
    priority: int
    active: bool
    trigger_event: TriggerEvent
    from_temperature: Optional[RuleTemperature] = None
    from_substatus: Optional[HotSubstatus] = None
    timer_minutes: int
    action_set_temperature: Optional[RuleTemperature] = None
    action_clear_substatus: bool
    action_set_substatus: Optional[HotSubstatus] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TestReason(BaseModel):
    """Outcome of one rule filter."""

    condition: str
    passed: bool
    actual: str
    expected: str


class RuleAction(BaseModel):
    """What a matching rule would do to the lead."""

    set_temperature: Optional[str] = None
    clear_substatus: bool = False
    set_substatus: Optional[str] = None


class TestResult(BaseModel):
    matches: bool
    reasons: List[TestReason]
    action: Optional[RuleAction] = None


class RuleTestResponse(TestResult):
    """Rule tester output plus the formatted diagnostic lines."""

    rule_id: UUID
    lines: List[str]
