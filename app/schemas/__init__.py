"""Pydantic schemas package – re-exports for convenience."""

# Common enums
from app.schemas.common import (
    Temperature as Temperature,
    RuleTemperature as RuleTemperature,
    HotSubstatus as HotSubstatus,
    ConditionField as ConditionField,
    ConditionOperator as ConditionOperator,
    TriggerEvent as TriggerEvent,
    SuccessResponse as SuccessResponse,
)

# Lead schemas
from app.schemas.lead import (
    LeadOut as LeadOut,
    SubstatusUpdate as SubstatusUpdate,
    TemperatureUpdate as TemperatureUpdate,
)

# Interest trigger schemas
from app.schemas.interest_trigger import (
    ClassifyLeadResponse as ClassifyLeadResponse,
    InterestTriggerCreate as InterestTriggerCreate,
    InterestTriggerOut as InterestTriggerOut,
    InterestTriggerUpdate as InterestTriggerUpdate,
    MessageContext as MessageContext,
    TriggerMatchResponse as TriggerMatchResponse,
    TriggerReorderRequest as TriggerReorderRequest,
    TriggerTestRequest as TriggerTestRequest,
    TriggerTestResponse as TriggerTestResponse,
)

# Temperature rule schemas
from app.schemas.temperature_rule import (
    RuleAction as RuleAction,
    RuleReorderRequest as RuleReorderRequest,
    RuleTestResponse as RuleTestResponse,
    TemperatureRuleCreate as TemperatureRuleCreate,
    TemperatureRuleOut as TemperatureRuleOut,
    TemperatureRuleUpdate as TemperatureRuleUpdate,
    TestLeadConditions as TestLeadConditions,
    TestReason as TestReason,
    TestResult as TestResult,
)

# Settings and automation schemas
from app.schemas.crm_settings import (
    CRMSettingsOut as CRMSettingsOut,
    CRMSettingsUpdate as CRMSettingsUpdate,
)
from app.schemas.automation import (
    SeedDefaultsResponse as SeedDefaultsResponse,
    TransitionRunResponse as TransitionRunResponse,
)
