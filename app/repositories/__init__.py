"""Repository layer – all database access goes through here.

Repositories encapsulate SQLAlchemy queries so that the service layer
only contains business logic.
"""

from app.repositories.crm_settings_repository import CRMSettingsRepository
from app.repositories.interest_trigger_repository import InterestTriggerRepository
from app.repositories.lead_repository import LeadRepository
from app.repositories.temperature_rule_repository import TemperatureRuleRepository

__all__ = [
    "CRMSettingsRepository",
    "InterestTriggerRepository",
    "LeadRepository",
    "TemperatureRuleRepository",
]
