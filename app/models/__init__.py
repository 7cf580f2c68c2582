from app.models.base import Base
from app.models.lead import Lead
from app.models.interest_trigger import InterestTrigger
from app.models.temperature_rule import TemperatureTransitionRule
from app.models.crm_settings import CRMSettings

# Import event listeners to register them
from app.models import listeners  # noqa: F401

__all__ = [
    "Base",
    "Lead",
    "InterestTrigger",
    "TemperatureTransitionRule",
    "CRMSettings",
]
