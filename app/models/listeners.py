from datetime import datetime, timezone

from sqlalchemy import event

from app.models.crm_settings import CRMSettings
from app.models.lead import Lead
from app.models.temperature_rule import TemperatureTransitionRule


# Auto updated_at
@event.listens_for(Lead, "before_update")
@event.listens_for(TemperatureTransitionRule, "before_update")
@event.listens_for(CRMSettings, "before_update")
def update_timestamp(mapper, connection, target):
    target.updated_at = datetime.now(timezone.utc)
