from sqlalchemy import (
    Column,
    String,
    Text,
    DateTime,
    CheckConstraint,
    Index,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.core.constants import (
    HOT_SUBSTATUS_CHECK_CLAUSE,
    LEAD_TEMPERATURE_CHECK_CLAUSE,
)
from app.models.base import Base


class Lead(Base):
    """Prospective patient tracked through the clinic's sales pipeline.

    Only the columns the temperature automation reads and writes are
    mapped here.  ``hot_substatus`` refines the ``quente`` temperature
    and must be ``NULL`` for every other temperature.
    """

    __tablename__ = "leads"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    organization_id = Column(UUID(as_uuid=True), nullable=False)
    name = Column(String(255), nullable=False)
    phone = Column(String(30))
    temperature = Column(String(20), nullable=False, server_default="novo")
    hot_substatus = Column(String(30))
    lost_reason = Column(Text)
    interest_id = Column(UUID(as_uuid=True))
    source_id = Column(UUID(as_uuid=True))
    status = Column(String(100))
    last_interaction_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_leads_org_temperature", "organization_id", "temperature"),
        CheckConstraint(LEAD_TEMPERATURE_CHECK_CLAUSE, name="ck_leads_temperature"),
        CheckConstraint(HOT_SUBSTATUS_CHECK_CLAUSE, name="ck_leads_hot_substatus"),
    )
