from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.core.constants import (
    HOT_SUBSTATUSES,
    RULE_TEMPERATURES,
    TRIGGER_EVENT_CHECK_CLAUSE,
    nullable_check_clause,
)
from app.models.base import Base


class TemperatureTransitionRule(Base):
    """Timer-based rule moving a lead between temperatures/substatuses.

    ``from_temperature`` / ``from_substatus`` of ``NULL`` match any lead.
    Rules are processed in ascending ``priority``; reordering rewrites
    the priority of every rule to its position in the new order.
    """

    __tablename__ = "temperature_transition_rules"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    organization_id = Column(UUID(as_uuid=True), nullable=False)
    name = Column(String(150), nullable=False)
    priority = Column(Integer, nullable=False, server_default=text("0"))
    active = Column(Boolean, nullable=False, server_default=text("true"))
    trigger_event = Column(String(30), nullable=False)
    from_temperature = Column(String(20))
    from_substatus = Column(String(30))
    timer_minutes = Column(Integer, nullable=False, server_default=text("60"))
    action_set_temperature = Column(String(20))
    action_clear_substatus = Column(
        Boolean, nullable=False, server_default=text("false")
    )
    action_set_substatus = Column(String(30))
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    __table_args__ = (
        Index("idx_ttr_org_priority", "organization_id", "priority"),
        CheckConstraint("timer_minutes >= 1", name="ck_ttr_timer_minutes"),
        CheckConstraint(TRIGGER_EVENT_CHECK_CLAUSE, name="ck_ttr_trigger_event"),
        CheckConstraint(
            nullable_check_clause("from_temperature", RULE_TEMPERATURES),
            name="ck_ttr_from_temperature",
        ),
        CheckConstraint(
            nullable_check_clause("from_substatus", HOT_SUBSTATUSES),
            name="ck_ttr_from_substatus",
        ),
        CheckConstraint(
            nullable_check_clause("action_set_temperature", RULE_TEMPERATURES),
            name="ck_ttr_action_temperature",
        ),
        CheckConstraint(
            nullable_check_clause("action_set_substatus", HOT_SUBSTATUSES),
            name="ck_ttr_action_substatus",
        ),
    )
