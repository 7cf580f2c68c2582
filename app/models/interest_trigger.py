from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    Integer,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.core.constants import (
    CONDITION_FIELD_CHECK_CLAUSE,
    CONDITION_OPERATOR_CHECK_CLAUSE,
    RULE_TEMPERATURES,
    nullable_check_clause,
)
from app.models.base import Base


class InterestTrigger(Base):
    """Condition/action rule that classifies an inbound lead message.

    Active triggers are evaluated in ascending ``priority`` order and the
    first one whose condition matches wins; its ``action_set_*`` columns
    form the action bundle applied to the lead.  Deleting a trigger only
    clears ``active``.
    """

    __tablename__ = "interest_triggers"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    organization_id = Column(UUID(as_uuid=True), nullable=False)
    name = Column(String(150), nullable=False)
    priority = Column(Integer, nullable=False, server_default=text("0"))
    active = Column(Boolean, nullable=False, server_default=text("true"))
    condition_field = Column(String(30), nullable=False)
    condition_operator = Column(String(30), nullable=False)
    condition_value = Column(Text, nullable=False, server_default="")
    case_sensitive = Column(Boolean, nullable=False, server_default=text("false"))
    action_set_interest_id = Column(UUID(as_uuid=True))
    action_set_source_id = Column(UUID(as_uuid=True))
    action_set_temperature = Column(String(20))
    action_set_status = Column(String(100))
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_interest_triggers_org_priority", "organization_id", "priority"),
        CheckConstraint(CONDITION_FIELD_CHECK_CLAUSE, name="ck_it_condition_field"),
        CheckConstraint(
            CONDITION_OPERATOR_CHECK_CLAUSE, name="ck_it_condition_operator"
        ),
        CheckConstraint(
            nullable_check_clause("action_set_temperature", RULE_TEMPERATURES),
            name="ck_it_action_temperature",
        ),
    )
