"""create lead automation tables

Revision ID: a1b2c3d4e5f6
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates ``leads``, ``interest_triggers``, ``temperature_transition_rules``
and ``crm_settings``.  CHECK clauses are built from
``app.core.constants`` so the enum sets live in one place.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

from app.core.constants import (
    CONDITION_FIELD_CHECK_CLAUSE,
    CONDITION_OPERATOR_CHECK_CLAUSE,
    HOT_SUBSTATUS_CHECK_CLAUSE,
    HOT_SUBSTATUSES,
    LEAD_TEMPERATURE_CHECK_CLAUSE,
    RULE_TEMPERATURES,
    TRIGGER_EVENT_CHECK_CLAUSE,
    nullable_check_clause,
)

# revision identifiers, used by Alembic.
revision: str = "a1b2c3d4e5f6"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def _timestamp(name: str) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now())


def upgrade() -> None:
    op.create_table(
        "leads",
        _uuid_pk(),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30)),
        sa.Column("temperature", sa.String(20), nullable=False, server_default="novo"),
        sa.Column("hot_substatus", sa.String(30)),
        sa.Column("lost_reason", sa.Text),
        sa.Column("interest_id", postgresql.UUID(as_uuid=True)),
        sa.Column("source_id", postgresql.UUID(as_uuid=True)),
        sa.Column("status", sa.String(100)),
        sa.Column("last_interaction_at", sa.DateTime(timezone=True)),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(LEAD_TEMPERATURE_CHECK_CLAUSE, name="ck_leads_temperature"),
        sa.CheckConstraint(HOT_SUBSTATUS_CHECK_CLAUSE, name="ck_leads_hot_substatus"),
    )
    op.create_index(
        "idx_leads_org_temperature", "leads", ["organization_id", "temperature"]
    )

    op.create_table(
        "interest_triggers",
        _uuid_pk(),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("priority", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("condition_field", sa.String(30), nullable=False),
        sa.Column("condition_operator", sa.String(30), nullable=False),
        sa.Column("condition_value", sa.Text, nullable=False, server_default=""),
        sa.Column(
            "case_sensitive", sa.Boolean, nullable=False, server_default=sa.text("false")
        ),
        sa.Column("action_set_interest_id", postgresql.UUID(as_uuid=True)),
        sa.Column("action_set_source_id", postgresql.UUID(as_uuid=True)),
        sa.Column("action_set_temperature", sa.String(20)),
        sa.Column("action_set_status", sa.String(100)),
        _timestamp("created_at"),
        sa.CheckConstraint(CONDITION_FIELD_CHECK_CLAUSE, name="ck_it_condition_field"),
        sa.CheckConstraint(
            CONDITION_OPERATOR_CHECK_CLAUSE, name="ck_it_condition_operator"
        ),
        sa.CheckConstraint(
            nullable_check_clause("action_set_temperature", RULE_TEMPERATURES),
            name="ck_it_action_temperature",
        ),
    )
    op.create_index(
        "idx_interest_triggers_org_priority",
        "interest_triggers",
        ["organization_id", "priority"],
    )

    op.create_table(
        "temperature_transition_rules",
        _uuid_pk(),
        sa.Column("organization_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("priority", sa.Integer, nullable=False, server_default=sa.text("0")),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.text("true")),
        sa.Column("trigger_event", sa.String(30), nullable=False),
        sa.Column("from_temperature", sa.String(20)),
        sa.Column("from_substatus", sa.String(30)),
        sa.Column(
            "timer_minutes", sa.Integer, nullable=False, server_default=sa.text("60")
        ),
        sa.Column("action_set_temperature", sa.String(20)),
        sa.Column(
            "action_clear_substatus",
            sa.Boolean,
            nullable=False,
            server_default=sa.text("false"),
        ),
        sa.Column("action_set_substatus", sa.String(30)),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("timer_minutes >= 1", name="ck_ttr_timer_minutes"),
        sa.CheckConstraint(TRIGGER_EVENT_CHECK_CLAUSE, name="ck_ttr_trigger_event"),
        sa.CheckConstraint(
            nullable_check_clause("from_temperature", RULE_TEMPERATURES),
            name="ck_ttr_from_temperature",
        ),
        sa.CheckConstraint(
            nullable_check_clause("from_substatus", HOT_SUBSTATUSES),
            name="ck_ttr_from_substatus",
        ),
        sa.CheckConstraint(
            nullable_check_clause("action_set_temperature", RULE_TEMPERATURES),
            name="ck_ttr_action_temperature",
        ),
        sa.CheckConstraint(
            nullable_check_clause("action_set_substatus", HOT_SUBSTATUSES),
            name="ck_ttr_action_substatus",
        ),
    )
    op.create_index(
        "idx_ttr_org_priority",
        "temperature_transition_rules",
        ["organization_id", "priority"],
    )

    op.create_table(
        "crm_settings",
        _uuid_pk(),
        sa.Column(
            "organization_id",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            unique=True,
        ),
        sa.Column(
            "new_to_cold_minutes",
            sa.Integer,
            nullable=False,
            server_default=sa.text("1440"),
        ),
        sa.Column(
            "hot_to_cold_days", sa.Integer, nullable=False, server_default=sa.text("3")
        ),
        sa.Column(
            "hot_to_cold_hours", sa.Integer, nullable=False, server_default=sa.text("0")
        ),
        sa.Column(
            "enable_auto_temperature",
            sa.Boolean,
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "em_conversa_timeout_minutes",
            sa.Integer,
            nullable=False,
            server_default=sa.text("60"),
        ),
        sa.Column(
            "enable_substatus_timeout",
            sa.Boolean,
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "aguardando_to_cold_hours",
            sa.Integer,
            nullable=False,
            server_default=sa.text("48"),
        ),
        _timestamp("created_at"),
        _timestamp("updated_at"),
    )


def downgrade() -> None:
    op.drop_table("crm_settings")
    op.drop_index("idx_ttr_org_priority", table_name="temperature_transition_rules")
    op.drop_table("temperature_transition_rules")
    op.drop_index(
        "idx_interest_triggers_org_priority", table_name="interest_triggers"
    )
    op.drop_table("interest_triggers")
    op.drop_index("idx_leads_org_temperature", table_name="leads")
    op.drop_table("leads")
