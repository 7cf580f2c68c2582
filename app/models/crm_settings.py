from sqlalchemy import Boolean, Column, DateTime, Integer, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.sql import func

from app.models.base import Base


class CRMSettings(Base):
    """Per-organization automation settings.

    An organization without a row runs on ``DEFAULT_CRM_SETTINGS``.
    The timer values seed the default transition rules and the enable
    flags gate the automatic sweep.
    """

    __tablename__ = "crm_settings"
    id = Column(
        UUID(as_uuid=True), primary_key=True, server_default=func.gen_random_uuid()
    )
    organization_id = Column(UUID(as_uuid=True), nullable=False, unique=True)
    new_to_cold_minutes = Column(Integer, nullable=False, server_default=text("1440"))
    hot_to_cold_days = Column(Integer, nullable=False, server_default=text("3"))
    hot_to_cold_hours = Column(Integer, nullable=False, server_default=text("0"))
    enable_auto_temperature = Column(
        Boolean, nullable=False, server_default=text("true")
    )
    em_conversa_timeout_minutes = Column(
        Integer, nullable=False, server_default=text("60")
    )
    enable_substatus_timeout = Column(
        Boolean, nullable=False, server_default=text("true")
    )
    aguardando_to_cold_hours = Column(
        Integer, nullable=False, server_default=text("48")
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
