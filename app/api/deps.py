"""API-layer dependency functions.

Re-exports all dependency factories from ``app.dependencies`` so that
endpoint modules only need to import from ``app.api.deps``.
"""

from app.core.database import get_db
from app.dependencies import (
    # Tenant
    get_organization_id,
    # Repository factories
    get_lead_repo,
    get_trigger_repo,
    get_rule_repo,
    get_settings_repo,
    # Service factories
    get_trigger_service,
    get_rule_service,
    get_crm_settings_service,
    get_lead_temperature_service,
    # Redis
    get_redis_client,
    get_cache_service,
)

__all__ = [
    "get_db",
    "get_organization_id",
    "get_lead_repo",
    "get_trigger_repo",
    "get_rule_repo",
    "get_settings_repo",
    "get_trigger_service",
    "get_rule_service",
    "get_crm_settings_service",
    "get_lead_temperature_service",
    "get_redis_client",
    "get_cache_service",
]
