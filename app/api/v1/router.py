from fastapi import APIRouter

from app.api.v1.endpoints import (
    automation,
    crm_settings,
    health,
    interest_triggers,
    leads,
    temperature_rules,
)

router = APIRouter(prefix="/api/v1")

router.include_router(interest_triggers.router)
router.include_router(temperature_rules.router)
router.include_router(leads.router)
router.include_router(crm_settings.router)
router.include_router(automation.router)
router.include_router(health.router)
