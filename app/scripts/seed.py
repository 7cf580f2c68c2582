"""Demo data seeder for one clinic organization.

Usage:
    python -m app.scripts.seed
"""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from app.core.default_transition_rules import DEFAULT_CRM_SETTINGS, build_default_rules
from app.models import CRMSettings, InterestTrigger, Lead, TemperatureTransitionRule
from app.schemas.crm_settings import CRMSettingsOut

DEMO_ORGANIZATION_ID = UUID("00000000-0000-0000-0000-00000000d001")
IMPLANTES_INTEREST_ID = UUID("00000000-0000-0000-0000-0000000001a1")
FACETAS_INTEREST_ID = UUID("00000000-0000-0000-0000-0000000001a2")
INSTAGRAM_SOURCE_ID = UUID("00000000-0000-0000-0000-0000000005c1")

DEMO_TRIGGERS = [
    {
        "name": "Implantes",
        "condition_field": "first_message",
        "condition_operator": "regex",
        "condition_value": r"implante|protocolo",
        "action_set_interest_id": IMPLANTES_INTEREST_ID,
        "action_set_temperature": "quente",
    },
    {
        "name": "Facetas",
        "condition_field": "any_message",
        "condition_operator": "contains",
        "condition_value": "facetas",
        "action_set_interest_id": FACETAS_INTEREST_ID,
    },
    {
        "name": "Veio do Instagram",
        "condition_field": "source_name",
        "condition_operator": "equals",
        "condition_value": "instagram",
        "action_set_source_id": INSTAGRAM_SOURCE_ID,
    },
]


async def seed():
    engine = create_async_engine(settings.DATABASE_URL, echo=False)
    session_maker = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    org = DEMO_ORGANIZATION_ID
    now = datetime.now(timezone.utc)

    async with session_maker() as session:
        print(f"Seeding demo data for organization {org}")

        # Clear existing data to allow re-running the seed.
        await session.execute(
            text(
                "TRUNCATE TABLE "
                "interest_triggers, "
                "temperature_transition_rules, "
                "crm_settings, "
                "leads"
            )
        )
        await session.commit()
        print("Cleared existing data")

        # 1. CRM settings and the default rules derived from them
        session.add(CRMSettings(organization_id=org, **DEFAULT_CRM_SETTINGS))
        rules = build_default_rules(
            CRMSettingsOut(organization_id=org, **DEFAULT_CRM_SETTINGS)
        )
        for rule in rules:
            session.add(TemperatureTransitionRule(organization_id=org, **rule))
        print(f"Created {len(rules)} transition rules")

        # 2. Interest triggers, priority = list position
        for position, trigger in enumerate(DEMO_TRIGGERS):
            session.add(
                InterestTrigger(organization_id=org, priority=position, **trigger)
            )
        print(f"Created {len(DEMO_TRIGGERS)} interest triggers")

        # 3. Leads at different points of the funnel
        leads = [
            Lead(
                organization_id=org,
                name="Ana Souza",
                phone="+5511990000001",
                temperature="novo",
                created_at=now - timedelta(days=2),
            ),
            Lead(
                organization_id=org,
                name="Bruno Lima",
                phone="+5511990000002",
                temperature="quente",
                hot_substatus="em_conversa",
                last_interaction_at=now - timedelta(minutes=90),
            ),
            Lead(
                organization_id=org,
                name="Carla Dias",
                phone="+5511990000003",
                temperature="quente",
                hot_substatus="aguardando_resposta",
                last_interaction_at=now - timedelta(hours=50),
            ),
            Lead(
                organization_id=org,
                name="Diego Rocha",
                phone="+5511990000004",
                temperature="perdido",
                lost_reason="Escolheu outra clínica",
            ),
        ]
        session.add_all(leads)
        await session.commit()
        print(f"Created {len(leads)} leads")

    await engine.dispose()
    print("Done")


if __name__ == "__main__":
    asyncio.run(seed())
