import os
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator
from uuid import uuid4

import asyncpg
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.models import Lead
from app.models.base import Base

_PG_HOST = os.getenv("TEST_PG_HOST", "localhost")
_PG_PORT = int(os.getenv("TEST_PG_PORT", "5433"))
_PG_USER = os.getenv("TEST_PG_USER", "postgres")
_PG_PASS = os.getenv("TEST_PG_PASSWORD", "postgres")
_TEST_DB = "dental_crm_test_db"

_TEST_DB_URL = (
    f"postgresql+asyncpg://{_PG_USER}:{_PG_PASS}@{_PG_HOST}:{_PG_PORT}/{_TEST_DB}"
)


async def _ensure_pg_database() -> None:
    """Create the test database if needed; skip when PostgreSQL is down."""
    try:
        conn = await asyncpg.connect(
            user=_PG_USER,
            password=_PG_PASS,
            host=_PG_HOST,
            port=_PG_PORT,
            database="postgres",
        )
        exists = await conn.fetchval(
            "SELECT 1 FROM pg_database WHERE datname = $1", _TEST_DB
        )
        if not exists:
            await conn.execute(f'CREATE DATABASE "{_TEST_DB}"')
        await conn.close()
    except (OSError, asyncpg.PostgresError) as exc:
        pytest.skip(f"PostgreSQL not available ({_PG_HOST}:{_PG_PORT}): {exc}")


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh schema per test, torn down afterwards."""
    await _ensure_pg_database()
    engine = create_async_engine(_TEST_DB_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


async def _seed_lead(session: AsyncSession, **overrides) -> Lead:
    defaults = {
        "organization_id": overrides.pop("organization_id", uuid4()),
        "name": "Paciente Teste",
        "phone": "+5511988887777",
        "temperature": "novo",
    }
    defaults.update(overrides)
    lead = Lead(**defaults)
    session.add(lead)
    await session.commit()
    return lead


class TestTriggerRepositoryIntegration:
    @pytest.mark.asyncio
    async def test_priority_order_and_soft_delete(self, db_session: AsyncSession):
        from app.repositories.interest_trigger_repository import (
            InterestTriggerRepository,
        )

        repo = InterestTriggerRepository(db_session)
        org = uuid4()
        assert await repo.next_priority(org) == 0

        second = await repo.create(
            organization_id=org,
            name="B",
            priority=1,
            condition_field="first_message",
            condition_operator="contains",
            condition_value="b",
        )
        first = await repo.create(
            organization_id=org,
            name="A",
            priority=0,
            condition_field="first_message",
            condition_operator="contains",
            condition_value="a",
        )
        await repo.commit()

        assert [t.name for t in await repo.list_for_org(org)] == ["A", "B"]
        assert await repo.next_priority(org) == 2

        await repo.deactivate(first)
        await repo.commit()

        assert [t.id for t in await repo.list_for_org(org)] == [second.id]
        assert len(await repo.list_for_org(org, include_inactive=True)) == 2


class TestRuleRepositoryIntegration:
    @pytest.mark.asyncio
    async def test_seed_reorder_and_delete(self, db_session: AsyncSession):
        from app.core.default_transition_rules import (
            DEFAULT_CRM_SETTINGS,
            build_default_rules,
        )
        from app.repositories.temperature_rule_repository import (
            TemperatureRuleRepository,
        )
        from app.schemas.crm_settings import CRMSettingsOut

        repo = TemperatureRuleRepository(db_session)
        org = uuid4()
        rules = build_default_rules(
            CRMSettingsOut(organization_id=org, **DEFAULT_CRM_SETTINGS)
        )

        assert await repo.seed_if_empty(org, rules) == 4
        assert await repo.seed_if_empty(org, rules) == 0
        await repo.commit()

        stored = await repo.list_for_org(org)
        reversed_ids = [r.id for r in reversed(stored)]
        await repo.reorder(org, reversed_ids)
        await repo.commit()
        db_session.expire_all()

        assert [r.id for r in await repo.list_for_org(org)] == reversed_ids
        assert await repo.organizations_with_active_rules() == [org]

        await repo.delete(stored[0])
        await repo.commit()
        assert await repo.count(org) == 3


class TestLeadConstraints:
    @pytest.mark.asyncio
    async def test_substatus_requires_hot_temperature(self, db_session: AsyncSession):
        from sqlalchemy.exc import IntegrityError

        with pytest.raises(IntegrityError):
            await _seed_lead(db_session, temperature="frio", hot_substatus="em_conversa")


class TestSweepIntegration:
    @pytest.mark.asyncio
    async def test_default_rules_cool_stale_leads(self, session_factory):
        from app.core.default_transition_rules import (
            DEFAULT_CRM_SETTINGS,
            build_default_rules,
        )
        from app.repositories.temperature_rule_repository import (
            TemperatureRuleRepository,
        )
        from app.schemas.crm_settings import CRMSettingsOut
        from app.services.auto_transitions import run_auto_transitions

        org = uuid4()
        now = datetime.now(timezone.utc)
        async with session_factory() as session:
            await TemperatureRuleRepository(session).seed_if_empty(
                org,
                build_default_rules(
                    CRMSettingsOut(organization_id=org, **DEFAULT_CRM_SETTINGS)
                ),
            )
            await session.commit()
            stale = await _seed_lead(
                session,
                organization_id=org,
                temperature="quente",
                hot_substatus="aguardando_resposta",
                last_interaction_at=now - timedelta(hours=50),
            )
            lost = await _seed_lead(
                session,
                organization_id=org,
                temperature="perdido",
                created_at=now - timedelta(days=30),
            )

        result = await run_auto_transitions(session_factory, now)

        assert result.organizations_processed == 1
        assert result.transitions_made == 1
        assert result.substatuses_cleared == 1
        async with session_factory() as session:
            cooled = await session.get(Lead, stale.id)
            untouched = await session.get(Lead, lost.id)
            assert cooled.temperature == "frio"
            assert cooled.hot_substatus is None
            assert untouched.temperature == "perdido"
