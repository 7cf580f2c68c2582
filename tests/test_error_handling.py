from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.deps import (
    get_cache_service,
    get_db,
    get_lead_temperature_service,
    get_rule_service,
    get_trigger_service,
)
from app.core.cache import CacheService
from app.core.exceptions import (
    DentalCRMError,
    InterestTriggerNotFoundError,
    InvalidDefinitionError,
    InvalidReorderError,
    InvalidSubstatusError,
    LeadNotFoundError,
    TransitionRuleNotFoundError,
    TransitionRunCooldownError,
)
from app.main import app
from factories import ORG_ID


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        "exc_class",
        [
            LeadNotFoundError,
            InterestTriggerNotFoundError,
            TransitionRuleNotFoundError,
            InvalidReorderError,
            InvalidDefinitionError,
            InvalidSubstatusError,
            TransitionRunCooldownError,
        ],
    )
    def test_domain_errors_share_a_base(self, exc_class):
        exc = exc_class()
        assert isinstance(exc, DentalCRMError)
        assert exc.detail

    def test_detail_is_the_message(self):
        exc = LeadNotFoundError("Lead 42 not found")
        assert exc.detail == "Lead 42 not found"
        assert str(exc) == "Lead 42 not found"


class TestDomainErrorResponses:
    """Each domain exception maps to a status code and a ``type`` tag."""

    @pytest.mark.asyncio
    async def test_lead_not_found(self, async_client):
        service = MagicMock()
        service.get_lead = AsyncMock(side_effect=LeadNotFoundError("Lead x not found"))
        app.dependency_overrides[get_lead_temperature_service] = lambda: service

        response = await async_client.get(f"/api/v1/leads/{uuid4()}")

        assert response.status_code == 404
        assert response.json() == {"detail": "Lead x not found", "type": "lead_not_found"}

    @pytest.mark.asyncio
    async def test_trigger_not_found(self, async_client):
        service = MagicMock()
        service.delete_trigger = AsyncMock(side_effect=InterestTriggerNotFoundError())
        app.dependency_overrides[get_trigger_service] = lambda: service

        response = await async_client.delete(f"/api/v1/interest-triggers/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["type"] == "interest_trigger_not_found"

    @pytest.mark.asyncio
    async def test_rule_not_found(self, async_client):
        service = MagicMock()
        service.delete_rule = AsyncMock(side_effect=TransitionRuleNotFoundError())
        app.dependency_overrides[get_rule_service] = lambda: service

        response = await async_client.delete(f"/api/v1/temperature-rules/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["type"] == "transition_rule_not_found"

    @pytest.mark.asyncio
    async def test_invalid_reorder(self, async_client):
        service = MagicMock()
        service.reorder_rules = AsyncMock(side_effect=InvalidReorderError("bad ids"))
        app.dependency_overrides[get_rule_service] = lambda: service

        response = await async_client.put(
            "/api/v1/temperature-rules/reorder", json={"ordered_ids": [str(uuid4())]}
        )

        assert response.status_code == 400
        assert response.json()["type"] == "invalid_reorder"

    @pytest.mark.asyncio
    async def test_invalid_definition(self, async_client):
        service = MagicMock()
        service.update_rule = AsyncMock(
            side_effect=InvalidDefinitionError("A rule must define at least one action")
        )
        app.dependency_overrides[get_rule_service] = lambda: service

        response = await async_client.patch(
            f"/api/v1/temperature-rules/{uuid4()}",
            json={"action_set_temperature": None},
        )

        assert response.status_code == 422
        assert response.json() == {
            "detail": "A rule must define at least one action",
            "type": "invalid_definition",
        }

    @pytest.mark.asyncio
    async def test_invalid_substatus(self, async_client):
        service = MagicMock()
        service.update_substatus = AsyncMock(side_effect=InvalidSubstatusError())
        app.dependency_overrides[get_lead_temperature_service] = lambda: service

        response = await async_client.patch(
            f"/api/v1/leads/{uuid4()}/substatus", json={"hot_substatus": "em_conversa"}
        )

        assert response.status_code == 409
        assert response.json()["type"] == "invalid_substatus"

    @pytest.mark.asyncio
    async def test_transition_cooldown(self, async_client, mock_redis):
        mock_redis.set = AsyncMock(return_value=None)
        app.dependency_overrides[get_db] = lambda: MagicMock()
        app.dependency_overrides[get_cache_service] = lambda: CacheService(mock_redis)

        response = await async_client.post("/api/v1/automation/transitions/run")

        assert response.status_code == 429
        assert response.json()["type"] == "transition_run_cooldown"


class TestRequestErrors:
    @pytest.mark.asyncio
    async def test_missing_organization_header(self):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/api/v1/crm-settings")

        assert response.status_code == 422
        assert response.json()["type"] == "validation_error"

    @pytest.mark.asyncio
    async def test_malformed_organization_header(self):
        transport = ASGITransport(app=app)
        async with AsyncClient(
            transport=transport,
            base_url="http://test",
            headers={"X-Organization-Id": "clinic-1"},
        ) as client:
            response = await client.get("/api/v1/temperature-rules")

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_unknown_enum_value(self, async_client):
        app.dependency_overrides[get_trigger_service] = lambda: MagicMock()

        response = await async_client.post(
            "/api/v1/interest-triggers",
            json={
                "name": "x",
                "condition_field": "email",
                "condition_operator": "contains",
            },
        )

        assert response.status_code == 422
        assert response.json()["detail"] == "Request validation failed"


class TestUnhandledErrors:
    @pytest.mark.asyncio
    async def test_unexpected_error_returns_generic_500(self):
        service = MagicMock()
        service.get_settings = AsyncMock(side_effect=RuntimeError("secret stack"))
        from app.api.deps import get_crm_settings_service

        app.dependency_overrides[get_crm_settings_service] = lambda: service
        transport = ASGITransport(app=app, raise_app_exceptions=False)
        try:
            async with AsyncClient(
                transport=transport,
                base_url="http://test",
                headers={"X-Organization-Id": str(ORG_ID)},
            ) as client:
                response = await client.get("/api/v1/crm-settings")
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json()["type"] == "internal_server_error"
        assert "secret stack" not in response.text
