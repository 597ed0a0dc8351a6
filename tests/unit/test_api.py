"""Unit tests for the guest_knows HTTP API."""

import json
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI

from guest_knows.api import create_app
from guest_knows.config import ApiSettings, GuestKnowsConfig
from guest_knows.orchestrator import IngestionOrchestrator
from guest_knows.services.knowledge_store import KnowledgeStore
from guest_knows.services.normalization import ThreadNormalizationService
from mocks.payloads import make_message, make_payload

TOKEN = "current-token"
OLD_TOKEN = "previous-token"
AUTH = {"Authorization": f"Bearer {TOKEN}"}


@pytest.fixture
def config() -> GuestKnowsConfig:
    return GuestKnowsConfig(api=ApiSettings(ingest_token=TOKEN, ingest_token_old=OLD_TOKEN))


@pytest.fixture
def orchestrator(
    knowledge_store: KnowledgeStore,
    normalization_service: ThreadNormalizationService,
    mock_reply_generator: AsyncMock,
    mock_notifier: AsyncMock,
) -> IngestionOrchestrator:
    return IngestionOrchestrator(
        store=knowledge_store,
        normalizer=normalization_service,
        reply_generator=mock_reply_generator,
        notifier=mock_notifier,
    )


@pytest.fixture
def app(config: GuestKnowsConfig, orchestrator: IngestionOrchestrator) -> FastAPI:
    return create_app(config, orchestrator)


def client_for(app: FastAPI) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")


class TestAuth:
    """Tests for bearer token checks."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"Authorization": "Bearer wrong-token"},
            {"Authorization": f"Basic {TOKEN}"},
            {"Authorization": "Bearer "},
        ],
    )
    async def test_rejected(self, app: FastAPI, headers: dict[str, str]) -> None:
        async with client_for(app) as client:
            response = await client.post("/webhooks/email", json=make_payload(), headers=headers)
        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("token", [TOKEN, OLD_TOKEN])
    async def test_current_and_previous_tokens_accepted(self, app: FastAPI, token: str) -> None:
        async with client_for(app) as client:
            response = await client.post(
                "/webhooks/email",
                json=make_payload(),
                headers={"Authorization": f"Bearer {token}"},
            )
        assert response.status_code == 200

    @pytest.mark.asyncio
    async def test_no_configured_token_rejects_everything(
        self, orchestrator: IngestionOrchestrator
    ) -> None:
        app = create_app(GuestKnowsConfig(api=ApiSettings(ingest_token=None)), orchestrator)
        async with client_for(app) as client:
            response = await client.get("/threads/thread-1", headers=AUTH)
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_retrieval_requires_token(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.get("/properties/prop-1/knowledge")
        assert response.status_code == 401
        assert response.json() == {"error": "unauthorized"}

    @pytest.mark.asyncio
    async def test_health_is_public(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "guest-knows"}


class TestWebhook:
    """Tests for POST /webhooks/email."""

    @pytest.mark.asyncio
    async def test_accepts_payload(self, app: FastAPI, sample_payload: dict[str, Any]) -> None:
        async with client_for(app) as client:
            response = await client.post("/webhooks/email", json=sample_payload, headers=AUTH)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "received"
        assert body["has_suggested_reply"] is True
        assert body["knowledge_item_id"]

    @pytest.mark.asyncio
    async def test_invalid_payload(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.post(
                "/webhooks/email", json={"messages": [{"id": "1"}]}, headers=AUTH
            )

        assert response.status_code == 400
        assert response.json() == {
            "error": "Invalid payload",
            "details": "Payload must contain 'schema_version' string field",
        }

    @pytest.mark.asyncio
    async def test_missing_message_field(self, app: FastAPI) -> None:
        payload = make_payload({"id": "m1", "date": "2024-03-01T10:00:00Z"})
        async with client_for(app) as client:
            response = await client.post("/webhooks/email", json=payload, headers=AUTH)

        assert response.status_code == 400
        assert response.json()["details"] == "Message 0 missing required field: from"

    @pytest.mark.asyncio
    async def test_body_not_json(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.post(
                "/webhooks/email",
                content=b"not json",
                headers={**AUTH, "Content-Type": "application/json"},
            )

        assert response.status_code == 400
        assert response.json()["details"] == "Payload must be an object"

    @pytest.mark.asyncio
    async def test_numeric_ids_accepted(self, app: FastAPI) -> None:
        payload = make_payload(make_message(id=12345), threadId=98765, property_id=4353572)
        async with client_for(app) as client:
            response = await client.post("/webhooks/email", json=payload, headers=AUTH)
            thread = (await client.get("/threads/98765", headers=AUTH)).json()

        assert response.status_code == 200
        assert thread["count"] == 1
        assert thread["items"][0]["property_id"] == "4353572"

    @pytest.mark.asyncio
    async def test_mistyped_field_is_bad_request(self, app: FastAPI) -> None:
        payload = make_payload(make_message(**{"from": {"name": "Jane"}}))
        async with client_for(app) as client:
            response = await client.post("/webhooks/email", json=payload, headers=AUTH)

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "Invalid payload"
        assert body["details"].startswith("Invalid field messages.0.from: ")

    @pytest.mark.asyncio
    async def test_storage_outage_still_accepted(
        self,
        config: GuestKnowsConfig,
        normalization_service: ThreadNormalizationService,
        sample_payload: dict[str, Any],
    ) -> None:
        orchestrator = IngestionOrchestrator(
            store=KnowledgeStore(None), normalizer=normalization_service
        )
        async with client_for(create_app(config, orchestrator)) as client:
            response = await client.post("/webhooks/email", json=sample_payload, headers=AUTH)

        assert response.status_code == 200
        assert response.json() == {"status": "received", "has_suggested_reply": False}

    @pytest.mark.asyncio
    async def test_unexpected_error(self, config: GuestKnowsConfig) -> None:
        orchestrator = AsyncMock()
        orchestrator.ingest.side_effect = RuntimeError("boom")
        async with client_for(create_app(config, orchestrator)) as client:
            response = await client.post("/webhooks/email", json=make_payload(), headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to process request"}


class TestKnowledgeRoutes:
    """Tests for retrieval and property context routes."""

    @pytest.mark.asyncio
    async def test_retrieval_after_ingest(
        self, app: FastAPI, sample_payload: dict[str, Any]
    ) -> None:
        async with client_for(app) as client:
            ingested = await client.post("/webhooks/email", json=sample_payload, headers=AUTH)
            item_id = ingested.json()["knowledge_item_id"]

            thread = (await client.get("/threads/thread-1", headers=AUTH)).json()
            booking = (await client.get("/bookings/book-1", headers=AUTH)).json()
            knowledge = (
                await client.get("/properties/prop-1/knowledge?limit=10", headers=AUTH)
            ).json()

        assert thread["count"] == 1
        assert thread["items"][0]["id"] == item_id
        assert thread["items"][0]["raw_payload"] == "[REDACTED]"
        assert thread["items"][0]["normalized"]["latest_guest_message"]["from"] == (
            "Jane Guest <***@example.com>"
        )

        assert booking["threads"] == ["thread-1"]
        assert booking["item_count"] == 1

        assert knowledge["property_id"] == "prop-1"
        assert knowledge["count"] == 1
        assert "jane@example.com" not in json.dumps(thread)
        assert "host@capehost.ai" not in json.dumps(thread)

    @pytest.mark.asyncio
    async def test_unknown_ids_are_empty(self, app: FastAPI) -> None:
        async with client_for(app) as client:
            response = await client.get("/threads/unknown", headers=AUTH)
        assert response.status_code == 200
        assert response.json() == {"external_thread_id": "unknown", "items": [], "count": 0}

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", ["abc", "0", "-3", "1.5"])
    async def test_invalid_limit(self, app: FastAPI, limit: str) -> None:
        async with client_for(app) as client:
            response = await client.get(
                "/properties/prop-1/knowledge", params={"limit": limit}, headers=AUTH
            )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid limit parameter"}

    @pytest.mark.asyncio
    async def test_store_context(self, app: FastAPI, knowledge_store: KnowledgeStore) -> None:
        async with client_for(app) as client:
            response = await client.post(
                "/properties/prop-1/context",
                json={"context": "Quiet hours after 10pm."},
                headers=AUTH,
            )

        assert response.status_code == 200
        assert response.json() == {"status": "stored", "property_id": "prop-1"}
        assert await knowledge_store.get_property_context("prop-1") == "Quiet hours after 10pm."

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [{}, {"context": ""}, {"context": 42}, ["context"]])
    async def test_invalid_context(self, app: FastAPI, body: Any) -> None:
        async with client_for(app) as client:
            response = await client.post("/properties/prop-1/context", json=body, headers=AUTH)
        assert response.status_code == 400
        assert response.json() == {"error": "Missing or invalid 'context' field"}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("path", "method", "message"),
        [
            ("/threads/t1", "get_thread", "Failed to retrieve thread"),
            ("/bookings/b1", "get_booking", "Failed to retrieve booking"),
            (
                "/properties/p1/knowledge",
                "get_property_knowledge",
                "Failed to retrieve property knowledge",
            ),
        ],
    )
    async def test_retrieval_errors(
        self, config: GuestKnowsConfig, path: str, method: str, message: str
    ) -> None:
        orchestrator = AsyncMock()
        getattr(orchestrator, method).side_effect = ConnectionError("redis down")
        async with client_for(create_app(config, orchestrator)) as client:
            response = await client.get(path, headers=AUTH)

        assert response.status_code == 500
        assert response.json() == {"error": message}
