# tests/unit/test_interceptor.py
"""
Unit tests for TextRepairService and ResponseInterceptor.

Covers:
- local and remote strategies behind the shared cache
- payload repair repairs each distinct string once
- interception triggers and the never-raise guarantee
- rebuilt JSON responses keep status and headers
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import APIRouter, FastAPI, Response
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from fastapi.testclient import TestClient
from pydantic import BaseModel

from notifier.services.text_repair.cache import RepairCache
from notifier.services.text_repair.engine import LocalRepairer
from notifier.services.text_repair.interceptor import (
    ResponseInterceptor,
    TextRepairRoute,
    TextRepairService,
)

OBJECT_ID = "507f1f77bcf86cd799439011"


@pytest.fixture
def service():
    return TextRepairService(cache=RepairCache())


@pytest.fixture
def interceptor(service):
    return ResponseInterceptor(service)


class TestTextRepairService:
    """Tests for TextRepairService."""

    @pytest.mark.asyncio
    async def test_local_strategy(self, service):
        assert service.strategy == "local"
        assert await service.repair("voce") == "você"
        assert "voce" in service.cache

    @pytest.mark.asyncio
    async def test_disabled_passes_through(self):
        service = TextRepairService(cache=RepairCache(), enabled=False)
        assert await service.repair("voce") == "voce"
        assert await service.repair_payload({"title": "voce"}) == {"title": "voce"}

    @pytest.mark.asyncio
    async def test_non_string_passes_through(self, service):
        assert await service.repair(None) is None

    @pytest.mark.asyncio
    async def test_remote_strategy_used_when_configured(self):
        remote = MagicMock()
        remote.name = "languagetool"
        remote.repair = AsyncMock(return_value="remote result")
        service = TextRepairService(cache=RepairCache(), remote=remote)

        assert service.strategy == "languagetool"
        assert await service.repair("texto") == "remote result"
        assert await service.repair("texto") == "remote result"
        remote.repair.assert_awaited_once_with("texto")

    @pytest.mark.asyncio
    async def test_repair_failure_returns_input(self):
        local = MagicMock()
        local.repair.side_effect = RuntimeError("engine crashed")
        service = TextRepairService(cache=RepairCache(), local=local)

        assert await service.repair("voce") == "voce"

    @pytest.mark.asyncio
    async def test_payload_repairs_each_distinct_string_once(self):
        local = MagicMock(wraps=LocalRepairer())
        service = TextRepairService(cache=RepairCache(), local=local)
        payload = {"data": [{"title": "voce"}, {"title": "voce"}, {"title": "modulo"}]}

        result = await service.repair_payload(payload)

        assert [item["title"] for item in result["data"]] == ["você", "você", "módulo"]
        assert local.repair.call_count == 2

    @pytest.mark.asyncio
    async def test_clear_cache(self, service):
        await service.repair("voce")
        service.clear_cache()
        assert len(service.cache) == 0

    @pytest.mark.asyncio
    async def test_aclose_closes_remote(self):
        remote = MagicMock()
        remote.aclose = AsyncMock()
        service = TextRepairService(cache=RepairCache(), remote=remote)

        await service.aclose()

        remote.aclose.assert_awaited_once()


class TestShouldIntercept:
    def test_triggers(self):
        assert ResponseInterceptor.should_intercept({"data": {"title": "x"}})
        assert ResponseInterceptor.should_intercept({"title": "x"})
        assert ResponseInterceptor.should_intercept({"message": "x"})

    def test_non_triggers(self):
        assert not ResponseInterceptor.should_intercept({"success": True})
        assert not ResponseInterceptor.should_intercept({"data": []})
        assert not ResponseInterceptor.should_intercept([{"title": "x"}])
        assert not ResponseInterceptor.should_intercept("voce")


class TestIntercept:
    """Tests for ResponseInterceptor.intercept()."""

    @pytest.mark.asyncio
    async def test_repairs_record_and_keeps_opaque_fields(self, interceptor):
        payload = {
            "success": True,
            "data": {
                "_id": OBJECT_ID,
                "userId": "voce",
                "title": "reuni%o",
                "createdAt": "2024-01-15T14:30:00.000Z",
            },
        }

        result = await interceptor.intercept(payload)

        assert result["data"] == {
            "_id": OBJECT_ID,
            "userId": "voce",
            "title": "reunião",
            "createdAt": "2024-01-15T14:30:00.000Z",
        }
        assert result["success"] is True

    @pytest.mark.asyncio
    async def test_untriggered_payload_returned_as_is(self, interceptor):
        payload = {"success": True, "note": "voce"}
        assert await interceptor.intercept(payload) is payload

    @pytest.mark.asyncio
    async def test_failure_returns_original_payload(self, interceptor, service):
        payload = {"title": "voce"}

        with patch.object(service, "repair_payload", AsyncMock(side_effect=RuntimeError("boom"))):
            result = await interceptor.intercept(payload)

        assert result is payload


class TestInterceptResponse:
    """Tests for ResponseInterceptor.intercept_response()."""

    @pytest.mark.asyncio
    async def test_rebuilds_changed_response(self, interceptor):
        response = JSONResponse({"data": {"title": "voce"}}, status_code=201, headers={"X-Request-Id": "abc"})

        result = await interceptor.intercept_response(response, "/api/notifications")

        assert result is not response
        assert result.status_code == 201
        assert result.headers["x-request-id"] == "abc"
        assert json.loads(result.body) == {"data": {"title": "você"}}
        assert int(result.headers["content-length"]) == len(result.body)

    @pytest.mark.asyncio
    async def test_unchanged_response_returned_as_is(self, interceptor):
        response = JSONResponse({"data": {"title": "você"}})
        assert await interceptor.intercept_response(response) is response

    @pytest.mark.asyncio
    async def test_plain_response_with_json_media_type_repaired(self, interceptor):
        body = json.dumps({"data": {"title": "reuni\ufffdo"}}).encode()
        response = Response(content=body, media_type="application/json")

        result = await interceptor.intercept_response(response)

        assert json.loads(result.body) == {"data": {"title": "reunião"}}
        assert result.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_repeated_headers_kept(self, interceptor):
        response = JSONResponse({"message": "voce"})
        response.set_cookie("session", "a")
        response.set_cookie("theme", "dark")

        result = await interceptor.intercept_response(response)

        cookies = [value for key, value in result.raw_headers if key == b"set-cookie"]
        assert len(cookies) == 2
        assert [key for key, _ in result.raw_headers].count(b"content-length") == 1

    @pytest.mark.asyncio
    async def test_non_json_response_untouched(self, interceptor):
        response = PlainTextResponse('{"message": "voce"}')
        assert await interceptor.intercept_response(response) is response

    def test_streaming_response_is_not_json(self):
        response = StreamingResponse(iter([b"{}"]), media_type="application/json")
        assert ResponseInterceptor.is_json_response(response) is False


class TestTextRepairRoute:
    """Routes with a response_model go through the interceptor."""

    def _client(self, interceptor):
        app = FastAPI()
        router = APIRouter(route_class=TextRepairRoute)

        class Item(BaseModel):
            title: str

        class Envelope(BaseModel):
            success: bool
            data: Item

        @router.get("/item", response_model=Envelope)
        def get_item():
            return {"success": True, "data": {"title": "Nova vers\ufffdo"}}

        app.include_router(router)
        app.state.response_interceptor = interceptor
        return TestClient(app)

    def test_response_model_route_repaired(self, interceptor):
        response = self._client(interceptor).get("/item")

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": {"title": "Nova versão"}}
