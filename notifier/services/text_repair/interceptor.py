# notifier/services/text_repair/interceptor.py
"""
Response-side text repair.

TextRepairService is the single entry point the API uses: it owns the
repair cache and the repair strategy (local rules, optionally enriched by
the remote service) and never raises for a repair failure.

ResponseInterceptor applies the service to outgoing JSON bodies, and
TextRepairRoute hooks the interceptor into every route of a router that
opts in with `APIRouter(route_class=TextRepairRoute)`.
"""

import asyncio
import json
import logging
from collections.abc import Callable, Coroutine, Mapping
from typing import Any

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

from notifier.services.text_repair.cache import RepairCache
from notifier.services.text_repair.engine import LocalRepairer
from notifier.services.text_repair.remote import LanguageToolRepairer
from notifier.services.text_repair.walker import iter_repairable, walk

logger = logging.getLogger(__name__)


class TextRepairService:
    """
    Cached, best-effort text repair.

    Args:
        cache: Shared repair cache
        local: Rule-table strategy
        remote: Optional remote strategy; when set it is used for every
            cache miss and falls back to `local` on its own
        enabled: When False every call returns its input unchanged
    """

    def __init__(
        self,
        cache: RepairCache,
        local: LocalRepairer | None = None,
        remote: LanguageToolRepairer | None = None,
        enabled: bool = True,
    ):
        self.cache = cache
        self.local = local or LocalRepairer()
        self.remote = remote
        self.enabled = enabled

    @property
    def strategy(self) -> str:
        return self.remote.name if self.remote is not None else self.local.name

    async def repair(self, text: str) -> str:
        """Repair one string. On any failure the input comes back unchanged."""
        if not self.enabled or not isinstance(text, str) or not text:
            return text
        try:
            if self.remote is not None:
                return await self.cache.get_or_compute_async(text, self.remote.repair)
            return self.cache.get_or_compute(text, self.local.repair)
        except Exception:
            logger.exception("Text repair failed; passing text through unrepaired")
            return text

    async def repair_payload(self, payload: Any) -> Any:
        """
        Repair every eligible string in a structured payload.

        Each distinct string is repaired once, concurrently, then the
        payload is rebuilt with the results.
        """
        if not self.enabled:
            return payload

        unique = list(dict.fromkeys(iter_repairable(payload)))
        if not unique:
            return payload

        repaired = await asyncio.gather(*(self.repair(text) for text in unique))
        return walk(payload, dict(zip(unique, repaired)).__getitem__)

    def clear_cache(self) -> None:
        self.cache.clear()

    async def aclose(self) -> None:
        if self.remote is not None:
            await self.remote.aclose()


class ResponseInterceptor:
    """Repairs outgoing payloads that carry notification text."""

    TRIGGER_KEYS = ("data", "title", "message")

    def __init__(self, service: TextRepairService):
        self.service = service

    @classmethod
    def should_intercept(cls, payload: Any) -> bool:
        return isinstance(payload, Mapping) and any(payload.get(key) for key in cls.TRIGGER_KEYS)

    async def intercept(self, payload: Any) -> Any:
        """Return the repaired payload, or payload itself if anything goes wrong."""
        if not self.should_intercept(payload):
            return payload
        try:
            return await self.service.repair_payload(payload)
        except Exception:
            logger.exception("Response text repair failed; returning original payload")
            return payload

    @staticmethod
    def is_json_response(response: Response) -> bool:
        """True for fully rendered JSON bodies; streaming responses have no body."""
        if not isinstance(getattr(response, "body", None), bytes):
            return False
        content_type = response.headers.get("content-type") or response.media_type or ""
        return content_type.split(";")[0].strip().lower() == "application/json"

    async def intercept_response(self, response: Response, path: str = "") -> Response:
        """Rebuild a JSON response with a repaired body, keeping status and headers."""
        if not self.is_json_response(response):
            return response
        try:
            payload = json.loads(response.body)
        except ValueError:
            return response

        repaired = await self.intercept(payload)
        if repaired == payload:
            return response

        logger.debug(
            f"Repaired response text on {path}",
            extra={"event": "response_repaired", "path": path, "changed": True},
        )
        rebuilt = JSONResponse(repaired, status_code=response.status_code, background=response.background)
        # Raw headers keep repeated entries such as Set-Cookie
        rebuilt.raw_headers = [
            (key, value) for key, value in response.raw_headers if key.lower() != b"content-length"
        ] + [(b"content-length", str(len(rebuilt.body)).encode("latin-1"))]
        return rebuilt


def get_text_repair_service(request: Request) -> TextRepairService:
    """FastAPI dependency: the service built at startup."""
    return request.app.state.text_repair


class TextRepairRoute(APIRoute):
    """Route class that passes JSON responses through the ResponseInterceptor."""

    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_handler = super().get_route_handler()

        async def repairing_handler(request: Request) -> Response:
            response = await original_handler(request)
            interceptor: ResponseInterceptor | None = getattr(request.app.state, "response_interceptor", None)
            if interceptor is None or not interceptor.is_json_response(response):
                return response
            try:
                return await interceptor.intercept_response(response, request.url.path)
            except Exception:
                logger.exception("Response interception failed; sending original response")
                return response

        return repairing_handler
