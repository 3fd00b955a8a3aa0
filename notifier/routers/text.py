# notifier/routers/text.py
"""
Text-repair endpoints.

POST   /api/correct-text       - Repair a single string on demand
GET    /api/text-repair/cache  - Repair cache statistics (admin)
DELETE /api/text-repair/cache  - Drop every cached repair (admin)
"""

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from notifier.auth import require_admin_key
from notifier.schemas.text import CacheClearResponse, CacheStatsResponse, CorrectionResponse
from notifier.services.text_repair import TextRepairService, get_text_repair_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["text-repair"])

TEXT_REQUIRED = "Texto é obrigatório"


@router.post("/correct-text", response_model=CorrectionResponse)
async def correct_text(
    body: Any = Body(None),
    service: TextRepairService = Depends(get_text_repair_service),
) -> dict:
    """
    Repair {"text": ...} and report whether anything changed.

    The body is read loosely so that a missing, empty or non-string text
    gets the same 400 answer.
    """
    text = body.get("text") if isinstance(body, dict) else None
    if not isinstance(text, str) or not text:
        raise HTTPException(status_code=400, detail={"message": TEXT_REQUIRED})

    corrected = await service.repair(text)
    return {
        "success": True,
        "data": {"original": text, "corrected": corrected, "changed": corrected != text},
    }


@router.get("/text-repair/cache", response_model=CacheStatsResponse)
def get_cache_stats(
    service: TextRepairService = Depends(get_text_repair_service),
    _: None = Depends(require_admin_key),
) -> dict:
    return {
        "success": True,
        "data": {**service.cache.stats(), "strategy": service.strategy, "enabled": service.enabled},
    }


@router.delete("/text-repair/cache", response_model=CacheClearResponse)
def clear_cache(
    service: TextRepairService = Depends(get_text_repair_service),
    _: None = Depends(require_admin_key),
) -> dict:
    service.clear_cache()
    logger.info("Text repair cache cleared via API", extra={"event": "repair_cache_cleared_api"})
    return {"success": True, "message": "Text repair cache cleared"}
