# notifier/schemas/text.py
"""
Schemas for text-repair endpoints.
"""

from pydantic import BaseModel, Field


class CorrectionResult(BaseModel):
    """Outcome of a manual correction."""

    original: str = Field(..., description="Text exactly as submitted")
    corrected: str = Field(..., description="Repaired text")
    changed: bool = Field(..., description="Whether repair changed anything")


class CorrectionResponse(BaseModel):
    """
    Response of POST /api/correct-text.
    """

    success: bool = True
    data: CorrectionResult


class CacheStats(BaseModel):
    size: int
    maxsize: int = Field(..., description="LRU bound, 0 = unbounded")
    hits: int
    misses: int
    generation: int = Field(..., description="Bumped on every clear")
    strategy: str = Field(..., description="local or languagetool")
    enabled: bool


class CacheStatsResponse(BaseModel):
    success: bool = True
    data: CacheStats


class CacheClearResponse(BaseModel):
    success: bool = True
    message: str
