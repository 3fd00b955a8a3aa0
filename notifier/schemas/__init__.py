# notifier/schemas/__init__.py
"""
Pydantic schemas for API request/response validation.
"""

from notifier.schemas.notifications import (
    MarkAllReadResponse,
    MessageResponse,
    NotificationCreate,
    NotificationListResponse,
    NotificationOut,
    NotificationResponse,
    NotificationStats,
    NotificationStatsResponse,
    NotificationUpdate,
    Pagination,
)
from notifier.schemas.text import (
    CacheClearResponse,
    CacheStats,
    CacheStatsResponse,
    CorrectionResponse,
    CorrectionResult,
)

__all__ = [
    # Notifications
    "MarkAllReadResponse",
    "MessageResponse",
    "NotificationCreate",
    "NotificationListResponse",
    "NotificationOut",
    "NotificationResponse",
    "NotificationStats",
    "NotificationStatsResponse",
    "NotificationUpdate",
    "Pagination",
    # Text repair
    "CacheClearResponse",
    "CacheStats",
    "CacheStatsResponse",
    "CorrectionResponse",
    "CorrectionResult",
]
