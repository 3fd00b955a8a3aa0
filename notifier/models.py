# notifier/models.py
"""
Notification Database Models

Tables:
- Notification: A message addressed to one user, soft-deletable

Identifiers are 24-character hex strings (4-byte timestamp, 5-byte process
value, 3-byte counter) so ids issued by the service sort by creation time
and keep the shape clients already validate against.
"""

import itertools
import secrets
import time
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Boolean, Column, DateTime, Index, Integer, String

from notifier.database import Base

# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------


class NotificationType(str, Enum):
    """What kind of event the notification reports."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"


class Priority(str, Enum):
    """How prominently clients should show the notification."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


# -----------------------------------------------------------------------------
# Identifiers
# -----------------------------------------------------------------------------

_PROCESS_UNIQUE = secrets.token_hex(5)
_counter = itertools.count(secrets.randbelow(0xFFFFFF))


def new_object_id() -> str:
    """Return a new 24-hex id, ordered by creation time within a process."""
    return f"{int(time.time()) & 0xFFFFFFFF:08x}{_PROCESS_UNIQUE}{next(_counter) % 0x1000000:06x}"


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _isoformat(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# -----------------------------------------------------------------------------
# Notification
# -----------------------------------------------------------------------------


class Notification(Base):
    """
    A notification addressed to one user.

    Deleting through the API only flags the row (is_deleted/deleted_at);
    the permanent delete endpoint removes it.
    """

    __tablename__ = "notifications"

    id = Column(String(24), primary_key=True, default=new_object_id)
    user_id = Column(String(128), nullable=False, index=True)

    title = Column(String(200), nullable=False)
    message = Column(String(1000), nullable=False)
    type = Column(String(16), default=NotificationType.INFO.value, nullable=False)
    priority = Column(String(16), default=Priority.MEDIUM.value, nullable=False)
    # "metadata" is reserved on declarative classes
    meta = Column("metadata", JSON, default=dict, nullable=False)

    is_read = Column(Boolean, default=False, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    deleted_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)
    version = Column(Integer, default=0, nullable=False)

    __table_args__ = (
        Index("ix_notifications_user_read_created", "user_id", "is_read", "created_at"),
        Index("ix_notifications_user_deleted", "user_id", "is_deleted"),
    )

    def mark_read(self) -> None:
        self.is_read = True

    def mark_unread(self) -> None:
        self.is_read = False

    def soft_delete(self) -> None:
        self.is_deleted = True
        self.deleted_at = _utcnow()

    def to_record(self) -> dict[str, Any]:
        """Wire shape of the notification, as returned by the API."""
        return {
            "_id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "message": self.message,
            "type": self.type,
            "priority": self.priority,
            "metadata": self.meta or {},
            "isRead": self.is_read,
            "isDeleted": self.is_deleted,
            "createdAt": _isoformat(self.created_at),
            "updatedAt": _isoformat(self.updated_at),
            "deletedAt": _isoformat(self.deleted_at),
            "__v": self.version,
        }
