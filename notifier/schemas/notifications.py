# notifier/schemas/notifications.py
"""
Schemas for notification endpoints.

Wire names are camelCase (userId, isRead, createdAt) with Mongo-style
`_id` and `__v`; Python attributes are snake_case and mapped by alias.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from notifier.models import NotificationType, Priority


class NotificationCreate(BaseModel):
    """
    Body of POST /api/notifications.
    Unknown fields are dropped.
    """

    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1, description="Recipient user ID")
    title: str = Field(..., min_length=1, max_length=200, description="Short headline")
    message: str = Field(..., min_length=1, max_length=1000, description="Notification body")
    type: NotificationType = Field(NotificationType.INFO, description="info|warning|error|success")
    priority: Priority = Field(Priority.MEDIUM, description="low|medium|high")
    meta: dict[str, Any] = Field(default_factory=dict, alias="metadata", description="Free-form client data")


class NotificationUpdate(BaseModel):
    """Body of PATCH /api/notifications/{id}. At least one field is required."""

    model_config = ConfigDict(populate_by_name=True)

    title: str | None = Field(None, min_length=1, max_length=200)
    message: str | None = Field(None, min_length=1, max_length=1000)
    type: NotificationType | None = None
    priority: Priority | None = None
    meta: dict[str, Any] | None = Field(None, alias="metadata")

    @model_validator(mode="after")
    def require_one_field(self) -> "NotificationUpdate":
        if not self.changes():
            raise ValueError("At least one field must be provided for update")
        return self

    def changes(self) -> dict[str, Any]:
        """Provided fields keyed by model attribute name."""
        values = self.model_dump(exclude_none=True)
        for key in ("type", "priority"):
            if key in values:
                values[key] = values[key].value
        return values


class NotificationOut(BaseModel):
    """A single notification as returned by the API."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., alias="_id")
    user_id: str = Field(..., alias="userId")
    title: str
    message: str
    type: str
    priority: str
    meta: dict[str, Any] = Field(default_factory=dict, alias="metadata")
    is_read: bool = Field(..., alias="isRead")
    is_deleted: bool = Field(..., alias="isDeleted")
    created_at: str = Field(..., alias="createdAt")
    updated_at: str = Field(..., alias="updatedAt")
    deleted_at: str | None = Field(None, alias="deletedAt")
    version: int = Field(0, alias="__v")


class NotificationResponse(BaseModel):
    """Envelope for endpoints returning one notification."""

    success: bool = True
    message: str | None = None
    data: NotificationOut


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: int = Field(..., alias="currentPage")
    total_pages: int = Field(..., alias="totalPages")
    total_items: int = Field(..., alias="totalItems")
    items_per_page: int = Field(..., alias="itemsPerPage")
    has_next_page: bool = Field(..., alias="hasNextPage")
    has_prev_page: bool = Field(..., alias="hasPrevPage")


class ListMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    unread_count: int = Field(..., alias="unreadCount")


class NotificationListResponse(BaseModel):
    """
    Envelope for GET /api/notifications/user/{userId}.
    """

    success: bool = True
    data: list[NotificationOut]
    pagination: Pagination
    meta: ListMeta


class CountPair(BaseModel):
    total: int
    unread: int


class NotificationStats(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total: int
    unread: int
    read: int
    by_type: dict[str, CountPair] = Field(default_factory=dict, alias="byType")
    by_priority: dict[str, CountPair] = Field(default_factory=dict, alias="byPriority")


class NotificationStatsResponse(BaseModel):
    success: bool = True
    data: NotificationStats


class ModifiedCount(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    modified_count: int = Field(..., alias="modifiedCount")


class MarkAllReadResponse(BaseModel):
    success: bool = True
    message: str
    data: ModifiedCount


class MessageResponse(BaseModel):
    """Envelope for endpoints that only confirm an action."""

    success: bool = True
    message: str
