# notifier/routers/notifications.py
"""
Notification endpoints.

POST   /api/notifications                           - Create (title/message repaired before saving)
GET    /api/notifications/user/{user_id}            - Paginated list for a user
GET    /api/notifications/user/{user_id}/stats      - Counts by read state, type and priority
PATCH  /api/notifications/user/{user_id}/mark-all-read
GET    /api/notifications/{id}                      - Single notification
PATCH  /api/notifications/{id}                      - Partial update
PATCH  /api/notifications/{id}/read | /unread
DELETE /api/notifications/{id}                      - Soft delete
DELETE /api/notifications/{id}/permanent            - Hard delete

Every JSON response passes through the text-repair interceptor.
"""

import asyncio
import logging
import math
import re

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from notifier import models
from notifier.database import get_db
from notifier.schemas.notifications import (
    MarkAllReadResponse,
    MessageResponse,
    NotificationCreate,
    NotificationListResponse,
    NotificationResponse,
    NotificationStatsResponse,
    NotificationUpdate,
)
from notifier.services.text_repair import TextRepairRoute, TextRepairService, get_text_repair_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"], route_class=TextRepairRoute)

OBJECT_ID = re.compile(r"^[0-9a-fA-F]{24}$")


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------


def _validate_id(notification_id: str) -> str:
    if not OBJECT_ID.match(notification_id):
        raise HTTPException(
            status_code=400,
            detail={"error": "Invalid ID", "message": "Invalid resource ID format"},
        )
    return notification_id


def _not_found() -> HTTPException:
    return HTTPException(status_code=404, detail={"error": "Not Found", "message": "Notification not found"})


def _get_active_or_404(db: Session, notification_id: str) -> models.Notification:
    notification = (
        db.query(models.Notification)
        .filter(
            models.Notification.id == _validate_id(notification_id),
            models.Notification.is_deleted.is_(False),
        )
        .first()
    )
    if notification is None:
        raise _not_found()
    return notification


def _active_for_user(db: Session, user_id: str):
    return db.query(models.Notification).filter(
        models.Notification.user_id == user_id,
        models.Notification.is_deleted.is_(False),
    )


async def repaired_create(
    payload: NotificationCreate,
    service: TextRepairService = Depends(get_text_repair_service),
) -> NotificationCreate:
    """Request body with title and message repaired."""
    title, message = await asyncio.gather(service.repair(payload.title), service.repair(payload.message))
    return payload.model_copy(update={"title": title, "message": message})


async def repaired_update(
    payload: NotificationUpdate,
    service: TextRepairService = Depends(get_text_repair_service),
) -> NotificationUpdate:
    update = {}
    if payload.title is not None:
        update["title"] = await service.repair(payload.title)
    if payload.message is not None:
        update["message"] = await service.repair(payload.message)
    return payload.model_copy(update=update) if update else payload


# -----------------------------------------------------------------------------
# Collection endpoints
# -----------------------------------------------------------------------------


@router.post("", response_model=NotificationResponse, status_code=201)
def create_notification(
    payload: NotificationCreate = Depends(repaired_create),
    db: Session = Depends(get_db),
) -> dict:
    notification = models.Notification(
        user_id=payload.user_id,
        title=payload.title,
        message=payload.message,
        type=payload.type.value,
        priority=payload.priority.value,
        meta=payload.meta,
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)

    logger.info(
        f"Created notification {notification.id} for user {notification.user_id}",
        extra={"event": "notification_created"},
    )
    return {
        "success": True,
        "message": "Notification created successfully",
        "data": notification.to_record(),
    }


@router.get("/user/{user_id}", response_model=NotificationListResponse)
def list_user_notifications(
    user_id: str,
    db: Session = Depends(get_db),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    include_read: bool = Query(True, alias="includeRead"),
    notification_type: models.NotificationType | None = Query(None, alias="type"),
    priority: models.Priority | None = Query(None),
    is_read: bool | None = Query(None, alias="isRead"),
) -> dict:
    """
    Newest first. includeRead=false hides read notifications regardless
    of the isRead filter.
    """
    query = _active_for_user(db, user_id)
    if notification_type is not None:
        query = query.filter(models.Notification.type == notification_type.value)
    if priority is not None:
        query = query.filter(models.Notification.priority == priority.value)
    if is_read is not None:
        query = query.filter(models.Notification.is_read.is_(is_read))
    if not include_read:
        query = query.filter(models.Notification.is_read.is_(False))

    total = query.count()
    total_pages = math.ceil(total / limit)
    rows = (
        query.order_by(models.Notification.created_at.desc(), models.Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    unread_count = _active_for_user(db, user_id).filter(models.Notification.is_read.is_(False)).count()

    return {
        "success": True,
        "data": [row.to_record() for row in rows],
        "pagination": {
            "currentPage": page,
            "totalPages": total_pages,
            "totalItems": total,
            "itemsPerPage": limit,
            "hasNextPage": page < total_pages,
            "hasPrevPage": page > 1,
        },
        "meta": {"unreadCount": unread_count},
    }


def _grouped_counts(db: Session, user_id: str, column) -> dict[str, dict[str, int]]:
    unread = func.sum(case((models.Notification.is_read.is_(False), 1), else_=0))
    rows = (
        db.query(column, func.count(models.Notification.id), unread)
        .filter(
            models.Notification.user_id == user_id,
            models.Notification.is_deleted.is_(False),
        )
        .group_by(column)
        .all()
    )
    return {key: {"total": total, "unread": int(unread_total or 0)} for key, total, unread_total in rows}


@router.get("/user/{user_id}/stats", response_model=NotificationStatsResponse)
def get_user_stats(user_id: str, db: Session = Depends(get_db)) -> dict:
    total = _active_for_user(db, user_id).count()
    unread = _active_for_user(db, user_id).filter(models.Notification.is_read.is_(False)).count()

    return {
        "success": True,
        "data": {
            "total": total,
            "unread": unread,
            "read": total - unread,
            "byType": _grouped_counts(db, user_id, models.Notification.type),
            "byPriority": _grouped_counts(db, user_id, models.Notification.priority),
        },
    }


@router.patch("/user/{user_id}/mark-all-read", response_model=MarkAllReadResponse)
def mark_all_read(user_id: str, db: Session = Depends(get_db)) -> dict:
    modified = (
        _active_for_user(db, user_id)
        .filter(models.Notification.is_read.is_(False))
        .update({models.Notification.is_read: True}, synchronize_session=False)
    )
    db.commit()

    logger.info(f"Marked {modified} notifications read for user {user_id}", extra={"event": "mark_all_read"})
    return {
        "success": True,
        "message": f"{modified} notifications marked as read",
        "data": {"modifiedCount": modified},
    }


# -----------------------------------------------------------------------------
# Item endpoints
# -----------------------------------------------------------------------------


@router.get("/{notification_id}", response_model=NotificationResponse)
def get_notification(notification_id: str, db: Session = Depends(get_db)) -> dict:
    notification = _get_active_or_404(db, notification_id)
    return {"success": True, "data": notification.to_record()}


@router.patch("/{notification_id}", response_model=NotificationResponse)
def update_notification(
    notification_id: str,
    payload: NotificationUpdate = Depends(repaired_update),
    db: Session = Depends(get_db),
) -> dict:
    notification = _get_active_or_404(db, notification_id)
    for field, value in payload.changes().items():
        setattr(notification, field, value)
    db.commit()
    db.refresh(notification)

    return {
        "success": True,
        "message": "Notification updated successfully",
        "data": notification.to_record(),
    }


@router.patch("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(notification_id: str, db: Session = Depends(get_db)) -> dict:
    notification = _get_active_or_404(db, notification_id)
    if notification.is_read:
        return {
            "success": True,
            "message": "Notification is already marked as read",
            "data": notification.to_record(),
        }

    notification.mark_read()
    db.commit()
    db.refresh(notification)
    return {
        "success": True,
        "message": "Notification marked as read successfully",
        "data": notification.to_record(),
    }


@router.patch("/{notification_id}/unread", response_model=NotificationResponse)
def mark_unread(notification_id: str, db: Session = Depends(get_db)) -> dict:
    notification = _get_active_or_404(db, notification_id)
    notification.mark_unread()
    db.commit()
    db.refresh(notification)
    return {
        "success": True,
        "message": "Notification marked as unread successfully",
        "data": notification.to_record(),
    }


@router.delete("/{notification_id}", response_model=MessageResponse)
def delete_notification(notification_id: str, db: Session = Depends(get_db)) -> dict:
    notification = _get_active_or_404(db, notification_id)
    notification.soft_delete()
    db.commit()

    logger.info(f"Soft-deleted notification {notification_id}", extra={"event": "notification_deleted"})
    return {"success": True, "message": "Notification deleted successfully"}


@router.delete("/{notification_id}/permanent", response_model=MessageResponse)
def delete_notification_permanently(notification_id: str, db: Session = Depends(get_db)) -> dict:
    notification = (
        db.query(models.Notification).filter(models.Notification.id == _validate_id(notification_id)).first()
    )
    if notification is None:
        raise _not_found()

    db.delete(notification)
    db.commit()

    logger.info(f"Permanently deleted notification {notification_id}", extra={"event": "notification_purged"})
    return {"success": True, "message": "Notification permanently deleted"}
