"""
Notification Endpoints

Per-user notification feed: list, mark read, mark all read, delete.
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel

from serene.api.dependencies import get_service
from serene.domain.models import Notification
from serene.services.orchestration import StressAnalysisService

router = APIRouter()


class NotificationResponse(BaseModel):
    id: str
    request_id: str
    user_id: str
    message: str
    stress_score: float
    stress_tier: str
    urgency: str
    kind: str
    remedies: list[str]
    original_message: str
    emotions: list[str]
    group_id: str
    timestamp: str
    is_read: bool
    is_high_priority: bool

    @classmethod
    def from_domain(cls, notification: Notification) -> "NotificationResponse":
        return cls(**notification.to_dict(), is_high_priority=notification.is_high_priority)


class NotificationListResponse(BaseModel):
    notifications: list[NotificationResponse]
    unread_count: int
    high_priority_count: int


class HighPriorityResponse(BaseModel):
    notifications: list[NotificationResponse]
    count: int


class MarkReadResponse(BaseModel):
    id: str
    is_read: bool


class MarkAllReadResponse(BaseModel):
    updated: int


@router.get(
    "/{user_id}",
    response_model=NotificationListResponse,
    summary="List a user's notifications, newest first",
)
async def list_notifications(
    user_id: str,
    unread_only: bool = Query(default=False),
    service: StressAnalysisService = Depends(get_service),
) -> NotificationListResponse:
    all_notifications = await service.feed.list_notifications(user_id)
    shown = [n for n in all_notifications if not n.is_read] if unread_only else all_notifications
    return NotificationListResponse(
        notifications=[NotificationResponse.from_domain(n) for n in shown],
        unread_count=sum(1 for n in all_notifications if not n.is_read),
        high_priority_count=sum(1 for n in all_notifications if n.is_high_priority),
    )


@router.get(
    "/{user_id}/high-priority",
    response_model=HighPriorityResponse,
    summary="Unread urgent or high-stress notifications",
)
async def high_priority_notifications(
    user_id: str,
    service: StressAnalysisService = Depends(get_service),
) -> HighPriorityResponse:
    notifications = await service.feed.high_priority(user_id)
    return HighPriorityResponse(
        notifications=[NotificationResponse.from_domain(n) for n in notifications],
        count=len(notifications),
    )


@router.post(
    "/{user_id}/read-all",
    response_model=MarkAllReadResponse,
    summary="Mark every notification read",
)
async def mark_all_read(
    user_id: str,
    service: StressAnalysisService = Depends(get_service),
) -> MarkAllReadResponse:
    return MarkAllReadResponse(updated=await service.feed.mark_all_read(user_id))


@router.post(
    "/{user_id}/{notification_id}/read",
    response_model=MarkReadResponse,
    summary="Mark one notification read",
)
async def mark_read(
    user_id: str,
    notification_id: str,
    service: StressAnalysisService = Depends(get_service),
) -> MarkReadResponse:
    if not await service.feed.mark_read(user_id, notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Notification {notification_id} not found",
        )
    return MarkReadResponse(id=notification_id, is_read=True)


@router.delete(
    "/{user_id}/{notification_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a notification",
)
async def delete_notification(
    user_id: str,
    notification_id: str,
    service: StressAnalysisService = Depends(get_service),
) -> Response:
    if not await service.feed.delete(user_id, notification_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Notification {notification_id} not found",
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
