"""
SocialConnect Backend — Notification Route Handlers
=====================================================

Route Inventory:
    GET    /api/notifications                  inbox (?page, ?limit, ?unread=true)  (auth)
    GET    /api/notifications/unread-count     badge count                          (auth)
    GET    /api/notifications/realtime         how to subscribe to the change feed  (auth)
    PATCH  /api/notifications                  mark all as read                     (auth)
    PUT    /api/notifications/{id}             mark one as read                     (auth)
    WS     /api/notifications/ws?token=<jwt>   change feed for the token's user

WebSocket protocol:
    The token travels as a query parameter since browsers cannot set headers
    on a WebSocket handshake; other clients may send a Bearer Authorization
    header instead. An invalid token closes the socket with 1008
    (policy violation) before it is accepted. After that the server only
    sends; anything the client sends is read and discarded so a disconnect
    is noticed promptly.
"""

import asyncio
import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import async_session_factory, get_db_session
from app.dependencies import Pagination, get_current_user, get_pagination, resolve_user
from app.models.user import User
from app.schemas.common import ApiResponse, ErrorResponse
from app.schemas.notification import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
    RealtimeInfo,
    UnreadCountResponse,
)
from app.services.notification_service import notification_service
from app.services.realtime import notification_hub
from app.services.token_service import token_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])

WS_PATH = "/api/notifications/ws"


@router.get(
    "",
    response_model=ApiResponse[NotificationListResponse],
    summary="List notifications",
)
async def list_notifications(
    unread: bool = Query(default=False, description="Only unread notifications"),
    pagination: Pagination = Depends(get_pagination),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[NotificationListResponse]:
    inbox = await notification_service.list_notifications(
        db,
        user.id,
        offset=pagination.offset,
        limit=pagination.limit,
        unread_only=unread,
    )
    return ApiResponse[NotificationListResponse](
        data=inbox, message="Notifications retrieved successfully"
    )


@router.get(
    "/unread-count",
    response_model=ApiResponse[UnreadCountResponse],
    summary="Count unread notifications",
)
async def unread_count(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UnreadCountResponse]:
    count = await notification_service.unread_count(db, user.id)
    return ApiResponse[UnreadCountResponse](data=UnreadCountResponse(unread_count=count))


@router.get(
    "/realtime",
    response_model=ApiResponse[RealtimeInfo],
    summary="Realtime connection details",
)
async def realtime_info(user: User = Depends(get_current_user)) -> ApiResponse[RealtimeInfo]:
    info = RealtimeInfo(
        user_id=user.id,
        endpoint=WS_PATH,
        instructions=(
            f"Open a WebSocket to {WS_PATH}?token=<your token>. Each message is a JSON "
            "object {event, table, new} where event is INSERT or UPDATE."
        ),
    )
    return ApiResponse[RealtimeInfo](data=info, message="Realtime connection info")


@router.patch(
    "",
    response_model=ApiResponse[MarkAllReadResponse],
    summary="Mark all notifications as read",
)
async def mark_all_as_read(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[MarkAllReadResponse]:
    updated = await notification_service.mark_all_as_read(db, user.id)
    return ApiResponse[MarkAllReadResponse](
        data=MarkAllReadResponse(updated=updated),
        message="All notifications marked as read",
    )


@router.put(
    "/{notification_id}",
    response_model=ApiResponse[NotificationResponse],
    responses={404: {"description": "Notification not found", "model": ErrorResponse}},
    summary="Mark a notification as read",
)
async def mark_as_read(
    notification_id: uuid.UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[NotificationResponse]:
    notification = await notification_service.mark_as_read(db, user.id, notification_id)
    return ApiResponse[NotificationResponse](
        data=notification, message="Notification marked as read"
    )


@router.websocket("/ws")
async def notifications_feed(websocket: WebSocket, token: Optional[str] = Query(default=None)):
    """Push INSERT/UPDATE events for the authenticated user's notifications."""
    if not token:
        token = token_service.extract_token_from_header(websocket.headers.get("authorization"))
    async with async_session_factory() as db:
        user = await resolve_user(db, token)

    if user is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    user_id = user.id
    queue = notification_hub.subscribe(user_id)

    async def forward() -> None:
        while True:
            message = await queue.get()
            await websocket.send_json(message)

    async def drain() -> None:
        while True:
            await websocket.receive_text()

    # The connection ends when either side stops: client disconnect or a failed send
    tasks = {asyncio.create_task(forward()), asyncio.create_task(drain())}
    try:
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            exc = None if task.cancelled() else task.exception()
            if isinstance(exc, WebSocketDisconnect):
                logger.debug("WebSocket closed by client for user %s", user_id)
            elif exc is not None:
                logger.warning("Realtime feed for user %s stopped: %s", user_id, exc)
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        notification_hub.unsubscribe(user_id, queue)
