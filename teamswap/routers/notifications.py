"""Notifications 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

import asyncio
import json
import logging

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from typing import List, Optional
from teamswap.config import settings
from teamswap.database import get_db
from teamswap.gateway import change_feed
from teamswap.schemas.notification import NotificationOut, UnreadCountOut
from teamswap.services import notification_service
from teamswap.middleware.auth_middleware import get_current_user
from teamswap.models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("", response_model=List[NotificationOut])
def list_notifications(
    unread_only: bool = False,
    limit: Optional[int] = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return notification_service.get_notifications(db, current_user.user_id, unread_only, limit)


@router.get("/unread-count", response_model=UnreadCountOut)
def unread_count(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return UnreadCountOut(unread_count=notification_service.count_unread(db, current_user.user_id))


@router.patch("/{noti_id}/read", response_model=NotificationOut)
def mark_read(noti_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return notification_service.mark_read(db, noti_id, current_user.user_id)


@router.post("/read-all")
def mark_all_read(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    updated = notification_service.mark_all_read(db, current_user.user_id)
    return {"message": "모든 알림을 읽음 처리했습니다.", "updated": updated}


@router.get("/stream")
async def stream_notifications(
    request: Request,
    max_events: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    user_id = current_user.user_id
    # 스트림이 열려 있는 동안 DB 연결을 붙잡지 않도록 인증 직후 세션을 반납한다.
    await run_in_threadpool(db.close)
    sub = change_feed.subscribe("notifications", {"user_id": user_id}, loop=asyncio.get_running_loop())
    logger.info("[notification] stream opened user_id=%s", user_id)

    async def event_source():
        sent = 0
        try:
            yield ": connected\n\n"
            while not await request.is_disconnected():
                payload = await sub.next(settings.NOTIFICATION_STREAM_KEEPALIVE_SECONDS)
                if payload is None:
                    yield ": keepalive\n\n"
                    continue
                yield f"event: notification\ndata: {json.dumps(payload['row'])}\n\n"
                sent += 1
                if max_events and sent >= max_events:
                    break
        finally:
            sub.cancel()
            logger.info("[notification] stream closed user_id=%s sent=%s", user_id, sent)

    return StreamingResponse(event_source(), media_type="text/event-stream")
