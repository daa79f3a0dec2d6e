"""Notification Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from fastapi import HTTPException
from sqlalchemy.orm import Session
from teamswap.config import settings
from teamswap.constants import NOTIFICATION_TYPES, NOTI_SYSTEM
from teamswap.gateway import DataGateway
from teamswap.models.notification import Notification
from typing import List, Optional


def get_notifications(
    db: Session,
    user_id: int,
    unread_only: bool = False,
    limit: Optional[int] = None,
) -> List[Notification]:
    q = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        q = q.filter(Notification.is_read == False)  # noqa: E712
    size = limit or settings.NOTIFICATION_FETCH_LIMIT
    return q.order_by(Notification.created_at.desc(), Notification.noti_id.desc()).limit(size).all()


def count_unread(db: Session, user_id: int) -> int:
    return DataGateway(db).count("notifications", {"user_id": user_id, "is_read": False})


def mark_read(db: Session, noti_id: int, user_id: int) -> Notification:
    noti = db.query(Notification).filter(
        Notification.noti_id == noti_id,
        Notification.user_id == user_id,
    ).first()
    if not noti:
        raise HTTPException(status_code=404, detail="알림을 찾을 수 없습니다.")
    noti.is_read = True
    db.commit()
    db.refresh(noti)
    return noti


def mark_all_read(db: Session, user_id: int) -> int:
    updated = DataGateway(db).update(
        "notifications",
        {"user_id": user_id, "is_read": False},
        {"is_read": True},
    )
    db.commit()
    return updated


def add_notification(
    db: Session,
    user_id: int,
    noti_type: str,
    title: str,
    message: str,
    related_id: Optional[int] = None,
    action_url: Optional[str] = None,
) -> Notification:
    """Stage a notification in the caller's transaction; the caller commits."""
    kind = noti_type if noti_type in NOTIFICATION_TYPES else NOTI_SYSTEM
    noti = Notification(
        user_id=user_id,
        noti_type=kind,
        title=title,
        message=message,
        related_id=related_id,
        action_url=action_url,
    )
    db.add(noti)
    return noti


def create_notification(
    db: Session,
    user_id: int,
    noti_type: str,
    title: str,
    message: str,
    related_id: Optional[int] = None,
    action_url: Optional[str] = None,
) -> Notification:
    noti = add_notification(db, user_id, noti_type, title, message, related_id, action_url)
    db.commit()
    db.refresh(noti)
    return noti
