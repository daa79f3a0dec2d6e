"""Applications 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Optional
from teamswap.database import get_db
from teamswap.schemas.application import ApplicationOut, ApplicationReview
from teamswap.services import application_service
from teamswap.middleware.auth_middleware import get_current_user
from teamswap.models.user import User

router = APIRouter(prefix="/api/applications", tags=["applications"])


@router.get("/me", response_model=List[ApplicationOut])
def list_my_applications(
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return application_service.list_mine(db, current_user, status)


@router.post("/{application_id}/review", response_model=ApplicationOut)
def review_application(
    application_id: int,
    data: ApplicationReview,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return application_service.review(db, application_id, data.decision, current_user, data.review_message)


@router.post("/{application_id}/withdraw", response_model=ApplicationOut)
def withdraw_application(
    application_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return application_service.withdraw(db, application_id, current_user)
