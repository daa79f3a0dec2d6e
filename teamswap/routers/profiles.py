"""Profiles 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from teamswap.database import get_db
from teamswap.schemas.user import ProfileOut, ProfileUpdate, ViewerSnapshotOut
from teamswap.services import profile_service
from teamswap.middleware.auth_middleware import get_current_user
from teamswap.models.user import User

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.get("/me", response_model=ProfileOut)
def get_my_profile(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return profile_service.get_profile(db, current_user.user_id)


@router.put("/me", response_model=ProfileOut)
def update_my_profile(
    data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return profile_service.update_profile(db, current_user, data)


@router.get("/me/snapshot", response_model=ViewerSnapshotOut)
def get_my_snapshot(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return profile_service.get_snapshot(db, current_user)


@router.get("/{user_id}", response_model=ProfileOut)
def get_profile(user_id: int, db: Session = Depends(get_db)):
    return profile_service.get_profile(db, user_id)
