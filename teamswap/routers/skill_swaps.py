"""Skill Swaps 기능 API 라우터입니다. 요청을 검증하고 서비스 레이어로 비즈니스 로직을 위임합니다."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from teamswap.database import get_db
from teamswap.schemas.skill_swap import SkillSwapCreate, SkillSwapOut, SkillSwapRating, SkillSwapStatsOut
from teamswap.services import skill_swap_service
from teamswap.middleware.auth_middleware import get_current_user, get_optional_user
from teamswap.models.user import User

router = APIRouter(prefix="/api/skill-swaps", tags=["skill-swaps"])


@router.get("", response_model=List[SkillSwapOut])
def list_swaps(
    search: Optional[str] = None,
    status: Optional[List[str]] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=200),
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return skill_swap_service.list_swaps(db, viewer, search, status, limit)


@router.get("/discover", response_model=List[SkillSwapOut])
def discover_swaps(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return skill_swap_service.discover_swaps(db, viewer, search)


@router.get("/discover/stats", response_model=SkillSwapStatsOut)
def discover_swap_stats(search: Optional[str] = None, db: Session = Depends(get_db)):
    return skill_swap_service.discover_stats(db, search)


@router.post("", response_model=SkillSwapOut, status_code=201)
def propose_swap(
    data: SkillSwapCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return skill_swap_service.propose(db, data, current_user)


@router.get("/{swap_id}", response_model=SkillSwapOut)
def get_swap(
    swap_id: int,
    db: Session = Depends(get_db),
    viewer: Optional[User] = Depends(get_optional_user),
):
    return skill_swap_service.get_swap(db, swap_id, viewer)


@router.post("/{swap_id}/accept", response_model=SkillSwapOut)
def accept_swap(swap_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return skill_swap_service.respond(db, swap_id, "accept", current_user)


@router.post("/{swap_id}/reject", response_model=SkillSwapOut)
def reject_swap(swap_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return skill_swap_service.respond(db, swap_id, "reject", current_user)


@router.post("/{swap_id}/complete", response_model=SkillSwapOut)
def complete_swap(swap_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return skill_swap_service.complete(db, swap_id, current_user)


@router.post("/{swap_id}/cancel", response_model=SkillSwapOut)
def cancel_swap(swap_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return skill_swap_service.cancel(db, swap_id, current_user)


@router.post("/{swap_id}/rate", response_model=SkillSwapOut)
def rate_swap(
    swap_id: int,
    data: SkillSwapRating,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return skill_swap_service.rate(db, swap_id, data.rating, current_user, data.feedback)
