"""Skill Swap Service 도메인 서비스 레이어입니다.

스왑 제안/응답/완료/취소/평가를 처리합니다. 수락은 status='pending' 이고
responder 가 비어 있는 행에만 적용되는 조건부 UPDATE 로 기록되므로 동시에
수락한 두 사용자 중 한 명만 responder 가 된다.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from teamswap import constants as c
from teamswap import workflow
from teamswap.config import settings
from teamswap.gateway import DataGateway
from teamswap.models.skill_swap import SkillSwap
from teamswap.models.user import Profile, User
from teamswap.schemas.skill_swap import SkillSwapCreate
from teamswap.services import notification_service
from teamswap.utils.composition import filter_swaps, swap_flags, swap_stats
from teamswap.utils.permissions import (
    can_cancel_swap,
    can_complete_swap,
    can_respond_to_swap,
    is_swap_participant,
)

logger = logging.getLogger(__name__)

MAX_REQUEST_NOTIFICATIONS = 20


def _attach_flags(swaps: List[SkillSwap], viewer: Optional[User]) -> List[SkillSwap]:
    if viewer is None:
        return swaps
    for s in swaps:
        flags = swap_flags(s, viewer.user_id)
        s._is_requester = flags["is_requester"]
        s._is_responder = flags["is_responder"]
        s._can_respond = flags["can_respond"]
    return swaps


def get_swap(db: Session, swap_id: int, viewer: Optional[User] = None) -> SkillSwap:
    swap = db.query(SkillSwap).filter(SkillSwap.swap_id == swap_id).first()
    if not swap:
        raise HTTPException(status_code=404, detail="스킬 스왑을 찾을 수 없습니다.")
    return _attach_flags([swap], viewer)[0]


def list_swaps(
    db: Session,
    viewer: Optional[User],
    search: Optional[str] = None,
    statuses: Optional[Iterable[str]] = None,
    limit: Optional[int] = None,
) -> List[SkillSwap]:
    q = db.query(SkillSwap)
    wanted = [s for s in (statuses or []) if s]
    if wanted:
        q = q.filter(SkillSwap.status.in_(wanted))
    swaps = q.order_by(SkillSwap.created_at.desc(), SkillSwap.swap_id.desc()).all()
    swaps = filter_swaps(swaps, search)
    if limit:
        swaps = swaps[:limit]
    return _attach_flags(swaps, viewer)


def discover_swaps(db: Session, viewer: Optional[User], search: Optional[str] = None) -> List[SkillSwap]:
    return list_swaps(
        db,
        viewer,
        search=search,
        statuses=[c.SWAP_PENDING, c.SWAP_ACCEPTED],
        limit=settings.DISCOVER_LIMIT,
    )


def discover_stats(db: Session, search: Optional[str] = None) -> dict:
    return swap_stats(discover_swaps(db, None, search))


def _users_offering_skill(db: Session, skill: str, exclude_user_id: int) -> List[int]:
    needle = skill.strip().lower()
    matched = []
    for profile in db.query(Profile).filter(Profile.user_id != exclude_user_id).order_by(Profile.user_id.asc()):
        offered = [str(s).strip().lower() for s in (profile.skills_offered or [])]
        if needle in offered:
            matched.append(profile.user_id)
            if len(matched) >= MAX_REQUEST_NOTIFICATIONS:
                break
    return matched


def propose(db: Session, data: SkillSwapCreate, current_user: User) -> SkillSwap:
    swap = DataGateway(db).insert(
        "skill_swaps",
        {
            "requester_id": current_user.user_id,
            "responder_id": None,
            "status": c.SWAP_PENDING,
            **data.model_dump(),
        },
    )
    for user_id in _users_offering_skill(db, data.requested_skill, current_user.user_id):
        notification_service.add_notification(
            db,
            user_id,
            c.NOTI_SKILL_SWAP_REQUEST,
            "새 스킬 스왑 요청",
            f"'{data.requested_skill}' 스킬을 배우고 싶어 하는 요청이 도착했습니다.",
            related_id=swap.swap_id,
        )
    db.commit()
    db.refresh(swap)
    logger.info("[skill_swap] proposed swap_id=%s by user_id=%s", swap.swap_id, current_user.user_id)
    return _attach_flags([swap], current_user)[0]


def respond(db: Session, swap_id: int, decision: str, current_user: User) -> SkillSwap:
    swap = get_swap(db, swap_id)
    if not can_respond_to_swap(swap, current_user):
        raise HTTPException(status_code=403, detail="본인이 요청한 스왑에는 응답할 수 없습니다.")

    outcome, reason = workflow.decide_swap_response(swap.status, swap.responder_id, decision)
    if outcome is None:
        logger.warning("[skill_swap] rejected response swap_id=%s decision=%s: %s", swap_id, decision, reason)
        raise HTTPException(status_code=409, detail=reason)

    patch = {"status": outcome.next_status}
    if outcome.assigns_responder:
        patch["responder_id"] = current_user.user_id
    updated = DataGateway(db).update(
        "skill_swaps",
        {"swap_id": swap_id, "status": c.SWAP_PENDING, "responder_id": None},
        patch,
    )
    if updated != 1:
        db.rollback()
        logger.warning(
            "[skill_swap] lost accept race swap_id=%s user_id=%s", swap_id, current_user.user_id,
        )
        raise HTTPException(status_code=409, detail="이미 다른 사용자가 수락한 스왑입니다.")

    accepted = outcome.next_status == c.SWAP_ACCEPTED
    notification_service.add_notification(
        db,
        swap.requester_id,
        outcome.noti_type,
        "스킬 스왑 수락" if accepted else "스킬 스왑 거절",
        f"'{swap.offered_skill} ↔ {swap.requested_skill}' 스왑이 {'수락' if accepted else '거절'}되었습니다.",
        related_id=swap_id,
    )
    db.commit()
    db.refresh(swap)
    logger.info(
        "[skill_swap] swap_id=%s %s by user_id=%s", swap_id, outcome.next_status, current_user.user_id,
    )
    return _attach_flags([swap], current_user)[0]


def _counterparty(swap: SkillSwap, user: User) -> Optional[int]:
    if swap.requester_id == user.user_id:
        return swap.responder_id
    return swap.requester_id


def complete(db: Session, swap_id: int, current_user: User) -> SkillSwap:
    swap = get_swap(db, swap_id)
    if not can_complete_swap(swap, current_user):
        raise HTTPException(status_code=403, detail="스왑 참여자만 완료 처리할 수 있습니다.")
    ok, reason = workflow.check_swap_complete(swap.status)
    if not ok:
        raise HTTPException(status_code=409, detail=reason)

    updated = DataGateway(db).update(
        "skill_swaps",
        {"swap_id": swap_id, "status": c.SWAP_ACCEPTED},
        {"status": c.SWAP_COMPLETED, "completed_at": datetime.utcnow()},
    )
    if updated != 1:
        db.rollback()
        raise HTTPException(status_code=409, detail="이미 처리된 스왑입니다.")
    # 양측 모두 가르치고 배운 것으로 집계한다.
    DataGateway(db).update(
        "profiles",
        {"user_id": [swap.requester_id, swap.responder_id]},
        {
            "skills_taught": Profile.skills_taught + 1,
            "skills_learned": Profile.skills_learned + 1,
        },
    )
    other = _counterparty(swap, current_user)
    if other is not None:
        notification_service.add_notification(
            db,
            other,
            c.NOTI_SYSTEM,
            "스킬 스왑 완료",
            f"'{swap.offered_skill} ↔ {swap.requested_skill}' 스왑이 완료되었습니다. 상대방을 평가해 주세요.",
            related_id=swap_id,
        )
    db.commit()
    db.refresh(swap)
    logger.info("[skill_swap] completed swap_id=%s by user_id=%s", swap_id, current_user.user_id)
    return _attach_flags([swap], current_user)[0]


def cancel(db: Session, swap_id: int, current_user: User) -> SkillSwap:
    swap = get_swap(db, swap_id)
    if not can_cancel_swap(swap, current_user):
        raise HTTPException(status_code=403, detail="요청자만 스왑을 취소할 수 있습니다.")
    ok, reason = workflow.check_swap_cancel(swap.status)
    if not ok:
        raise HTTPException(status_code=409, detail=reason)

    previous = swap.status
    updated = DataGateway(db).update(
        "skill_swaps",
        {"swap_id": swap_id, "status": previous},
        {"status": c.SWAP_CANCELLED},
    )
    if updated != 1:
        db.rollback()
        raise HTTPException(status_code=409, detail="이미 처리된 스왑입니다.")
    if swap.responder_id is not None:
        notification_service.add_notification(
            db,
            swap.responder_id,
            c.NOTI_SYSTEM,
            "스킬 스왑 취소",
            f"'{swap.offered_skill} ↔ {swap.requested_skill}' 스왑이 취소되었습니다.",
            related_id=swap_id,
        )
    db.commit()
    db.refresh(swap)
    logger.info("[skill_swap] cancelled swap_id=%s (was %s)", swap_id, previous)
    return _attach_flags([swap], current_user)[0]


def rate(db: Session, swap_id: int, rating: int, current_user: User, feedback: Optional[str] = None) -> SkillSwap:
    swap = get_swap(db, swap_id)
    if not is_swap_participant(swap, current_user):
        raise HTTPException(status_code=403, detail="스왑 참여자만 평가할 수 있습니다.")

    # requester_rating 은 요청자가 남긴 평점이며 responder 의 프로필 평점에 반영된다.
    if swap.requester_id == current_user.user_id:
        rating_field, feedback_field, rated_id = "requester_rating", "requester_feedback", swap.responder_id
    else:
        rating_field, feedback_field, rated_id = "responder_rating", "responder_feedback", swap.requester_id

    ok, reason = workflow.check_swap_rating(swap.status, getattr(swap, rating_field), rating)
    if not ok:
        raise HTTPException(status_code=409, detail=reason)

    updated = DataGateway(db).update(
        "skill_swaps",
        {"swap_id": swap_id, rating_field: None},
        {rating_field: rating, feedback_field: feedback},
    )
    if updated != 1:
        db.rollback()
        raise HTTPException(status_code=409, detail="이미 평가를 남겼습니다.")

    profile = db.query(Profile).filter(Profile.user_id == rated_id).first()
    if profile is not None:
        profile.rating = workflow.running_mean(profile.rating, profile.total_ratings, rating)
        profile.total_ratings = int(profile.total_ratings or 0) + 1
    db.commit()
    db.refresh(swap)
    logger.info(
        "[skill_swap] rated swap_id=%s %s=%s rated_user_id=%s", swap_id, rating_field, rating, rated_id,
    )
    return _attach_flags([swap], current_user)[0]
