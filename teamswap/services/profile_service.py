"""Profile Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

from typing import Iterable

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamswap import constants as c
from teamswap.gateway import DataGateway
from teamswap.models.application import ProjectApplication
from teamswap.models.project import ProjectMember
from teamswap.models.user import Profile, User
from teamswap.schemas.user import ProfileUpdate, ViewerSnapshotOut


def get_profile(db: Session, user_id: int) -> Profile:
    profile = db.query(Profile).filter(Profile.user_id == user_id).first()
    if not profile:
        raise HTTPException(status_code=404, detail="프로필을 찾을 수 없습니다.")
    return profile


def update_profile(db: Session, current_user: User, data: ProfileUpdate) -> Profile:
    profile = get_profile(db, current_user.user_id)
    payload = data.model_dump(exclude_none=True)
    username = payload.get("username")
    if username and username != profile.username:
        taken = db.query(Profile).filter(
            Profile.username == username,
            Profile.user_id != profile.user_id,
        ).first()
        if taken:
            raise HTTPException(status_code=409, detail="이미 사용 중인 사용자명입니다.")
    for k, v in payload.items():
        setattr(profile, k, v)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="이미 사용 중인 사용자명입니다.")
    db.refresh(profile)
    return profile


def bump_state_version(db: Session, user_ids: Iterable[int]) -> int:
    """Advance the snapshot version of each user inside the caller's transaction."""
    ids = sorted({int(uid) for uid in user_ids if uid is not None})
    if not ids:
        return 0
    return DataGateway(db).update(
        "profiles",
        {"user_id": ids},
        {"state_version": Profile.state_version + 1},
    )


def get_viewer_sets(db: Session, user_id: int):
    applied = {
        row[0]
        for row in db.query(ProjectApplication.project_id)
        .filter(
            ProjectApplication.applicant_id == user_id,
            ProjectApplication.status == c.APPLICATION_PENDING,
        )
        .all()
    }
    member = {
        row[0]
        for row in db.query(ProjectMember.project_id)
        .filter(
            ProjectMember.user_id == user_id,
            ProjectMember.status == c.MEMBER_ACTIVE,
        )
        .all()
    }
    return applied, member


def get_snapshot(db: Session, current_user: User) -> ViewerSnapshotOut:
    profile = get_profile(db, current_user.user_id)
    applied, member = get_viewer_sets(db, current_user.user_id)
    return ViewerSnapshotOut(
        user_id=current_user.user_id,
        state_version=int(profile.state_version or 0),
        applied_project_ids=sorted(applied),
        member_project_ids=sorted(member),
    )
