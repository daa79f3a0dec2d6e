"""Membership Service 도메인 서비스 레이어입니다.

과제 멤버십 생성/이탈/제거와 과제의 활성 멤버 수(member_count) 유지를 담당합니다.
member_count 는 멤버십 변경과 같은 트랜잭션 안에서 조건부 UPDATE 로만 바뀌므로
정원 검사와 좌석 확보가 하나의 쓰기로 처리된다.
"""

import logging
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from teamswap import constants as c
from teamswap import workflow
from teamswap.gateway import DataGateway
from teamswap.models.application import ProjectApplication
from teamswap.models.project import Project, ProjectMember
from teamswap.models.user import User
from teamswap.services import notification_service, profile_service
from teamswap.utils.permissions import can_manage_project

logger = logging.getLogger(__name__)


def _get_project_or_404(db: Session, project_id: int) -> Project:
    project = db.query(Project).filter(Project.project_id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="과제를 찾을 수 없습니다.")
    return project


def claim_seat(db: Session, project_id: int) -> bool:
    """Increment ``member_count`` only while it is below ``max_members``."""
    db.flush()
    claimed = (
        db.query(Project)
        .filter(Project.project_id == project_id, Project.member_count < Project.max_members)
        .update({"member_count": Project.member_count + 1}, synchronize_session=False)
    )
    db.expire_all()
    return claimed == 1


def release_seat(db: Session, project_id: int) -> bool:
    db.flush()
    released = (
        db.query(Project)
        .filter(Project.project_id == project_id, Project.member_count > 0)
        .update({"member_count": Project.member_count - 1}, synchronize_session=False)
    )
    db.expire_all()
    return released == 1


def enroll(
    db: Session,
    project_id: int,
    user_id: int,
    role: str = c.ROLE_MEMBER,
    skills_contributing: Optional[Iterable[str]] = None,
) -> ProjectMember:
    """Create (or reactivate) an active membership inside the caller's transaction.

    Raises 409 when the user is already an active member or the project is full.
    Does not commit.
    """
    existing = db.query(ProjectMember).filter(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == user_id,
    ).first()
    if existing and existing.status == c.MEMBER_ACTIVE:
        raise HTTPException(status_code=409, detail="이미 과제 멤버입니다.")
    if not claim_seat(db, project_id):
        raise HTTPException(status_code=409, detail="모집 인원이 가득 찼습니다.")

    skills = list(skills_contributing or [])
    if existing:
        ok, reason = workflow.can_transition(workflow.MEMBER_TRANSITIONS, existing.status, c.MEMBER_ACTIVE)
        if not ok:
            raise HTTPException(status_code=409, detail=reason)
        existing.status = c.MEMBER_ACTIVE
        existing.role = role
        existing.skills_contributing = skills
        existing.joined_at = datetime.utcnow()
        existing.left_at = None
        member = existing
    else:
        member = DataGateway(db).insert(
            "project_members",
            {
                "project_id": project_id,
                "user_id": user_id,
                "role": role,
                "status": c.MEMBER_ACTIVE,
                "skills_contributing": skills,
            },
        )
    profile_service.bump_state_version(db, [user_id])
    return member


def get_members(db: Session, project_id: int) -> List[ProjectMember]:
    _get_project_or_404(db, project_id)
    return (
        db.query(ProjectMember)
        .filter(ProjectMember.project_id == project_id, ProjectMember.status == c.MEMBER_ACTIVE)
        .order_by(ProjectMember.joined_at.asc(), ProjectMember.member_id.asc())
        .all()
    )


def _exit(db: Session, project: Project, member: ProjectMember, new_status: str) -> ProjectMember:
    ok, reason = workflow.check_member_exit(member.role, member.status, new_status)
    if not ok:
        raise HTTPException(status_code=409, detail=reason)
    member.status = new_status
    member.left_at = datetime.utcnow()
    release_seat(db, project.project_id)
    profile_service.bump_state_version(db, [member.user_id])
    return member


def leave_project(db: Session, project_id: int, current_user: User) -> ProjectMember:
    project = _get_project_or_404(db, project_id)
    member = db.query(ProjectMember).filter(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == current_user.user_id,
        ProjectMember.status == c.MEMBER_ACTIVE,
    ).first()
    if not member:
        raise HTTPException(status_code=404, detail="참여 중인 과제가 아닙니다.")
    member = _exit(db, project, member, c.MEMBER_LEFT)
    notification_service.add_notification(
        db,
        project.creator_id,
        c.NOTI_PROJECT_UPDATE,
        "팀원 이탈",
        f"'{project.title}' 과제에서 팀원이 떠났습니다.",
        related_id=project.project_id,
    )
    db.commit()
    db.refresh(member)
    logger.info("[membership] user_id=%s left project_id=%s", current_user.user_id, project_id)
    return member


def remove_member(db: Session, project_id: int, user_id: int, current_user: User) -> ProjectMember:
    project = _get_project_or_404(db, project_id)
    if not can_manage_project(project, current_user):
        raise HTTPException(status_code=403, detail="과제 생성자만 팀원을 제거할 수 있습니다.")
    member = db.query(ProjectMember).filter(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == user_id,
        ProjectMember.status == c.MEMBER_ACTIVE,
    ).first()
    if not member:
        raise HTTPException(status_code=404, detail="멤버를 찾을 수 없습니다.")
    member = _exit(db, project, member, c.MEMBER_REMOVED)
    notification_service.add_notification(
        db,
        user_id,
        c.NOTI_PROJECT_UPDATE,
        "과제에서 제외됨",
        f"'{project.title}' 과제에서 제외되었습니다.",
        related_id=project.project_id,
    )
    db.commit()
    db.refresh(member)
    logger.info("[membership] user_id=%s removed from project_id=%s by owner", user_id, project_id)
    return member


def reconcile(db: Session) -> Dict[str, int]:
    """Repair accepted applications without a membership and recount ``member_count``."""
    report = {"memberships_created": 0, "counters_fixed": 0, "over_capacity": 0}

    accepted = (
        db.query(ProjectApplication)
        .filter(ProjectApplication.status == c.APPLICATION_ACCEPTED)
        .order_by(ProjectApplication.reviewed_at.asc(), ProjectApplication.application_id.asc())
        .all()
    )
    for application in accepted:
        member = db.query(ProjectMember).filter(
            ProjectMember.project_id == application.project_id,
            ProjectMember.user_id == application.applicant_id,
        ).first()
        if member is not None:
            continue
        db.add(ProjectMember(
            project_id=application.project_id,
            user_id=application.applicant_id,
            role=c.ROLE_MEMBER,
            status=c.MEMBER_ACTIVE,
            skills_contributing=list(application.skills_offered or []),
        ))
        profile_service.bump_state_version(db, [application.applicant_id])
        report["memberships_created"] += 1
        logger.warning(
            "[membership] repaired missing membership application_id=%s project_id=%s user_id=%s",
            application.application_id, application.project_id, application.applicant_id,
        )
    db.flush()

    counts = dict(
        db.query(ProjectMember.project_id, func.count(ProjectMember.member_id))
        .filter(ProjectMember.status == c.MEMBER_ACTIVE)
        .group_by(ProjectMember.project_id)
        .all()
    )
    for project in db.query(Project).all():
        actual = int(counts.get(project.project_id, 0))
        if project.member_count != actual:
            logger.warning(
                "[membership] member_count drift project_id=%s stored=%s actual=%s",
                project.project_id, project.member_count, actual,
            )
            project.member_count = actual
            report["counters_fixed"] += 1
        if actual > project.max_members:
            report["over_capacity"] += 1
            logger.warning(
                "[membership] project_id=%s exceeds max_members (%s > %s)",
                project.project_id, actual, project.max_members,
            )
    db.commit()
    return report
