"""Application Service 도메인 서비스 레이어입니다.

지원 → 소유자 검토 → 수락 시 자동 멤버 등록 흐름을 담당합니다. 수락 처리에서
지원서 상태 변경, 멤버십 생성, member_count 증가, 알림 기록은 하나의 트랜잭션으로
commit 되며 어느 단계든 실패하면 전체가 롤백된다.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teamswap import constants as c
from teamswap import workflow
from teamswap.gateway import DataGateway
from teamswap.models.application import ProjectApplication
from teamswap.models.project import Project
from teamswap.models.user import User
from teamswap.schemas.application import ApplicationCreate
from teamswap.services import membership_service, notification_service, profile_service
from teamswap.utils.permissions import (
    can_apply_as,
    can_review_application,
    can_view_applications,
    can_withdraw_application,
    is_project_member,
)

logger = logging.getLogger(__name__)


def _get_project_or_404(db: Session, project_id: int) -> Project:
    project = db.query(Project).filter(Project.project_id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="과제를 찾을 수 없습니다.")
    return project


def get_application(db: Session, application_id: int) -> ProjectApplication:
    application = (
        db.query(ProjectApplication)
        .filter(ProjectApplication.application_id == application_id)
        .first()
    )
    if not application:
        raise HTTPException(status_code=404, detail="지원서를 찾을 수 없습니다.")
    return application


def _has_application(db: Session, project_id: int, user_id: int, status: str) -> bool:
    return DataGateway(db).count(
        "project_applications",
        {"project_id": project_id, "applicant_id": user_id, "status": status},
    ) > 0


def apply(db: Session, project_id: int, data: ApplicationCreate, current_user: User) -> ProjectApplication:
    project = _get_project_or_404(db, project_id)
    if not can_apply_as(project, current_user):
        raise HTTPException(status_code=403, detail="본인이 만든 과제에는 지원할 수 없습니다.")

    ok, reason = workflow.check_apply(
        project.status,
        project.member_count,
        project.max_members,
        is_member=is_project_member(db, project_id, current_user.user_id),
        has_pending=_has_application(db, project_id, current_user.user_id, c.APPLICATION_PENDING),
        was_rejected=_has_application(db, project_id, current_user.user_id, c.APPLICATION_REJECTED),
    )
    if not ok:
        raise HTTPException(status_code=409, detail=reason)

    application = ProjectApplication(
        project_id=project_id,
        applicant_id=current_user.user_id,
        status=c.APPLICATION_PENDING,
        **data.model_dump(),
    )
    db.add(application)
    db.query(Project).filter(Project.project_id == project_id).update(
        {"applications_count": Project.applications_count + 1},
        synchronize_session=False,
    )
    try:
        db.flush()
    except IntegrityError:
        # 동시에 들어온 두 번째 pending 지원은 저장소의 유니크 인덱스가 거절한다.
        db.rollback()
        logger.warning(
            "[application] duplicate pending application rejected project_id=%s user_id=%s",
            project_id, current_user.user_id,
        )
        raise HTTPException(status_code=409, detail="이미 지원한 과제입니다.")

    notification_service.add_notification(
        db,
        project.creator_id,
        c.NOTI_PROJECT_APPLICATION,
        "새 지원서",
        f"'{project.title}' 과제에 새로운 지원서가 도착했습니다.",
        related_id=application.application_id,
    )
    profile_service.bump_state_version(db, [current_user.user_id])
    db.commit()
    db.refresh(application)
    logger.info(
        "[application] applied application_id=%s project_id=%s user_id=%s",
        application.application_id, project_id, current_user.user_id,
    )
    return application


def list_for_project(
    db: Session,
    project_id: int,
    current_user: User,
    status: Optional[str] = c.APPLICATION_PENDING,
) -> List[ProjectApplication]:
    project = _get_project_or_404(db, project_id)
    if not can_view_applications(project, current_user):
        raise HTTPException(status_code=403, detail="과제 생성자만 지원서를 볼 수 있습니다.")
    q = db.query(ProjectApplication).filter(ProjectApplication.project_id == project_id)
    if status:
        q = q.filter(ProjectApplication.status == status)
    return q.order_by(ProjectApplication.created_at.asc(), ProjectApplication.application_id.asc()).all()


def list_mine(db: Session, current_user: User, status: Optional[str] = None) -> List[ProjectApplication]:
    q = db.query(ProjectApplication).filter(ProjectApplication.applicant_id == current_user.user_id)
    if status:
        q = q.filter(ProjectApplication.status == status)
    return q.order_by(ProjectApplication.created_at.desc(), ProjectApplication.application_id.desc()).all()


def review(
    db: Session,
    application_id: int,
    decision: str,
    current_user: User,
    review_message: Optional[str] = None,
) -> ProjectApplication:
    application = get_application(db, application_id)
    project = _get_project_or_404(db, application.project_id)
    if not can_review_application(project, current_user):
        raise HTTPException(status_code=403, detail="과제 생성자만 지원서를 검토할 수 있습니다.")

    if workflow.is_repeat_accept(application.status, decision):
        logger.info("[application] repeat accept ignored application_id=%s", application_id)
        return application

    outcome, reason = workflow.decide_review(application.status, decision)
    if outcome is None:
        raise HTTPException(status_code=409, detail=reason)
    if outcome.creates_membership:
        ok, reason = workflow.check_accept_into(project.status)
        if not ok:
            logger.warning(
                "[application] accept refused application_id=%s project_status=%s",
                application_id, project.status,
            )
            raise HTTPException(status_code=409, detail=reason)

    gateway = DataGateway(db)
    try:
        updated = gateway.update(
            "project_applications",
            {"application_id": application_id, "status": c.APPLICATION_PENDING},
            {
                "status": outcome.next_status,
                "reviewed_by": current_user.user_id,
                "reviewed_at": datetime.utcnow(),
                "review_message": review_message,
            },
        )
        if updated != 1:
            raise HTTPException(status_code=409, detail="이미 처리된 지원서입니다.")

        if outcome.creates_membership:
            membership_service.enroll(
                db,
                project.project_id,
                application.applicant_id,
                role=c.ROLE_MEMBER,
                skills_contributing=application.skills_offered,
            )
        else:
            profile_service.bump_state_version(db, [application.applicant_id])

        accepted = outcome.next_status == c.APPLICATION_ACCEPTED
        notification_service.add_notification(
            db,
            application.applicant_id,
            outcome.noti_type,
            "지원 수락" if accepted else "지원 거절",
            f"'{project.title}' 과제 지원이 {'수락' if accepted else '거절'}되었습니다.",
            related_id=project.project_id,
        )
        db.commit()
    except HTTPException as exc:
        db.rollback()
        logger.warning(
            "[application] review rolled back application_id=%s decision=%s: %s",
            application_id, decision, exc.detail,
        )
        raise
    except IntegrityError:
        # 같은 멤버십을 동시에 만들려던 두 번째 검토는 유니크 제약에 걸린다.
        db.rollback()
        logger.warning(
            "[application] review rolled back on integrity error application_id=%s", application_id,
        )
        raise HTTPException(status_code=409, detail="이미 처리된 지원서입니다.")

    db.refresh(application)
    logger.info(
        "[application] reviewed application_id=%s decision=%s reviewer=%s",
        application_id, outcome.next_status, current_user.user_id,
    )
    return application


def withdraw(db: Session, application_id: int, current_user: User) -> ProjectApplication:
    application = get_application(db, application_id)
    if not can_withdraw_application(application, current_user):
        raise HTTPException(status_code=403, detail="본인 지원서만 철회할 수 있습니다.")
    ok, reason = workflow.check_withdraw(application.status)
    if not ok:
        raise HTTPException(status_code=409, detail=reason)

    updated = DataGateway(db).update(
        "project_applications",
        {"application_id": application_id, "status": c.APPLICATION_PENDING},
        {"status": c.APPLICATION_WITHDRAWN},
    )
    if updated != 1:
        db.rollback()
        raise HTTPException(status_code=409, detail="이미 처리된 지원서입니다.")
    profile_service.bump_state_version(db, [current_user.user_id])
    db.commit()
    db.refresh(application)
    logger.info("[application] withdrawn application_id=%s", application_id)
    return application
