"""Project Service 도메인 서비스 레이어입니다. 비즈니스 규칙과 데이터 접근 흐름을 캡슐화합니다."""

import logging
from typing import List, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from teamswap import constants as c
from teamswap import workflow
from teamswap.config import settings
from teamswap.models.project import Project, ProjectMember
from teamswap.models.user import Profile, User
from teamswap.schemas.project import ProjectCreate
from teamswap.services import notification_service, profile_service
from teamswap.utils.composition import filter_projects, project_badges, project_stats
from teamswap.utils.permissions import can_manage_project

logger = logging.getLogger(__name__)


def _attach_badges(db: Session, projects: List[Project], viewer: Optional[User]) -> List[Project]:
    if viewer is None:
        return projects
    applied, member = profile_service.get_viewer_sets(db, viewer.user_id)
    for p in projects:
        badges = project_badges(p, viewer.user_id, applied, member)
        p._is_owner = badges["is_owner"]
        p._is_member = badges["is_member"]
        p._is_applied = badges["is_applied"]
        # 모집 중(active) 과제에만 지원 버튼을 노출한다.
        p._can_apply = badges["can_apply"] and p.status == c.PROJECT_ACTIVE
    return projects


def list_projects(
    db: Session,
    viewer: Optional[User],
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Project]:
    projects = (
        db.query(Project)
        .filter(Project.status == c.PROJECT_ACTIVE)
        .order_by(Project.created_at.desc(), Project.project_id.desc())
        .all()
    )
    return _attach_badges(db, filter_projects(projects, search, category), viewer)


def discover_projects(
    db: Session,
    viewer: Optional[User],
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> List[Project]:
    projects = (
        db.query(Project)
        .filter(Project.status == c.PROJECT_ACTIVE)
        .order_by(Project.views_count.desc(), Project.project_id.desc())
        .limit(settings.DISCOVER_LIMIT)
        .all()
    )
    return _attach_badges(db, filter_projects(projects, search, category), viewer)


def discover_stats(db: Session, search: Optional[str] = None, category: Optional[str] = None) -> dict:
    return project_stats(discover_projects(db, None, search, category))


def get_project(db: Session, project_id: int, viewer: Optional[User] = None, count_view: bool = False) -> Project:
    project = db.query(Project).filter(Project.project_id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="과제를 찾을 수 없습니다.")
    if count_view:
        db.query(Project).filter(Project.project_id == project_id).update(
            {"views_count": Project.views_count + 1},
            synchronize_session=False,
        )
        db.commit()
        db.refresh(project)
    return _attach_badges(db, [project], viewer)[0]


def create_project(db: Session, data: ProjectCreate, current_user: User) -> Project:
    # 과제와 생성자 멤버십은 하나의 트랜잭션으로 기록한다.
    project = Project(
        creator_id=current_user.user_id,
        status=c.PROJECT_ACTIVE,
        member_count=1,
        **data.model_dump(),
    )
    db.add(project)
    db.flush()
    db.add(ProjectMember(
        project_id=project.project_id,
        user_id=current_user.user_id,
        role=c.ROLE_CREATOR,
        status=c.MEMBER_ACTIVE,
        skills_contributing=[],
    ))
    profile_service.bump_state_version(db, [current_user.user_id])
    db.commit()
    db.refresh(project)
    logger.info("[project] created project_id=%s by user_id=%s", project.project_id, current_user.user_id)
    return _attach_badges(db, [project], current_user)[0]


def change_status(db: Session, project_id: int, new_status: str, current_user: User) -> Project:
    project = get_project(db, project_id)
    if not can_manage_project(project, current_user):
        raise HTTPException(status_code=403, detail="과제 생성자만 상태를 변경할 수 있습니다.")
    old_status = project.status
    ok, reason = workflow.check_project_status_change(old_status, new_status)
    if not ok:
        logger.warning(
            "[project] rejected status change project_id=%s from=%s to=%s: %s",
            project_id, old_status, new_status, reason,
        )
        raise HTTPException(status_code=409, detail=reason)

    project.status = new_status
    member_ids = [
        row[0]
        for row in db.query(ProjectMember.user_id)
        .filter(ProjectMember.project_id == project_id, ProjectMember.status == c.MEMBER_ACTIVE)
        .all()
    ]
    if new_status == c.PROJECT_COMPLETED and member_ids:
        db.query(Profile).filter(Profile.user_id.in_(member_ids)).update(
            {"projects_completed": Profile.projects_completed + 1},
            synchronize_session=False,
        )
    for user_id in member_ids:
        if user_id == current_user.user_id:
            continue
        notification_service.add_notification(
            db,
            user_id,
            c.NOTI_PROJECT_UPDATE,
            "과제 상태 변경",
            f"'{project.title}' 과제 상태가 '{new_status}'(으)로 변경되었습니다.",
            related_id=project_id,
        )
    db.commit()
    db.refresh(project)
    logger.info(
        "[project] status project_id=%s from=%s to=%s actor=%s",
        project_id, old_status, new_status, current_user.user_id,
    )
    return _attach_badges(db, [project], current_user)[0]
