"""Permissions 관련 공용 유틸리티 헬퍼입니다. 행위자가 해당 작업을 할 수 있는 사람인지만 판단합니다."""

from typing import Optional

from sqlalchemy.orm import Session

from teamswap import constants as c
from teamswap.models.application import ProjectApplication
from teamswap.models.project import Project, ProjectMember
from teamswap.models.skill_swap import SkillSwap
from teamswap.models.user import User


def is_project_owner(project: Project, user: User) -> bool:
    return project.creator_id == user.user_id


def get_active_membership(db: Session, project_id: int, user_id: int) -> Optional[ProjectMember]:
    return db.query(ProjectMember).filter(
        ProjectMember.project_id == project_id,
        ProjectMember.user_id == user_id,
        ProjectMember.status == c.MEMBER_ACTIVE,
    ).first()


def is_project_member(db: Session, project_id: int, user_id: int) -> bool:
    return get_active_membership(db, project_id, user_id) is not None


def can_apply_as(project: Project, user: User) -> bool:
    return not is_project_owner(project, user)


def can_review_application(project: Project, user: User) -> bool:
    return is_project_owner(project, user)


def can_view_applications(project: Project, user: User) -> bool:
    return is_project_owner(project, user)


def can_withdraw_application(application: ProjectApplication, user: User) -> bool:
    return application.applicant_id == user.user_id


def can_manage_project(project: Project, user: User) -> bool:
    return is_project_owner(project, user)


def is_swap_participant(swap: SkillSwap, user: User) -> bool:
    return user.user_id in (swap.requester_id, swap.responder_id)


def can_respond_to_swap(swap: SkillSwap, user: User) -> bool:
    return swap.requester_id != user.user_id and swap.responder_id != user.user_id


def can_cancel_swap(swap: SkillSwap, user: User) -> bool:
    return swap.requester_id == user.user_id


def can_complete_swap(swap: SkillSwap, user: User) -> bool:
    return is_swap_participant(swap, user)
