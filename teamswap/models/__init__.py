"""SQLAlchemy 모델 패키지 초기화 모듈입니다."""

from teamswap.models.user import User, Profile
from teamswap.models.project import Project, ProjectMember
from teamswap.models.application import ProjectApplication
from teamswap.models.skill_swap import SkillSwap
from teamswap.models.notification import Notification

__all__ = [
    "User", "Profile",
    "Project", "ProjectMember",
    "ProjectApplication",
    "SkillSwap",
    "Notification",
]
