"""Project 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import (
    Column, Integer, String, Text, DateTime, Boolean, JSON, ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from teamswap.database import Base


class Project(Base):
    __tablename__ = "projects"

    project_id = Column(Integer, primary_key=True, autoincrement=True)
    creator_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(50), nullable=False)
    required_skills = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)
    status = Column(String(20), nullable=False, default="active")  # active/completed/paused/cancelled
    max_members = Column(Integer, nullable=False, default=5)
    # 활성 멤버 수. 멤버십 변경과 같은 트랜잭션에서 갱신된다.
    member_count = Column(Integer, nullable=False, default=0)
    difficulty_level = Column(String(20), nullable=False, default="intermediate")
    estimated_duration = Column(String(100))
    project_type = Column(String(20), nullable=False, default="open_source")
    repository_url = Column(String(500))
    demo_url = Column(String(500))
    is_featured = Column(Boolean, nullable=False, default=False)
    views_count = Column(Integer, nullable=False, default=0)
    applications_count = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    creator = relationship("User")
    members = relationship("ProjectMember", back_populates="project", cascade="all, delete-orphan")
    applications = relationship("ProjectApplication", back_populates="project", cascade="all, delete-orphan")

    __table_args__ = (
        Index("idx_project_status_created", "status", "created_at"),
        Index("idx_project_creator", "creator_id"),
    )

    @property
    def creator_username(self):
        profile = self.creator.profile if self.creator else None
        return profile.username if profile else None

    @property
    def is_owner(self):
        return bool(getattr(self, "_is_owner", False))

    @property
    def is_member(self):
        return bool(getattr(self, "_is_member", False))

    @property
    def is_applied(self):
        return bool(getattr(self, "_is_applied", False))

    @property
    def can_apply(self):
        return bool(getattr(self, "_can_apply", False))


class ProjectMember(Base):
    __tablename__ = "project_members"

    member_id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.project_id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    role = Column(String(20), nullable=False, default="member")  # creator/admin/member
    status = Column(String(20), nullable=False, default="active")  # active/left/removed
    skills_contributing = Column(JSON, nullable=False, default=list)
    contribution_level = Column(String(20), nullable=False, default="regular")
    joined_at = Column(DateTime, server_default=func.now())
    left_at = Column(DateTime)

    project = relationship("Project", back_populates="members")
    user = relationship("User", back_populates="project_memberships")

    __table_args__ = (
        # 재참여 시 기존 행을 다시 활성화하므로 (project, user) 쌍은 항상 하나다.
        UniqueConstraint("project_id", "user_id", name="uq_project_member"),
        Index("idx_member_user_status", "user_id", "status"),
    )

    @property
    def username(self):
        profile = self.user.profile if self.user else None
        return profile.username if profile else None

    @property
    def full_name(self):
        profile = self.user.profile if self.user else None
        return profile.full_name if profile else None

    @property
    def rating(self):
        profile = self.user.profile if self.user else None
        return profile.rating if profile else 0.0
