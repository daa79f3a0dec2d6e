"""User(인증 주체)와 Profile 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from teamswap.database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(200), nullable=False)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    profile = relationship("Profile", back_populates="user", uselist=False, cascade="all, delete-orphan")
    project_memberships = relationship("ProjectMember", back_populates="user")
    notifications = relationship("Notification", back_populates="user")


class Profile(Base):
    __tablename__ = "profiles"

    # profile id == 인증 주체 id
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), primary_key=True)
    username = Column(String(50), unique=True, nullable=False)
    full_name = Column(String(100))
    bio = Column(Text)
    avatar_url = Column(String(500))
    skills_offered = Column(JSON, nullable=False, default=list)
    skills_learning = Column(JSON, nullable=False, default=list)
    location = Column(String(100))
    website = Column(String(500))
    github_url = Column(String(500))
    linkedin_url = Column(String(500))
    # 아래 값들은 파생 집계이며 본인이 직접 수정할 수 없다.
    rating = Column(Float, nullable=False, default=0.0)
    total_ratings = Column(Integer, nullable=False, default=0)
    projects_completed = Column(Integer, nullable=False, default=0)
    skills_taught = Column(Integer, nullable=False, default=0)
    skills_learned = Column(Integer, nullable=False, default=0)
    # 멤버십/지원 상태가 바뀔 때마다 증가하는 뷰 스냅샷 버전
    state_version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    user = relationship("User", back_populates="profile")
