"""Project/Membership 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

from teamswap.constants import DEFAULT_MAX_MEMBERS, MIN_PROJECT_MEMBERS
from teamswap.utils.composition import is_known_category, normalize_skills


class ProjectBase(BaseModel):
    title: str
    description: str
    category: str
    required_skills: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    max_members: int = Field(default=DEFAULT_MAX_MEMBERS, ge=MIN_PROJECT_MEMBERS)
    difficulty_level: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    project_type: Literal["open_source", "startup", "learning", "freelance", "other"] = "open_source"
    estimated_duration: Optional[str] = None
    repository_url: Optional[str] = None
    demo_url: Optional[str] = None


class ProjectCreate(ProjectBase):
    @field_validator("title", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("필수 항목입니다.")
        return text

    @field_validator("category")
    @classmethod
    def _check_category(cls, value: str) -> str:
        if not is_known_category(value):
            raise ValueError(f"알 수 없는 카테고리입니다: {value}")
        return value

    @field_validator("required_skills", "tags")
    @classmethod
    def _normalize(cls, value: List[str]) -> List[str]:
        return normalize_skills(value)

    @field_validator("estimated_duration", "repository_url", "demo_url")
    @classmethod
    def _empty_to_none(cls, value: Optional[str]) -> Optional[str]:
        text = (value or "").strip()
        return text or None


class ProjectStatusUpdate(BaseModel):
    status: Literal["active", "completed", "paused", "cancelled"]


class ProjectOut(ProjectBase):
    project_id: int
    creator_id: int
    creator_username: Optional[str] = None
    status: str
    member_count: int
    is_featured: bool
    views_count: int
    applications_count: int
    is_owner: bool = False
    is_member: bool = False
    is_applied: bool = False
    can_apply: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProjectMemberOut(BaseModel):
    member_id: int
    project_id: int
    user_id: int
    username: Optional[str] = None
    full_name: Optional[str] = None
    rating: float = 0.0
    role: str
    status: str
    skills_contributing: List[str] = Field(default_factory=list)
    contribution_level: str
    joined_at: Optional[datetime] = None
    left_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class ProjectStatsOut(BaseModel):
    total: int
    active_members: int
    featured: int
