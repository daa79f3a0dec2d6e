"""User/Profile 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from teamswap.config import settings
from teamswap.utils.composition import normalize_skills


class SignUpRequest(BaseModel):
    email: str
    password: str
    username: str
    full_name: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _check_email(cls, value: str) -> str:
        text = value.strip()
        if "@" not in text or text.startswith("@") or text.endswith("@"):
            raise ValueError("올바른 이메일 형식이 아닙니다.")
        return text

    @field_validator("username")
    @classmethod
    def _check_username(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("Username is required")
        return text

    @field_validator("password")
    @classmethod
    def _check_password(cls, value: str) -> str:
        if len(value) < settings.PASSWORD_MIN_LENGTH:
            raise ValueError(f"비밀번호는 {settings.PASSWORD_MIN_LENGTH}자 이상이어야 합니다.")
        return value


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileBase(BaseModel):
    username: str
    full_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    skills_offered: List[str] = Field(default_factory=list)
    skills_learning: List[str] = Field(default_factory=list)
    location: Optional[str] = None
    website: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None


class ProfileUpdate(BaseModel):
    # rating/카운터는 파생 값이라 요청으로 받지 않는다.
    username: Optional[str] = None
    full_name: Optional[str] = None
    bio: Optional[str] = None
    avatar_url: Optional[str] = None
    skills_offered: Optional[List[str]] = None
    skills_learning: Optional[List[str]] = None
    location: Optional[str] = None
    website: Optional[str] = None
    github_url: Optional[str] = None
    linkedin_url: Optional[str] = None

    @field_validator("username")
    @classmethod
    def _check_username(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        text = value.strip()
        if not text:
            raise ValueError("Username is required")
        return text

    @field_validator("skills_offered", "skills_learning")
    @classmethod
    def _normalize(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return None if value is None else normalize_skills(value)


class ProfileOut(ProfileBase):
    user_id: int
    rating: float
    total_ratings: int
    projects_completed: int
    skills_taught: int
    skills_learned: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class IdentityOut(BaseModel):
    user_id: int
    email: str
    is_active: bool
    profile: ProfileOut

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: IdentityOut


class ViewerSnapshotOut(BaseModel):
    user_id: int
    state_version: int
    applied_project_ids: List[int]
    member_project_ids: List[int]
