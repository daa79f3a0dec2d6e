"""ProjectApplication 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field, field_validator
from typing import List, Literal, Optional
from datetime import datetime

from teamswap.utils.composition import normalize_skills


class ApplicationCreate(BaseModel):
    message: Optional[str] = None
    skills_offered: List[str] = Field(default_factory=list)
    experience_level: Literal["beginner", "intermediate", "advanced"] = "intermediate"
    availability: Optional[str] = None
    portfolio_url: Optional[str] = None

    @field_validator("skills_offered")
    @classmethod
    def _normalize(cls, value: List[str]) -> List[str]:
        return normalize_skills(value)


class ApplicationReview(BaseModel):
    decision: Literal["accepted", "rejected"]
    review_message: Optional[str] = None


class ApplicationOut(BaseModel):
    application_id: int
    project_id: int
    project_title: Optional[str] = None
    applicant_id: int
    applicant_username: Optional[str] = None
    applicant_rating: float = 0.0
    message: Optional[str] = None
    skills_offered: List[str] = Field(default_factory=list)
    experience_level: str
    availability: Optional[str] = None
    portfolio_url: Optional[str] = None
    status: str
    reviewed_by: Optional[int] = None
    review_message: Optional[str] = None
    created_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
