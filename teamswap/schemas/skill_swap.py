"""SkillSwap 요청/응답 계약을 위한 Pydantic 스키마입니다."""

from pydantic import BaseModel, Field, field_validator
from typing import Literal, Optional
from datetime import datetime

from teamswap.constants import MAX_SESSION_MINUTES, MIN_SESSION_MINUTES


class SkillSwapCreate(BaseModel):
    offered_skill: str
    requested_skill: str
    message: Optional[str] = None
    session_duration: int = Field(default=60, ge=MIN_SESSION_MINUTES, le=MAX_SESSION_MINUTES)
    session_time: Optional[datetime] = None
    meeting_link: Optional[str] = None
    swap_type: Literal["one_time", "recurring", "mentorship"] = "one_time"

    @field_validator("offered_skill", "requested_skill")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("필수 항목입니다.")
        return text


class SkillSwapRating(BaseModel):
    rating: int = Field(ge=1, le=5)
    feedback: Optional[str] = None


class SkillSwapOut(BaseModel):
    swap_id: int
    requester_id: int
    requester_username: Optional[str] = None
    responder_id: Optional[int] = None
    responder_username: Optional[str] = None
    offered_skill: str
    requested_skill: str
    message: Optional[str] = None
    session_duration: int
    session_time: Optional[datetime] = None
    meeting_link: Optional[str] = None
    status: str
    swap_type: str
    requester_rating: Optional[int] = None
    responder_rating: Optional[int] = None
    requester_feedback: Optional[str] = None
    responder_feedback: Optional[str] = None
    is_requester: bool = False
    is_responder: bool = False
    can_respond: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class SkillSwapStatsOut(BaseModel):
    total: int
    accepted: int
    mentorship: int
