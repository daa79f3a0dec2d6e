"""SkillSwap 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from teamswap.database import Base


class SkillSwap(Base):
    __tablename__ = "skill_swaps"

    swap_id = Column(Integer, primary_key=True, autoincrement=True)
    requester_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    # pending -> accepted 전이 시점에 한 번만 채워진다.
    responder_id = Column(Integer, ForeignKey("users.user_id"))
    offered_skill = Column(String(100), nullable=False)
    requested_skill = Column(String(100), nullable=False)
    message = Column(Text)
    session_duration = Column(Integer, nullable=False, default=60)  # minutes
    session_time = Column(DateTime)
    meeting_link = Column(String(500))
    status = Column(String(20), nullable=False, default="pending")
    # pending/accepted/rejected/completed/cancelled
    swap_type = Column(String(20), nullable=False, default="one_time")  # one_time/recurring/mentorship
    requester_rating = Column(Integer)
    responder_rating = Column(Integer)
    requester_feedback = Column(Text)
    responder_feedback = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
    completed_at = Column(DateTime)

    requester = relationship("User", foreign_keys=[requester_id])
    responder = relationship("User", foreign_keys=[responder_id])

    __table_args__ = (
        Index("idx_swap_status_created", "status", "created_at"),
        Index("idx_swap_requester", "requester_id"),
    )

    @property
    def requester_username(self):
        profile = self.requester.profile if self.requester else None
        return profile.username if profile else None

    @property
    def responder_username(self):
        profile = self.responder.profile if self.responder else None
        return profile.username if profile else None

    @property
    def is_requester(self):
        return bool(getattr(self, "_is_requester", False))

    @property
    def is_responder(self):
        return bool(getattr(self, "_is_responder", False))

    @property
    def can_respond(self):
        return bool(getattr(self, "_can_respond", False))
