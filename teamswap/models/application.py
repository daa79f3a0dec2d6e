"""ProjectApplication 도메인의 SQLAlchemy 모델 정의입니다."""

from sqlalchemy import Column, Integer, String, Text, DateTime, JSON, ForeignKey, Index, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from teamswap.database import Base


class ProjectApplication(Base):
    __tablename__ = "project_applications"

    application_id = Column(Integer, primary_key=True, autoincrement=True)
    project_id = Column(Integer, ForeignKey("projects.project_id"), nullable=False)
    applicant_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    message = Column(Text)
    skills_offered = Column(JSON, nullable=False, default=list)
    experience_level = Column(String(20), nullable=False, default="intermediate")
    availability = Column(String(200))
    portfolio_url = Column(String(500))
    status = Column(String(20), nullable=False, default="pending")  # pending/accepted/rejected/withdrawn
    reviewed_by = Column(Integer, ForeignKey("users.user_id"))
    review_message = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    reviewed_at = Column(DateTime)

    project = relationship("Project", back_populates="applications")
    applicant = relationship("User", foreign_keys=[applicant_id])

    __table_args__ = (
        # (project, applicant) 당 pending 지원서는 하나만 허용한다.
        Index(
            "uq_application_pending",
            "project_id",
            "applicant_id",
            unique=True,
            sqlite_where=text("status = 'pending'"),
            postgresql_where=text("status = 'pending'"),
        ),
        Index("idx_application_applicant", "applicant_id", "status"),
    )

    @property
    def applicant_username(self):
        profile = self.applicant.profile if self.applicant else None
        return profile.username if profile else None

    @property
    def applicant_rating(self):
        profile = self.applicant.profile if self.applicant else None
        return profile.rating if profile else 0.0

    @property
    def project_title(self):
        return self.project.title if self.project else None
