from sqlalchemy import Column, Integer, String, ForeignKey, Text, DateTime, UniqueConstraint, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid
from judging.db.base import Base

class Review(Base):
    """One judge's score record for one submission."""
    __tablename__ = "reviews"
    __table_args__ = (
        UniqueConstraint("submission_id", "judge_id", name="uq_review_submission_judge"),
        CheckConstraint("rating IS NULL OR (rating BETWEEN 1 AND 10)", name="ck_review_rating_range"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    submission_id = Column(String(36), ForeignKey("submissions.id"), nullable=False)
    judge_id = Column(String(36), nullable=False, index=True)
    rating = Column(Integer, nullable=True)
    feedback = Column(Text, nullable=True)
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    submission = relationship("Submission", back_populates="reviews")
