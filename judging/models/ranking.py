from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, UniqueConstraint, CheckConstraint
from datetime import datetime, timezone
import uuid
from judging.db.base import Base

class Ranking(Base):
    __tablename__ = "rankings"
    __table_args__ = (
        UniqueConstraint("category_id", "judge_id", "rank", name="uq_ranking_rank"),
        UniqueConstraint("category_id", "judge_id", "submission_id", name="uq_ranking_submission"),
        CheckConstraint("rank BETWEEN 1 AND 3", name="ck_ranking_rank_range"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False)
    judge_id = Column(String(36), nullable=False)
    rank = Column(Integer, nullable=False)
    submission_id = Column(String(36), ForeignKey("submissions.id"), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
