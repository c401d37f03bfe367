from sqlalchemy.orm import Session

from judging.db.base import Base
from judging.models import category, ranking, review, submission  # noqa: F401  register tables

def init_db(db: Session) -> None:
    """Create the review and ranking tables if they don't exist"""
    Base.metadata.create_all(bind=db.get_bind())
