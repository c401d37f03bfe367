import logging
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from judging.core.exceptions import StoreError
from judging.crud import rankings as rankings_crud
from judging.crud import reviews as reviews_crud
from judging.schemas.ranking import RankingEntry
from judging.schemas.review import ScoreRecord

logger = logging.getLogger(__name__)


class ScoreStore(ABC):
    """Durable per-submission rating/feedback storage for one judge."""

    @abstractmethod
    async def upsert_review(self, submission_id: str, rating: Optional[int], feedback: str) -> ScoreRecord:
        """Full overwrite of the score record. Raises StoreError on failure."""


class RankingStore(ABC):
    """Durable per-category, per-judge top-3 storage."""

    @abstractmethod
    async def get_rankings(self, category_id: str, judge_id: str) -> List[RankingEntry]:
        ...

    @abstractmethod
    async def save_rankings(self, category_id: str, judge_id: str, entries: Sequence[RankingEntry]) -> None:
        """Atomically replace the stored assignment. Raises StoreError on failure."""


class DatabaseScoreStore(ScoreStore):
    def __init__(self, session_factory: Callable[[], Session], judge_id: str):
        self.session_factory = session_factory
        self.judge_id = judge_id

    async def upsert_review(self, submission_id, rating, feedback):
        db = self.session_factory()
        try:
            review = reviews_crud.upsert_review(db, submission_id, self.judge_id, rating, feedback)
            return ScoreRecord(
                submission_id=review.submission_id,
                rating=review.rating,
                feedback=review.feedback or "",
            )
        except SQLAlchemyError as e:
            logger.error(f"Review upsert failed for submission {submission_id}: {str(e)}")
            raise StoreError(f"Could not save review: {str(e)}") from e
        finally:
            db.close()


class DatabaseRankingStore(RankingStore):
    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    async def get_rankings(self, category_id, judge_id):
        db = self.session_factory()
        try:
            return rankings_crud.get_rankings(db, category_id, judge_id)
        except SQLAlchemyError as e:
            logger.error(f"Loading rankings failed for category {category_id}: {str(e)}")
            raise StoreError(f"Could not load rankings: {str(e)}") from e
        finally:
            db.close()

    async def save_rankings(self, category_id, judge_id, entries):
        db = self.session_factory()
        try:
            rankings_crud.save_rankings(db, category_id, judge_id, entries)
        except SQLAlchemyError as e:
            logger.error(f"Saving rankings failed for category {category_id}: {str(e)}")
            raise StoreError(f"Could not save rankings: {str(e)}") from e
        finally:
            db.close()
