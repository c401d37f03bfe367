from sqlalchemy.orm import Session
from typing import List, Sequence

from judging.models.category import Category
from judging.models.ranking import Ranking
from judging.schemas.ranking import RankingEntry

def get_rankings(db: Session, category_id: str, judge_id: str) -> List[RankingEntry]:
    rows = (
        db.query(Ranking)
        .filter(Ranking.category_id == category_id, Ranking.judge_id == judge_id)
        .order_by(Ranking.rank.asc())
        .all()
    )
    return [RankingEntry(rank=row.rank, submission_id=row.submission_id) for row in rows]

def save_rankings(db: Session, category_id: str, judge_id: str, entries: Sequence[RankingEntry]) -> List[RankingEntry]:
    """
    Replace the judge's rankings for a category

    The delete and the inserts share one transaction, so readers see either
    the old assignment or the new one, never a mix.
    """
    try:
        db.query(Ranking).filter(
            Ranking.category_id == category_id,
            Ranking.judge_id == judge_id
        ).delete(synchronize_session=False)
        db.flush()
        for entry in entries:
            db.add(Ranking(
                category_id=category_id,
                judge_id=judge_id,
                rank=entry.rank,
                submission_id=entry.submission_id
            ))
        db.commit()
    except Exception as e:
        db.rollback()
        raise e
    return get_rankings(db, category_id, judge_id)

def get_category(db: Session, category_id: str):
    return db.query(Category).filter(Category.id == category_id).first()
