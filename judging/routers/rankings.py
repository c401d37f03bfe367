from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from judging.db.session import get_db
from judging.core.exceptions import JudgingCompletedError, RankingOrderError
from judging.core.security.auth import get_current_judge
from judging.crud import rankings as rankings_crud
from judging.crud import reviews as reviews_crud
from judging.schemas.ranking import CategoryCompletion, RankingEntry, SaveRankingsRequest
from judging.services.ranking_engine import DISQUALIFIED, RANKING_SLOTS, validate_ranking_order
from judging.utils.helpers import compute_progress

router = APIRouter(prefix="/categories", tags=["rankings"])

def _get_category_or_404(db: Session, category_id: str):
    category = rankings_crud.get_category(db, category_id)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )
    return category

@router.get("/{category_id}/rankings", response_model=List[RankingEntry])
async def get_rankings(
    category_id: str,
    judge_id: str = Depends(get_current_judge),
    db: Session = Depends(get_db)
):
    _get_category_or_404(db, category_id)
    return rankings_crud.get_rankings(db, category_id, judge_id)

@router.put("/{category_id}/rankings", response_model=List[RankingEntry])
async def save_rankings(
    category_id: str,
    request: SaveRankingsRequest,
    judge_id: str = Depends(get_current_judge),
    db: Session = Depends(get_db)
):
    category = _get_category_or_404(db, category_id)
    if category.judging_completed_at is not None:
        raise JudgingCompletedError()

    entries = request.rankings
    if len(entries) != RANKING_SLOTS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Exactly three rankings are required"
        )
    if {e.rank for e in entries} != set(range(1, RANKING_SLOTS + 1)):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Each rank from 1 to 3 must be used once"
        )
    if len({e.submission_id for e in entries}) != RANKING_SLOTS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="A submission can only hold one rank"
        )

    submissions = {s.id: s for s in reviews_crud.get_submissions_for_review(db, category_id, judge_id)}
    if any(e.submission_id not in submissions for e in entries):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Rankings can only include submissions from this category"
        )
    if any(submissions[e.submission_id].status == DISQUALIFIED for e in entries):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Disqualified submissions cannot be ranked"
        )
    ordered = [submissions[e.submission_id] for e in sorted(entries, key=lambda e: e.rank)]
    if not validate_ranking_order(ordered):
        raise RankingOrderError()

    return rankings_crud.save_rankings(db, category_id, judge_id, entries)

@router.get("/{category_id}/completion", response_model=CategoryCompletion)
async def get_completion(
    category_id: str,
    judge_id: str = Depends(get_current_judge),
    db: Session = Depends(get_db)
):
    category = _get_category_or_404(db, category_id)
    progress = compute_progress(reviews_crud.get_submissions_for_review(db, category_id, judge_id))
    all_reviewed = progress.pending == 0
    has_rankings = len(rankings_crud.get_rankings(db, category_id, judge_id)) >= RANKING_SLOTS
    is_completed = category.judging_completed_at is not None
    return CategoryCompletion(
        category_id=category_id,
        all_reviewed=all_reviewed,
        has_rankings=has_rankings,
        is_completed=is_completed,
        can_complete=all_reviewed and has_rankings and not is_completed,
    )
