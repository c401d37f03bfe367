from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from judging.db.session import get_db
from judging.core.security.auth import get_current_judge
from judging.crud import rankings as rankings_crud
from judging.crud import reviews as reviews_crud
from judging.models.submission import Submission
from judging.schemas.review import ReviewDisplay, ReviewUpsertRequest, SubmissionsForReviewResponse
from judging.utils.helpers import compute_progress, filter_submissions

router = APIRouter(tags=["reviews"])

@router.get("/categories/{category_id}/submissions", response_model=SubmissionsForReviewResponse)
async def get_submissions_for_review(
    category_id: str,
    filter: str = Query(default="all", pattern="^(all|pending|reviewed)$"),
    judge_id: str = Depends(get_current_judge),
    db: Session = Depends(get_db)
):
    if rankings_crud.get_category(db, category_id) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found"
        )

    submissions = reviews_crud.get_submissions_for_review(db, category_id, judge_id)
    return {
        "items": filter_submissions(submissions, filter),
        # progress always covers the whole category
        "progress": compute_progress(submissions),
    }

@router.put("/submissions/{submission_id}/review", response_model=ReviewDisplay)
async def upsert_review(
    submission_id: str,
    review: ReviewUpsertRequest,
    judge_id: str = Depends(get_current_judge),
    db: Session = Depends(get_db)
):
    submission = db.query(Submission).filter(Submission.id == submission_id).first()
    if not submission:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Submission not found"
        )

    return reviews_crud.upsert_review(
        db,
        submission_id=submission_id,
        judge_id=judge_id,
        rating=review.rating,
        feedback=review.feedback
    )
