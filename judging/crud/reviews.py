from sqlalchemy import and_
from sqlalchemy.orm import Session
from typing import List, Optional

from judging.models.review import Review
from judging.models.submission import Submission
from judging.schemas.review import SubmissionForReview

def get_submissions_for_review(db: Session, category_id: str, judge_id: str) -> List[SubmissionForReview]:
    """
    Submissions of a category with this judge's review, if any

    Participant identity is never exposed, only the anonymised code.
    """
    rows = (
        db.query(Submission, Review)
        .outerjoin(
            Review,
            and_(Review.submission_id == Submission.id, Review.judge_id == judge_id),
        )
        .filter(Submission.category_id == category_id)
        .order_by(Submission.submitted_at.asc(), Submission.id.asc())
        .all()
    )
    return [
        SubmissionForReview(
            id=submission.id,
            media_type=submission.media_type,
            media_url=submission.media_url,
            thumbnail_url=submission.thumbnail_url,
            status=submission.status,
            submitted_at=submission.submitted_at,
            participant_code=submission.participant_code,
            review_id=review.id if review else None,
            rating=review.rating if review else None,
            feedback=review.feedback if review else None,
        )
        for submission, review in rows
    ]

def get_review(db: Session, submission_id: str, judge_id: str) -> Optional[Review]:
    return db.query(Review).filter(
        Review.submission_id == submission_id,
        Review.judge_id == judge_id
    ).first()

def upsert_review(db: Session, submission_id: str, judge_id: str, rating: Optional[int], feedback: Optional[str]) -> Review:
    """Insert the score record or overwrite both fields of the existing one"""
    review = get_review(db, submission_id, judge_id)
    if review is None:
        review = Review(submission_id=submission_id, judge_id=judge_id)
        db.add(review)
    review.rating = rating
    review.feedback = feedback

    try:
        db.commit()
    except Exception as e:
        db.rollback()
        raise e
    db.refresh(review)
    return review
