from typing import AbstractSet, Iterable, List, Optional, Sequence

from judging.schemas.review import RatingTier, ReviewProgress, SubmissionForReview

MIN_RATING = 1
MAX_RATING = 10

RATING_TIERS: List[RatingTier] = [
    RatingTier(tier=1, label="Developing Skills", min_score=1, max_score=2),
    RatingTier(tier=2, label="Emerging Producer", min_score=3, max_score=4),
    RatingTier(tier=3, label="Proficient Creator", min_score=5, max_score=6),
    RatingTier(tier=4, label="Advanced Producer", min_score=7, max_score=8),
    RatingTier(tier=5, label="Master Creator", min_score=9, max_score=10),
]

def is_valid_rating(value) -> bool:
    """True for whole numbers on the 1-10 scale (bools excluded)"""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and MIN_RATING <= value <= MAX_RATING
    )

def get_rating_tier(rating) -> Optional[RatingTier]:
    """
    Look up the tier a rating falls in

    Args:
        rating: Rating value

    Returns:
        The matching tier, or None when the value is off the 1-10 scale
    """
    if not is_valid_rating(rating):
        return None
    for tier in RATING_TIERS:
        if tier.min_score <= rating <= tier.max_score:
            return tier
    return None

def is_reviewed(submission: SubmissionForReview) -> bool:
    return submission.review_id is not None

def compute_progress(
    submissions: Sequence[SubmissionForReview], saved_ids: AbstractSet[str] = frozenset()
) -> ReviewProgress:
    """
    Count reviewed/pending submissions for the progress bar

    Args:
        submissions: Submissions of the category
        saved_ids: Submissions reviewed since the list was fetched
    """
    total = len(submissions)
    reviewed = sum(1 for s in submissions if is_reviewed(s) or s.id in saved_ids)
    # round half up, matching the percentage shown to judges
    percentage = int(reviewed * 100 / total + 0.5) if total > 0 else 0
    return ReviewProgress(
        total=total,
        reviewed=reviewed,
        pending=total - reviewed,
        percentage=percentage,
    )

def filter_submissions(
    submissions: Iterable[SubmissionForReview], filter_by: str = "all"
) -> List[SubmissionForReview]:
    if filter_by == "pending":
        return [s for s in submissions if not is_reviewed(s)]
    if filter_by == "reviewed":
        return [s for s in submissions if is_reviewed(s)]
    return list(submissions)
