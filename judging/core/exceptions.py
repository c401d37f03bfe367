"""Error taxonomy for the review and ranking workflow.

Store failures are transient and recovered locally by the save controller and
the ranking engine. Validation errors are raised before anything reaches a
store so the caller can show the exact message. ``SubmissionNotFoundError`` is
a dead end: the caller leaves the workflow.
"""


class JudgingError(Exception):
    """Base class for workflow errors."""

    message = "Judging workflow error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message


class StoreError(JudgingError):
    message = "The store rejected the request"


class ValidationError(JudgingError):
    message = "Invalid request"


class RatingRequiredError(ValidationError):
    message = "Please select a rating before moving to the next submission"


class InvalidRatingError(ValidationError):
    message = "Rating must be a whole number between 1 and 10"


class RankingOrderError(ValidationError):
    message = "Cannot rank a lower-rated submission above a higher-rated one"


class RankingIncompleteError(ValidationError):
    message = "All three ranking positions must be filled before saving"


class InvalidSlotError(ValidationError):
    message = "Ranking position must be 1, 2 or 3"


class JudgingCompletedError(ValidationError):
    message = "Judging for this category is complete; rankings are read-only"


class SaveInProgressError(ValidationError):
    message = "A save is already in progress"


class SubmissionNotFoundError(JudgingError):
    message = "Submission not found"


class ReviewSaveError(JudgingError):
    message = "Your changes could not be saved. Please try again"
