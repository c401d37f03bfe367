import logging
from enum import Enum
from typing import List, Optional, Sequence

from judging.core.exceptions import RatingRequiredError, ReviewSaveError, SubmissionNotFoundError
from judging.schemas.review import SubmissionForReview
from judging.services.save_controller import SaveController

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    PREVIOUS = "previous"
    NEXT = "next"
    NEXT_UNREVIEWED = "next_unreviewed"

    @property
    def is_forward(self) -> bool:
        return self is not Direction.PREVIOUS


class NavigationGate:
    """
    Moves the judge through the submissions of a category.

    Forward moves need a rating on the current submission. Every move waits
    for the current submission's edits to be persisted first.
    """

    def __init__(self, submissions: Sequence[SubmissionForReview], controller: SaveController):
        self.submissions: List[SubmissionForReview] = list(submissions)
        self.controller = controller
        self.current_index: int = -1
        self._warning_raised = False

    @property
    def current(self) -> Optional[SubmissionForReview]:
        if 0 <= self.current_index < len(self.submissions):
            return self.submissions[self.current_index]
        return None

    @property
    def rating_warning(self) -> bool:
        # clears itself as soon as a rating is selected
        return self._warning_raised and self.controller.local_rating is None

    @property
    def is_last(self) -> bool:
        return self.current_index == len(self.submissions) - 1

    async def open(self, submission_id: str) -> SubmissionForReview:
        """Jump straight to a submission, e.g. from a link. No rating check."""
        index = self._index_of(submission_id)
        if self.current is not None and not await self.controller.flush():
            raise ReviewSaveError()
        self._enter(index)
        return self.current

    def is_scored(self, submission: SubmissionForReview) -> bool:
        record = self.controller.persisted_record(submission.id)
        if record is not None:
            return record.rating is not None
        return submission.rating is not None

    def target_index(self, direction: Direction) -> Optional[int]:
        if direction is Direction.PREVIOUS:
            return self.current_index - 1 if self.current_index > 0 else None
        if direction is Direction.NEXT:
            return self.current_index + 1 if self.current_index + 1 < len(self.submissions) else None
        for index in range(self.current_index + 1, len(self.submissions)):
            if not self.is_scored(self.submissions[index]):
                return index
        return None

    async def navigate(self, direction: Direction) -> Optional[SubmissionForReview]:
        """
        Move one step in ``direction``

        Returns:
            The submission now under review, or None when there is nowhere to go

        Raises:
            RatingRequiredError: forward move while the current submission is unrated
            ReviewSaveError: pending edits could not be persisted; the judge stays put
        """
        if self.current is None:
            raise SubmissionNotFoundError()
        index = self.target_index(direction)
        if index is None:
            return None

        if direction.is_forward and self.controller.local_rating is None:
            self._warning_raised = True
            raise RatingRequiredError()

        if not await self.controller.flush():
            logger.warning(f"Staying on submission {self.current.id}: pending edits were not saved")
            raise ReviewSaveError()

        self._enter(index)
        return self.current

    async def navigate_next(self):
        return await self.navigate(Direction.NEXT)

    async def navigate_previous(self):
        return await self.navigate(Direction.PREVIOUS)

    async def navigate_next_unreviewed(self):
        return await self.navigate(Direction.NEXT_UNREVIEWED)

    def _enter(self, index: int) -> None:
        self.current_index = index
        self._warning_raised = False
        self.controller.load(self.submissions[index])

    def _index_of(self, submission_id: str) -> int:
        for index, submission in enumerate(self.submissions):
            if submission.id == submission_id:
                return index
        raise SubmissionNotFoundError(f"Submission {submission_id} is not in this category")
