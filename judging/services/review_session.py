import logging
from typing import Optional, Sequence

from judging.schemas.review import ReviewProgress, SubmissionForReview
from judging.services.navigation import Direction, NavigationGate
from judging.services.save_controller import SaveController, SaveStatus
from judging.services.scheduler import Scheduler
from judging.services.stores import ScoreStore
from judging.utils.helpers import compute_progress

logger = logging.getLogger(__name__)

# arrow keys type into these instead of navigating
TEXT_ENTRY_TAGS = {"TEXTAREA", "INPUT", "SELECT"}

KEY_DIRECTIONS = {
    "ArrowLeft": Direction.PREVIOUS,
    "ArrowRight": Direction.NEXT,
}


class ReviewSession:
    """Entry point for a judge reviewing one category's submissions."""

    def __init__(
        self,
        submissions: Sequence[SubmissionForReview],
        store: ScoreStore,
        scheduler: Optional[Scheduler] = None,
        debounce_seconds: Optional[float] = None,
        saved_display_seconds: Optional[float] = None,
    ):
        self.controller = SaveController(
            store,
            scheduler=scheduler,
            debounce_seconds=debounce_seconds,
            saved_display_seconds=saved_display_seconds,
        )
        self.gate = NavigationGate(submissions, self.controller)

    async def start(self, submission_id: str) -> SubmissionForReview:
        return await self.gate.open(submission_id)

    @property
    def current(self) -> Optional[SubmissionForReview]:
        return self.gate.current

    @property
    def save_status(self) -> SaveStatus:
        return self.controller.save_status

    @property
    def rating_warning(self) -> bool:
        return self.gate.rating_warning

    @property
    def progress(self) -> ReviewProgress:
        """Progress including scores saved during this session"""
        return compute_progress(self.gate.submissions, self.controller.saved_submission_ids)

    def feedback_changed(self, text: str) -> None:
        self.controller.feedback_changed(text)

    def feedback_blurred(self) -> None:
        self.controller.feedback_blurred()

    def rating_selected(self, value: int) -> None:
        self.controller.rating_selected(value)

    async def navigate_next(self):
        return await self.gate.navigate(Direction.NEXT)

    async def navigate_previous(self):
        return await self.gate.navigate(Direction.PREVIOUS)

    async def navigate_next_unreviewed(self):
        return await self.gate.navigate(Direction.NEXT_UNREVIEWED)

    async def key_pressed(self, key: str, target_tag: Optional[str] = None):
        """
        Keyboard shortcut into the same gate the buttons use

        Returns:
            The submission now under review, or None if the key was ignored
        """
        if target_tag and target_tag.upper() in TEXT_ENTRY_TAGS:
            return None
        direction = KEY_DIRECTIONS.get(key)
        if direction is None:
            return None
        return await self.gate.navigate(direction)

    async def close(self) -> bool:
        """Flush the current submission before leaving the review screen"""
        saved = await self.controller.flush()
        self.controller.close()
        return saved
