"""Auto-save for the submission a judge is currently reviewing.

Two edit channels feed one score record. Feedback text is saved after a quiet
period, a rating selection is saved at once. Only one request is ever sent at a
time: anything requested meanwhile replaces the single queued payload and goes
out as soon as the in-flight request settles.
"""
import asyncio
import logging
from enum import Enum
from typing import Dict, Optional, Set

from judging.core.config.settings import get_settings
from judging.core.exceptions import InvalidRatingError, SubmissionNotFoundError
from judging.schemas.review import ScoreRecord, SubmissionForReview
from judging.services.scheduler import AsyncioScheduler, Scheduler, TimerHandle
from judging.services.stores import ScoreStore
from judging.utils.helpers import is_valid_rating

logger = logging.getLogger(__name__)


class SaveStatus(str, Enum):
    IDLE = "idle"
    SAVING = "saving"
    SAVED = "saved"


class SaveController:
    def __init__(
        self,
        store: ScoreStore,
        scheduler: Optional[Scheduler] = None,
        debounce_seconds: Optional[float] = None,
        saved_display_seconds: Optional[float] = None,
    ):
        settings = get_settings()
        self.store = store
        self.scheduler = scheduler or AsyncioScheduler()
        self.debounce_seconds = (
            settings.FEEDBACK_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self.saved_display_seconds = (
            settings.SAVED_DISPLAY_SECONDS if saved_display_seconds is None else saved_display_seconds
        )

        self.submission_id: Optional[str] = None
        self.local_rating: Optional[int] = None
        self.local_feedback: str = ""
        self.save_status = SaveStatus.IDLE
        self.last_error: Optional[Exception] = None

        # last successfully written record per submission, this session
        self._persisted: Dict[str, ScoreRecord] = {}
        self.saved_submission_ids: Set[str] = set()
        self._debounce_timer: Optional[TimerHandle] = None
        self._saved_timer: Optional[TimerHandle] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._in_flight_payload: Optional[ScoreRecord] = None
        self._queued: Optional[ScoreRecord] = None

    # -- state -------------------------------------------------------------

    def load(self, submission: SubmissionForReview) -> None:
        """Make ``submission`` the one under review and seed the edit buffer."""
        self._cancel_debounce()
        self._cancel_saved_timer()
        if submission.id not in self._persisted:
            self._persisted[submission.id] = ScoreRecord(
                submission_id=submission.id,
                rating=submission.rating,
                feedback=submission.feedback or "",
            )
        saved = self._persisted[submission.id]
        self.submission_id = submission.id
        self.local_rating = saved.rating
        self.local_feedback = saved.feedback
        self.save_status = SaveStatus.IDLE
        self.last_error = None

    def persisted_record(self, submission_id: str) -> Optional[ScoreRecord]:
        return self._persisted.get(submission_id)

    @property
    def dirty(self) -> bool:
        if self.submission_id is None:
            return False
        saved = self._persisted[self.submission_id]
        return self.local_rating != saved.rating or self.local_feedback != saved.feedback

    @property
    def is_saving(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    @property
    def has_pending_debounce(self) -> bool:
        return self._debounce_timer is not None

    # -- inbound events ----------------------------------------------------

    def feedback_changed(self, text: str) -> None:
        self._require_loaded()
        self.local_feedback = text
        self._cancel_debounce()
        self._debounce_timer = self.scheduler.call_later(self.debounce_seconds, self._on_debounce_elapsed)

    def feedback_blurred(self) -> None:
        self._require_loaded()
        self._cancel_debounce()
        if self._needs_save():
            self.request_save()

    def rating_selected(self, value: int) -> None:
        self._require_loaded()
        if not is_valid_rating(value):
            raise InvalidRatingError()
        self.local_rating = value
        # the immediate save carries the feedback buffer too
        self._cancel_debounce()
        if self._needs_save():
            self.request_save()

    async def flush(self) -> bool:
        """
        Send any pending edit and wait until nothing is in flight

        Returns:
            True when the current submission is fully persisted
        """
        self._send_pending()
        while self.is_saving:
            if not await asyncio.shield(self._in_flight):
                return False
            # edits made while waiting
            self._send_pending()
        return not self.dirty

    def close(self) -> None:
        self._cancel_debounce()
        self._cancel_saved_timer()

    # -- dispatch ----------------------------------------------------------

    def request_save(self) -> None:
        """Save the current buffer now, or coalesce it behind the in-flight save."""
        payload = self._snapshot()
        if self.is_saving:
            self._queued = payload
            logger.debug(f"Save in flight, queued latest edit for submission {payload.submission_id}")
            return
        self._start(payload)

    def _start(self, payload: ScoreRecord) -> None:
        self._in_flight_payload = payload
        if payload.submission_id == self.submission_id:
            self._cancel_saved_timer()
            self.save_status = SaveStatus.SAVING
        self._in_flight = asyncio.get_running_loop().create_task(self._send(payload))

    async def _send(self, payload: ScoreRecord) -> bool:
        try:
            await self.store.upsert_review(payload.submission_id, payload.rating, payload.feedback)
        except Exception as e:
            logger.warning(f"Saving review for submission {payload.submission_id} failed: {str(e)}")
            self._in_flight_payload = None
            self._queued = None
            if payload.submission_id == self.submission_id:
                self.save_status = SaveStatus.IDLE
                self.last_error = e
            return False

        self._persisted[payload.submission_id] = payload
        self.saved_submission_ids.add(payload.submission_id)
        self._in_flight_payload = None
        follow_up, self._queued = self._queued, None
        if follow_up is not None:
            self._start(follow_up)
        elif payload.submission_id == self.submission_id:
            self.save_status = SaveStatus.SAVED
            self.last_error = None
            self._saved_timer = self.scheduler.call_later(self.saved_display_seconds, self._on_saved_elapsed)
        return True

    def _send_pending(self) -> None:
        self._cancel_debounce()
        if self.submission_id is not None and self._needs_save():
            self.request_save()

    def _needs_save(self) -> bool:
        # compare against what the store will hold once queued/in-flight writes land
        target = self._queued or self._in_flight_payload
        if target is None or target.submission_id != self.submission_id:
            return self.dirty
        return self._snapshot() != target

    def _snapshot(self) -> ScoreRecord:
        return ScoreRecord(
            submission_id=self.submission_id,
            rating=self.local_rating,
            feedback=self.local_feedback,
        )

    # -- timers ------------------------------------------------------------

    def _on_debounce_elapsed(self) -> None:
        self._debounce_timer = None
        if self.submission_id is not None and self._needs_save():
            self.request_save()

    def _on_saved_elapsed(self) -> None:
        self._saved_timer = None
        if self.save_status == SaveStatus.SAVED:
            self.save_status = SaveStatus.IDLE

    def _cancel_debounce(self) -> None:
        if self._debounce_timer is not None:
            self._debounce_timer.cancel()
            self._debounce_timer = None

    def _cancel_saved_timer(self) -> None:
        if self._saved_timer is not None:
            self._saved_timer.cancel()
            self._saved_timer = None

    def _require_loaded(self) -> None:
        if self.submission_id is None:
            raise SubmissionNotFoundError("No submission is loaded for review")
