"""Top-3 ranking for one judge in one category.

The three slots always satisfy the ordering invariant: a better-placed
submission never has a lower rating than one placed below it. Unrated
submissions are wildcards and never block a placement. Ties may go either way.
"""
import logging
from datetime import datetime
from typing import List, Optional, Sequence

from judging.core.exceptions import (
    InvalidSlotError,
    JudgingCompletedError,
    RankingIncompleteError,
    RankingOrderError,
    SaveInProgressError,
    SubmissionNotFoundError,
)
from judging.schemas.ranking import RankingEntry
from judging.schemas.review import SubmissionForReview
from judging.services.stores import RankingStore

logger = logging.getLogger(__name__)

RANKING_SLOTS = 3
DISQUALIFIED = "disqualified"

Slots = List[Optional[SubmissionForReview]]


def validate_ranking_order(slots: Sequence[Optional[SubmissionForReview]]) -> bool:
    """True when every rated submission is rated at least as high as any rated one below it"""
    rated = [s.rating for s in slots if s is not None and s.rating is not None]
    return all(higher >= lower for higher, lower in zip(rated, rated[1:]))


def sort_pool(submissions: Sequence[SubmissionForReview]) -> List[SubmissionForReview]:
    """Rankable submissions, best rated first; unrated last, ties by submission time"""
    eligible = [s for s in submissions if s.status != DISQUALIFIED]
    eligible.sort(key=lambda s: (
        -(s.rating or 0),
        s.submitted_at is None,
        s.submitted_at or datetime.min,
    ))
    return eligible


class RankingEngine:
    def __init__(
        self,
        category_id: str,
        judge_id: str,
        submissions: Sequence[SubmissionForReview],
        store: RankingStore,
        read_only: bool = False,
    ):
        self.category_id = category_id
        self.judge_id = judge_id
        self.submissions = list(submissions)
        self.store = store
        self.read_only = read_only

        self.has_local_override = False
        self.is_saving = False
        self.save_error: Optional[Exception] = None
        self.load_error: Optional[Exception] = None
        self._restored: Slots = [None] * RANKING_SLOTS
        self._local: Slots = [None] * RANKING_SLOTS
        # disqualified submissions can never be ranked
        self._by_id = {s.id: s for s in self.submissions if s.status != DISQUALIFIED}

    # -- state -------------------------------------------------------------

    @property
    def slots(self) -> Slots:
        source = self._local if self.has_local_override else self._restored
        return list(source)

    @property
    def ranked_ids(self):
        return {s.id for s in self.slots if s is not None}

    @property
    def pool(self) -> List[SubmissionForReview]:
        return sort_pool(self.submissions)

    def is_ranked(self, submission_id: str) -> bool:
        return submission_id in self.ranked_ids

    @property
    def all_ranked(self) -> bool:
        return all(s is not None for s in self.slots)

    @property
    def can_save(self) -> bool:
        return self.all_ranked and not self.is_saving and not self.read_only

    def entries(self) -> List[RankingEntry]:
        return [
            RankingEntry(rank=position, submission_id=submission.id)
            for position, submission in enumerate(self.slots, start=1)
            if submission is not None
        ]

    # -- hydration ---------------------------------------------------------

    async def hydrate(self) -> Slots:
        """
        Load the judge's saved rankings into the slots

        A store failure is kept in ``load_error`` and leaves the slots empty.
        """
        try:
            entries = await self.store.get_rankings(self.category_id, self.judge_id)
        except Exception as e:
            logger.warning(f"Loading rankings for category {self.category_id} failed: {str(e)}")
            self.load_error = e
            return self.slots

        self.load_error = None
        self.refresh_persisted(entries)
        return self.slots

    def refresh_persisted(self, entries: Sequence[RankingEntry]) -> None:
        """
        Take in the stored assignment

        Only shows up in ``slots`` until the judge first places or removes
        something; after that local state wins.
        """
        restored: Slots = [None] * RANKING_SLOTS
        for entry in entries:
            submission = self._by_id.get(entry.submission_id)
            if submission is not None and 1 <= entry.rank <= RANKING_SLOTS:
                restored[entry.rank - 1] = submission
        self._restored = restored
        if self.has_local_override:
            logger.debug(f"Ignoring refreshed rankings for category {self.category_id}: local changes pending")

    # -- mutations ---------------------------------------------------------

    def place(self, submission_id: str, slot: int) -> Slots:
        """
        Put a submission into a slot

        A submission already ranked elsewhere moves; whoever held the target
        slot becomes unranked.

        Raises:
            RankingOrderError: the result would rank a lower rating above a higher one
        """
        self._require_editable()
        index = self._slot_index(slot)
        submission = self._by_id.get(submission_id)
        if submission is None:
            raise SubmissionNotFoundError(f"Submission {submission_id} is not in this category")

        proposed = self.slots
        for i, current in enumerate(proposed):
            if current is not None and current.id == submission_id:
                proposed[i] = None
        proposed[index] = submission

        if not validate_ranking_order(proposed):
            raise RankingOrderError()

        self._commit(proposed)
        return self.slots

    def remove(self, slot: int) -> Slots:
        self._require_editable()
        index = self._slot_index(slot)
        proposed = self.slots
        proposed[index] = None
        self._commit(proposed)
        return self.slots

    # inbound UI event names
    submission_placed = place
    submission_removed = remove

    # -- persistence -------------------------------------------------------

    async def save(self) -> bool:
        """
        Persist all three slots in one atomic store call

        Returns:
            False when the store rejected the save; slots are left as they were
        """
        self._require_editable()
        if self.is_saving:
            raise SaveInProgressError()
        if not self.all_ranked:
            raise RankingIncompleteError()

        entries = self.entries()
        self.is_saving = True
        try:
            await self.store.save_rankings(self.category_id, self.judge_id, entries)
        except Exception as e:
            logger.warning(f"Saving rankings for category {self.category_id} failed: {str(e)}")
            self.save_error = e
            return False
        finally:
            self.is_saving = False

        self.save_error = None
        self._restored = self.slots
        logger.info(f"Saved rankings for category {self.category_id}, judge {self.judge_id}")
        return True

    save_rankings_requested = save

    # -- helpers -----------------------------------------------------------

    def _commit(self, slots: Slots) -> None:
        self._local = slots
        self.has_local_override = True

    def _slot_index(self, slot: int) -> int:
        if isinstance(slot, bool) or not isinstance(slot, int) or not 1 <= slot <= RANKING_SLOTS:
            raise InvalidSlotError()
        return slot - 1

    def _require_editable(self) -> None:
        if self.read_only:
            raise JudgingCompletedError()
