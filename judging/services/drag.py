import logging
from typing import Optional

from judging.core.exceptions import ValidationError
from judging.services.ranking_engine import RANKING_SLOTS, RankingEngine, Slots

logger = logging.getLogger(__name__)

SLOT_TARGET_PREFIX = "slot-"


def slot_target_id(slot: int) -> str:
    return f"{SLOT_TARGET_PREFIX}{slot}"


def parse_slot_target(target_id: Optional[str]) -> Optional[int]:
    """Slot number for a ``slot-<n>`` drop target, None for anything else"""
    if not target_id or not target_id.startswith(SLOT_TARGET_PREFIX):
        return None
    try:
        slot = int(target_id[len(SLOT_TARGET_PREFIX):])
    except ValueError:
        return None
    return slot if 1 <= slot <= RANKING_SLOTS else None


class DragSession:
    """
    Drag-and-drop front end for a RankingEngine

    Tracks the item being dragged and turns a drop on a slot target into a
    placement. Drops outside a slot are ignored.
    """

    def __init__(self, engine: RankingEngine):
        self.engine = engine
        self.active_id: Optional[str] = None
        self.last_error: Optional[ValidationError] = None

    def begin_drag(self, item_id: str) -> None:
        if self.engine.read_only:
            return
        self.active_id = item_id

    def drop_on_target(self, item_id: str, target_id: Optional[str]) -> Optional[Slots]:
        """
        Returns:
            The new slots, or None when the drop did not change anything
        """
        self.active_id = None
        self.last_error = None
        slot = parse_slot_target(target_id)
        if slot is None:
            return None
        try:
            return self.engine.place(item_id, slot)
        except ValidationError as e:
            logger.info(f"Rejected drop of {item_id} on {target_id}: {e.message}")
            self.last_error = e
            raise

    def cancel_drag(self) -> None:
        self.active_id = None
