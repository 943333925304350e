"""
Card Stack - swipeable deck over the filtered cards.

The front card can be dragged; a release beyond the swipe threshold moves
it to the back. Only the order changes, never the set of cards.
"""

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional

from ..config import Config
from ..models import Card


class SwipeDirection(Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass
class SwipeResult:
    """Outcome of releasing a drag."""
    rotated: bool
    direction: Optional[SwipeDirection] = None


@dataclass
class StackSlot:
    """Layout of one visible card; depth 0 is the front card."""
    card: Card
    depth: int
    offset_x: float
    offset_y: float
    scale: float


class CardStack:
    """
    Rotating order of cards with drag state.

    Usage:
        stack = CardStack()
        stack.reset(card_filter.stack_order(store.cards, state))
        stack.drag(-140)
        stack.end_drag(-140)   # front card moves to the back
    """

    def __init__(
        self,
        swipe_threshold: float = Config.SWIPE_THRESHOLD,
        visible_count: int = Config.STACK_VISIBLE_COUNT,
    ):
        self.swipe_threshold = swipe_threshold
        self.visible_count = visible_count
        self._order: List[Card] = []
        self.drag_offset = 0.0

    @property
    def cards(self) -> List[Card]:
        return list(self._order)

    @property
    def top(self) -> Optional[Card]:
        return self._order[0] if self._order else None

    def __len__(self) -> int:
        return len(self._order)

    def reset(self, cards: Iterable[Card]) -> None:
        """Replace the order with the given cards and clear the drag."""
        self._order = list(cards)
        self.drag_offset = 0.0

    def refresh(self, cards: Iterable[Card]) -> None:
        """Swap in updated card objects, keeping the current order and drag."""
        latest = {card.id: card for card in cards}
        self._order = [latest.get(card.id, card) for card in self._order]

    def drag(self, dx: float) -> None:
        self.drag_offset = dx

    def end_drag(self, dx: float) -> SwipeResult:
        """
        Release the front card.

        Args:
            dx: Final horizontal translation

        Returns:
            SwipeResult; rotated is False when the card snapped back
        """
        self.drag_offset = 0.0
        if abs(dx) <= self.swipe_threshold or len(self._order) < 2:
            return SwipeResult(rotated=False)

        self._order.append(self._order.pop(0))
        direction = SwipeDirection.RIGHT if dx > 0 else SwipeDirection.LEFT
        return SwipeResult(rotated=True, direction=direction)

    def go_back(self) -> bool:
        """Bring the last card to the front."""
        if len(self._order) < 2:
            return False
        self._order.insert(0, self._order.pop())
        self.drag_offset = 0.0
        return True

    def shuffle(self, rng: Optional[random.Random] = None) -> None:
        (rng or random).shuffle(self._order)
        self.drag_offset = 0.0

    def visible(self) -> List[StackSlot]:
        """Layout of the front cards, front first."""
        slots = []
        for depth, card in enumerate(self._order[:self.visible_count]):
            offset_x = depth * Config.STACK_OFFSET_STEP_X
            if depth == 0:
                offset_x += self.drag_offset
            slots.append(StackSlot(
                card=card,
                depth=depth,
                offset_x=offset_x,
                offset_y=depth * Config.STACK_OFFSET_STEP_Y,
                scale=1.0 - depth * Config.STACK_SCALE_STEP,
            ))
        return slots
