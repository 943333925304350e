"""Card stack navigation."""

from .card_stack import CardStack, StackSlot, SwipeDirection, SwipeResult

__all__ = ["CardStack", "StackSlot", "SwipeDirection", "SwipeResult"]
