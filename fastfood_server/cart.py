"""Local shopping cart."""

import logging
from decimal import Decimal

from .models import Cart, CartItem, CartItemInput, CheckoutSummary
from .store import Store

logger = logging.getLogger(__name__)


class CartStore(Store[Cart]):
    """
    Owns the cart lines and their derived totals.

    A line is identified by menu item ID plus its set of customization IDs:
    adding the same combination bumps the quantity, a different combination
    for the same item gets its own line. Unit prices are frozen when a line
    is created. Unknown IDs are ignored by every operation.
    """

    def __init__(self) -> None:
        super().__init__()
        self._items: list[CartItem] = []

    @property
    def items(self) -> list[CartItem]:
        return [item.model_copy(deep=True) for item in self._items]

    def get_state(self) -> Cart:
        return Cart(
            items=self.items,
            total=self.get_total_price(),
            item_count=self.get_total_items(),
        )

    def add_item(self, candidate: CartItemInput, quantity: int = 1) -> None:
        """Add ``quantity`` units of ``candidate`` to its line, creating the line if needed."""
        for item in self._items:
            if item.matches(candidate):
                item.quantity += quantity
                break
        else:
            self._items.append(
                CartItem(**candidate.model_dump(exclude={"quantity"}), quantity=quantity)
            )
        logger.debug(f"Added {candidate.id} to cart ({self.get_total_items()} items)")
        self._notify()

    def remove_item(self, item_id: str) -> None:
        """Remove every line for ``item_id``, whatever its customizations."""
        self._items = [item for item in self._items if item.id != item_id]
        self._notify()

    def increase_qty(self, item_id: str) -> None:
        item = self._first(item_id)
        if item is None:
            return
        item.quantity += 1
        self._notify()

    def decrease_qty(self, item_id: str) -> None:
        item = self._first(item_id)
        if item is None:
            return
        if item.quantity <= 1:
            self._items.remove(item)
        else:
            item.quantity -= 1
        self._notify()

    def clear_cart(self) -> None:
        self._items = []
        self._notify()

    def get_total_items(self) -> int:
        return sum(item.quantity for item in self._items)

    def get_total_price(self) -> Decimal:
        return sum((item.subtotal for item in self._items), Decimal("0"))

    def checkout_summary(self) -> CheckoutSummary:
        return CheckoutSummary(
            total_items=self.get_total_items(),
            subtotal=self.get_total_price(),
        )

    def _first(self, item_id: str):
        return next((item for item in self._items if item.id == item_id), None)
