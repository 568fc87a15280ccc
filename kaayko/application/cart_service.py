"""Cart application service.

Holds the shopper's cart for the lifetime of the process. Lines are
keyed by product plus variant selection; adding the same selection
again bumps the quantity instead of creating a new line.
"""

import threading
from dataclasses import replace
from decimal import Decimal

import structlog

from kaayko.domain.entities import CartLine, Product
from kaayko.domain.exceptions import CartLineNotFoundError
from kaayko.domain.value_objects import CartLineKey

logger = structlog.get_logger()

CENTS = Decimal("0.01")


def _key_for(line_id: str) -> CartLineKey | None:
    try:
        return CartLineKey.from_token(line_id)
    except ValueError:
        return None


class CartStore:
    """In-memory cart.

    Every mutation runs under one lock, so two rapid changes to the same
    line never lose an update. Lines keep insertion order. Callers get
    copies of the stored lines, never the lines themselves.
    """

    def __init__(self) -> None:
        self._lines: dict[CartLineKey, CartLine] = {}
        self._lock = threading.Lock()

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    def lines(self) -> list[CartLine]:
        """Lines in the order they were first added."""
        with self._lock:
            return [replace(line) for line in self._lines.values()]

    def get(self, line_id: str) -> CartLine | None:
        """Find a line by ID.

        Args:
            line_id: Line token.

        Returns:
            CartLine if found, None otherwise.
        """
        key = _key_for(line_id)
        with self._lock:
            line = self._lines.get(key) if key is not None else None
            return replace(line) if line is not None else None

    @property
    def is_empty(self) -> bool:
        """Check if cart has no lines."""
        with self._lock:
            return not self._lines

    def total_item_count(self) -> int:
        """Total number of units (sum of quantities)."""
        with self._lock:
            return sum(line.quantity for line in self._lines.values())

    def total_price(self) -> Decimal:
        """Sum of quantity times parsed unit price over all lines.

        Prices come from the display strings, so this is a display
        approximation rather than an authoritative amount.

        Returns:
            Total rounded to cents.
        """
        with self._lock:
            total = sum(
                (line.line_total for line in self._lines.values()),
                start=Decimal("0"),
            )
        return total.quantize(CENTS)

    # -------------------------------------------------------------------------
    # Line Operations
    # -------------------------------------------------------------------------

    def add(
        self,
        product: Product,
        color: str | None = None,
        size: str | None = None,
    ) -> CartLine:
        """Add one unit of a product with a variant selection.

        No upper bound is enforced here; ``Product.max_quantity`` is
        checked by the caller.

        Args:
            product: Product to add.
            color: Selected color, if any.
            size: Selected size, if any.

        Returns:
            The new or updated line.
        """
        return self.add_many(product, 1, color, size)

    def add_many(
        self,
        product: Product,
        quantity: int,
        color: str | None = None,
        size: str | None = None,
    ) -> CartLine:
        """Add several units of one selection in a single step.

        Args:
            product: Product to add.
            quantity: Units to add, clamped to at least 1.
            color: Selected color, if any.
            size: Selected size, if any.

        Returns:
            The new or updated line.
        """
        key = CartLineKey.of(product.id, color, size)
        units = max(quantity, 1)
        with self._lock:
            line = self._lines.get(key)
            if line is not None:
                line.quantity += units
            else:
                line = CartLine(id=key.token, key=key, product=product, quantity=units)
                self._lines[key] = line
            snapshot = replace(line)

        logger.debug(
            "Cart line added",
            line_id=snapshot.id,
            added=units,
            quantity=snapshot.quantity,
        )
        return snapshot

    def adjust_quantity(self, line_id: str, delta: int) -> CartLine | None:
        """Change a line's quantity by ``delta``.

        A resulting quantity of zero or less removes the line.

        Args:
            line_id: Line token.
            delta: Quantity change.

        Returns:
            The updated line, or None if it was removed.

        Raises:
            CartLineNotFoundError: If no line has this ID.
        """
        key = _key_for(line_id)
        with self._lock:
            line = self._lines.get(key) if key is not None else None
            if line is None:
                raise CartLineNotFoundError(line_id)

            new_quantity = line.quantity + delta
            if new_quantity <= 0:
                del self._lines[line.key]
                snapshot = None
            else:
                line.quantity = new_quantity
                snapshot = replace(line)

        if snapshot is None:
            logger.debug("Cart line removed", line_id=line_id)
        else:
            logger.debug(
                "Cart line quantity updated",
                line_id=line_id,
                quantity=snapshot.quantity,
            )
        return snapshot

    def remove(self, line_id: str) -> CartLine:
        """Remove a line.

        Args:
            line_id: Line token.

        Returns:
            The removed line.

        Raises:
            CartLineNotFoundError: If no line has this ID.
        """
        key = _key_for(line_id)
        with self._lock:
            line = self._lines.pop(key, None) if key is not None else None
        if line is None:
            raise CartLineNotFoundError(line_id)
        return line

    def clear(self) -> None:
        """Remove every line."""
        with self._lock:
            self._lines.clear()


# Global cart instance
_cart_store: CartStore | None = None


def get_cart_store() -> CartStore:
    """Get cart store singleton."""
    global _cart_store
    if _cart_store is None:
        _cart_store = CartStore()
    return _cart_store
