"""Value Objects for the domain layer.

Value objects are immutable objects that are defined by their attributes
rather than identity. They are interchangeable when their values are equal.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Self
from urllib.parse import quote, unquote

from kaayko.domain.base import ValueObject

# Tag that selects every product.
ALL_TAGS = "All"

_PRICE_CHARACTERS = frozenset("0123456789.")


# ============================================================================
# Prices
# ============================================================================


def parse_display_price(price: str) -> Decimal:
    """Parse a display price string such as "$25" into a number.

    Every character that is not a digit or a decimal point is dropped
    before parsing, so "$1,299.50" reads as 1299.50. The rule is naive
    about locales: "25,50 €" reads as 2550.

    Args:
        price: Price as shown to the shopper.

    Returns:
        Parsed amount, or zero when nothing parseable remains.
    """
    digits = "".join(ch for ch in price if ch in _PRICE_CHARACTERS)
    try:
        value = Decimal(digits)
    except InvalidOperation:
        return Decimal("0")
    return value


# ============================================================================
# Cart Line Identity
# ============================================================================


_TOKEN_SEPARATOR = "~"


def _encode_part(value: str | None) -> str:
    """Percent-encode one token part; ``quote`` leaves ``~`` alone."""
    if value is None:
        return ""
    return quote(value, safe="").replace(_TOKEN_SEPARATOR, "%7E")


def _normalize_option(value: str | None) -> str | None:
    """Treat an empty option the same as no selection."""
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class CartLineKey(ValueObject):
    """Identity of a cart line: product plus variant selection.

    A missing color or size is a valid value of its own, equal to
    "no selection".
    """

    product_id: str
    color: str | None = None
    size: str | None = None

    @classmethod
    def of(cls, product_id: str, color: str | None = None, size: str | None = None) -> Self:
        """Build a key, normalizing blank options to None.

        Args:
            product_id: Store document ID of the product.
            color: Selected color label, if any.
            size: Selected size label, if any.

        Returns:
            CartLineKey instance.
        """
        return cls(
            product_id=product_id,
            color=_normalize_option(color),
            size=_normalize_option(size),
        )

    @property
    def token(self) -> str:
        """Stable string form used as the line ID.

        Each part is percent-encoded, ``~`` included, so the separator
        never appears inside a part and distinct keys get distinct
        tokens. Clients must percent-encode the token again when they
        put it in a URL path.

        Returns:
            "<product_id>~<color>~<size>" with empty parts for no selection.
        """
        return _TOKEN_SEPARATOR.join(
            _encode_part(part) for part in (self.product_id, self.color, self.size)
        )

    @classmethod
    def from_token(cls, token: str) -> Self:
        """Parse a line ID back into its key.

        Args:
            token: Value produced by ``token``.

        Returns:
            CartLineKey instance.

        Raises:
            ValueError: If the token does not have three parts.
        """
        parts = token.split(_TOKEN_SEPARATOR)
        if len(parts) != 3 or not parts[0]:
            raise ValueError(f"Malformed cart line token: {token!r}")
        product_id, color, size = (unquote(part) for part in parts)
        return cls.of(product_id, color, size)

    def __str__(self) -> str:
        """Return string representation.

        Returns:
            The line token.
        """
        return self.token
