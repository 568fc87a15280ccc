"""Domain entities.

Product records mirrored from the remote store and the lines of the
shopper's cart.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Iterable

from kaayko.domain.base import Entity
from kaayko.domain.value_objects import CartLineKey, parse_display_price

DEFAULT_MAX_QUANTITY = 10


# ============================================================================
# Product
# ============================================================================


@dataclass(frozen=True)
class Product:
    """A product in the Kaayko store.

    Products are immutable snapshots. A resync replaces them wholesale;
    the only per-product changes are a new vote count or a new image
    list, and both produce a new instance.

    Attributes:
        id: Store document ID.
        product_id: Stable external ID, also the image folder key.
        title: Product title.
        description: Short product description.
        price: Display price (e.g., "$25").
        votes: Number of votes.
        tags: Category labels.
        image_urls: Download URLs of the product images, in listing order.
        available_colors: Color labels the shopper can pick from.
        available_sizes: Size labels the shopper can pick from.
        max_quantity: Most units of this product one purchase may hold.
    """

    id: str
    product_id: str
    title: str = ""
    description: str = ""
    price: str = ""
    votes: int = 0
    tags: tuple[str, ...] = ()
    image_urls: tuple[str, ...] = ()
    available_colors: tuple[str, ...] = ()
    available_sizes: tuple[str, ...] = ()
    max_quantity: int = DEFAULT_MAX_QUANTITY

    def __post_init__(self) -> None:
        """Coerce sequences to tuples and clamp max_quantity to at least 1."""
        for name in ("tags", "image_urls", "available_colors", "available_sizes"):
            object.__setattr__(self, name, tuple(getattr(self, name)))
        object.__setattr__(self, "max_quantity", max(self.max_quantity, 1))

    @property
    def unit_price(self) -> Decimal:
        """Numeric price parsed from the display string.

        Returns:
            Parsed price, zero if unparsable.
        """
        return parse_display_price(self.price)

    def has_tag(self, tag: str) -> bool:
        """Check whether the product is labelled with a tag.

        Args:
            tag: Category label.

        Returns:
            True if the tag is in the product's tag set.
        """
        return tag in self.tags

    def with_images(self, image_urls: Iterable[str]) -> "Product":
        """Return a copy carrying the given image URLs."""
        return replace(self, image_urls=tuple(image_urls))

    def with_votes(self, votes: int) -> "Product":
        """Return a copy carrying the given vote count."""
        return replace(self, votes=votes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation.
        """
        return {
            "id": self.id,
            "product_id": self.product_id,
            "title": self.title,
            "description": self.description,
            "price": self.price,
            "votes": self.votes,
            "tags": list(self.tags),
            "image_urls": list(self.image_urls),
            "available_colors": list(self.available_colors),
            "available_sizes": list(self.available_sizes),
            "max_quantity": self.max_quantity,
        }


# ============================================================================
# Cart Line Entity
# ============================================================================


@dataclass(eq=False)
class CartLine(Entity):
    """A line in the shopper's cart.

    The product is copied at add time; later catalog updates do not
    change lines already in the cart.

    Attributes:
        id: Line ID, the token of the line key.
        key: Product and variant selection identifying the line.
        product: Product snapshot taken when the line was created.
        quantity: Number of units, never below 1.
        added_at: Timestamp when the line was created.
    """

    id: str
    key: CartLineKey
    product: Product
    quantity: int = 1
    added_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        """Clamp the quantity to at least 1."""
        self.quantity = max(self.quantity, 1)

    @classmethod
    def create(
        cls,
        product: Product,
        color: str | None = None,
        size: str | None = None,
        quantity: int = 1,
    ) -> "CartLine":
        """Create a new cart line.

        Args:
            product: Product being added.
            color: Selected color, if any.
            size: Selected size, if any.
            quantity: Initial quantity, clamped to at least 1.

        Returns:
            New CartLine instance.
        """
        key = CartLineKey.of(product.id, color, size)
        return cls(id=key.token, key=key, product=product, quantity=quantity)

    @property
    def color(self) -> str | None:
        """Selected color."""
        return self.key.color

    @property
    def size(self) -> str | None:
        """Selected size."""
        return self.key.size

    @property
    def unit_price(self) -> Decimal:
        """Numeric unit price of the product snapshot."""
        return self.product.unit_price

    @property
    def line_total(self) -> Decimal:
        """Unit price multiplied by quantity."""
        return self.product.unit_price * self.quantity
