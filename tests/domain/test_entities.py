"""Tests for domain entities."""

from decimal import Decimal

import pytest

from kaayko.domain.entities import DEFAULT_MAX_QUANTITY, CartLine, Product


class TestProduct:
    """Tests for Product entity."""

    def test_defaults(self) -> None:
        """Optional fields default to empty values."""
        product = Product(id="doc-1", product_id="tee-001")
        assert product.title == ""
        assert product.votes == 0
        assert product.tags == ()
        assert product.image_urls == ()
        assert product.max_quantity == DEFAULT_MAX_QUANTITY

    def test_sequences_become_tuples(self) -> None:
        """List arguments are stored as tuples."""
        product = Product(id="doc-1", product_id="tee-001", tags=["A", "B"])  # type: ignore[arg-type]
        assert product.tags == ("A", "B")

    def test_max_quantity_at_least_one(self) -> None:
        """A zero or negative max quantity is clamped to 1."""
        assert Product(id="doc-1", product_id="tee-001", max_quantity=0).max_quantity == 1

    def test_unit_price(self, product_factory) -> None:
        """Unit price is parsed from the display price."""
        assert product_factory(price="$6.50").unit_price == Decimal("6.50")
        assert product_factory(price="N/A").unit_price == Decimal("0")

    def test_has_tag(self, product_factory) -> None:
        """has_tag checks tag membership."""
        product = product_factory(tags=("T-Shirt", "Summer"))
        assert product.has_tag("Summer")
        assert not product.has_tag("Accessories")

    def test_with_votes_returns_copy(self, product_factory) -> None:
        """with_votes leaves the original unchanged."""
        product = product_factory(votes=3)
        updated = product.with_votes(4)
        assert updated.votes == 4
        assert product.votes == 3
        assert updated.id == product.id

    def test_with_images_returns_copy(self, product_factory) -> None:
        """with_images keeps the given order."""
        product = product_factory()
        updated = product.with_images(["b.jpg", "a.jpg"])
        assert updated.image_urls == ("b.jpg", "a.jpg")
        assert product.image_urls == ()

    def test_is_immutable(self, product_factory) -> None:
        """Products cannot be modified in place."""
        product = product_factory()
        with pytest.raises(AttributeError):
            product.votes = 10  # type: ignore[misc]

    def test_to_dict(self, product_factory) -> None:
        """to_dict uses lists for sequences."""
        data = product_factory(tags=("T-Shirt",)).to_dict()
        assert data["id"] == "doc-1"
        assert data["product_id"] == "tee-001"
        assert data["tags"] == ["T-Shirt"]
        assert data["image_urls"] == []


class TestCartLine:
    """Tests for CartLine entity."""

    def test_create(self, product_factory) -> None:
        """Line ID is the token of the line key."""
        line = CartLine.create(product_factory(), color="Red", size="M", quantity=2)
        assert line.id == "doc-1~Red~M"
        assert line.color == "Red"
        assert line.size == "M"
        assert line.quantity == 2

    def test_quantity_at_least_one(self, product_factory) -> None:
        """A quantity below 1 is clamped."""
        assert CartLine.create(product_factory(), quantity=0).quantity == 1

    def test_line_total(self, product_factory) -> None:
        """Line total is unit price times quantity."""
        line = CartLine.create(product_factory(price="$25"), quantity=3)
        assert line.unit_price == Decimal("25")
        assert line.line_total == Decimal("75")

    def test_equality_by_id(self, product_factory) -> None:
        """Lines with the same ID are equal regardless of quantity."""
        product = product_factory()
        first = CartLine.create(product, color="Red", quantity=1)
        second = CartLine.create(product, color="Red", quantity=5)
        assert first == second
        assert hash(first) == hash(second)
        assert first != CartLine.create(product, color="Blue")
