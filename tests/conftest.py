"""Shared fixtures for Kaayko store tests."""

from typing import Any

import pytest

from kaayko.catalog.repository import ProductRepository
from kaayko.domain.entities import Product
from kaayko.infrastructure.memory_store import InMemoryImageSource, InMemoryProductStore
from kaayko.infrastructure.store import ProductDocument


def make_product(
    id: str = "doc-1",
    product_id: str = "tee-001",
    **overrides: Any,
) -> Product:
    """Build a product with sensible defaults."""
    fields: dict[str, Any] = {
        "title": "Paddle Out Tee",
        "description": "Cotton tee",
        "price": "$25",
        "votes": 0,
        "tags": ("T-Shirt",),
    }
    fields.update(overrides)
    return Product(id=id, product_id=product_id, **fields)


def make_document(
    id: str,
    product_id: str | None,
    tags: list[str] | None = None,
    **fields: Any,
) -> ProductDocument:
    """Build a raw product document using the remote field names."""
    data: dict[str, Any] = {
        "title": f"Product {id}",
        "description": "",
        "price": "$10",
        "votes": 0,
        "tags": tags if tags is not None else [],
    }
    if product_id is not None:
        data["productID"] = product_id
    data.update(fields)
    return ProductDocument(id=id, data=data)


@pytest.fixture
def documents() -> list[ProductDocument]:
    """Three well-formed product documents."""
    return [
        make_document("doc-1", "tee-001", ["T-Shirt", "Nostalgia"], price="$25", votes=4),
        make_document("doc-2", "tee-002", ["T-Shirt", "Summer"], price="$28", votes=1),
        make_document("doc-3", "sticker-001", ["Accessories"], price="$6.50"),
    ]


@pytest.fixture
def memory_store(documents: list[ProductDocument]) -> InMemoryProductStore:
    """In-memory document store holding the sample documents."""
    return InMemoryProductStore(documents)


@pytest.fixture
def image_source() -> InMemoryImageSource:
    """In-memory image source with images for two of the sample products."""
    return InMemoryImageSource(
        {
            "tee-001": ["https://img.test/tee-001/front.jpg", "https://img.test/tee-001/back.jpg"],
            "tee-002": ["https://img.test/tee-002/front.jpg"],
        }
    )


@pytest.fixture
def repository(
    memory_store: InMemoryProductStore,
    image_source: InMemoryImageSource,
) -> ProductRepository:
    """Product repository over the in-memory stores."""
    return ProductRepository(memory_store, image_source, image_fetch_concurrency=4)


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module-level singletons before and after each test."""
    import kaayko.application.cart_service as cart_service
    import kaayko.application.product_view_state as product_view_state
    import kaayko.catalog.repository as product_repository

    def reset() -> None:
        product_repository._product_repository = None
        product_view_state._coordinator = None
        cart_service._cart_store = None

    reset()
    yield
    reset()


@pytest.fixture
def product_factory():
    """Factory for products with sensible defaults."""
    return make_product


@pytest.fixture
def document_factory():
    """Factory for raw product documents."""
    return make_document
