"""Product document parsing.

Turns raw store documents into ``Product`` values. Fields with a wrong
type fall back to their defaults; a document without a string
``productID`` is malformed and gets skipped.
"""

from typing import Any, Iterable

import structlog

from kaayko.domain.entities import DEFAULT_MAX_QUANTITY, Product
from kaayko.domain.exceptions import MalformedRecordError
from kaayko.infrastructure.store import ProductDocument

logger = structlog.get_logger()

PRODUCT_KEY_FIELD = "productID"


def _string(data: dict[str, Any], name: str) -> str:
    value = data.get(name)
    return value if isinstance(value, str) else ""


def _integer(data: dict[str, Any], name: str, default: int) -> int:
    value = data.get(name)
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    return value


def _strings(data: dict[str, Any], name: str) -> tuple[str, ...]:
    # All-or-nothing: one non-string entry discards the whole list.
    value = data.get(name)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        return ()
    return tuple(value)


def product_from_document(document: ProductDocument) -> Product:
    """Build a product from a store document, without images.

    Args:
        document: Raw store document.

    Returns:
        Product with an empty image list.

    Raises:
        MalformedRecordError: If ``productID`` is missing or not a string.
    """
    data = document.data
    product_key = data.get(PRODUCT_KEY_FIELD)
    if not isinstance(product_key, str):
        raise MalformedRecordError(document.id, PRODUCT_KEY_FIELD)

    return Product(
        id=document.id,
        product_id=product_key,
        title=_string(data, "title"),
        description=_string(data, "description"),
        price=_string(data, "price"),
        votes=_integer(data, "votes", 0),
        tags=_strings(data, "tags"),
        available_colors=_strings(data, "availableColors"),
        available_sizes=_strings(data, "availableSizes"),
        max_quantity=_integer(data, "maxQuantity", DEFAULT_MAX_QUANTITY),
    )


def parse_documents(documents: Iterable[ProductDocument]) -> list[Product]:
    """Parse documents in order, dropping malformed ones.

    Args:
        documents: Raw store documents.

    Returns:
        Products for every well-formed document.
    """
    products: list[Product] = []
    for document in documents:
        try:
            products.append(product_from_document(document))
        except MalformedRecordError as e:
            logger.debug("Skipping product document", **e.details)
    return products
