"""Tag universe and tag filtering."""

from typing import Iterable

from kaayko.domain.entities import Product
from kaayko.domain.value_objects import ALL_TAGS


def tag_universe(products: Iterable[Product]) -> list[str]:
    """Every tag in use, sentinel first.

    Args:
        products: Products to collect tags from.

    Returns:
        ``"All"`` followed by the sorted, de-duplicated tags. A product
        tagged with the sentinel itself does not repeat it.
    """
    tags = {tag for product in products for tag in product.tags}
    tags.discard(ALL_TAGS)
    return [ALL_TAGS, *sorted(tags)]


def filter_by_tag(products: Iterable[Product], tag: str) -> tuple[Product, ...]:
    """Products carrying a tag, in their original order.

    Args:
        products: Products to filter.
        tag: Tag to keep; the sentinel keeps everything.

    Returns:
        Matching products.
    """
    if tag == ALL_TAGS:
        return tuple(products)
    return tuple(p for p in products if p.has_tag(tag))
