"""Product Catalog.

Document parsing, tag handling and the product repository that keeps
the merged catalog in sync with the remote store.
"""

from kaayko.catalog.records import parse_documents, product_from_document
from kaayko.catalog.repository import (
    ProductRepository,
    RepositoryUpdate,
    get_product_repository,
)
from kaayko.catalog.tags import filter_by_tag, tag_universe

__all__ = [
    # Records
    "parse_documents",
    "product_from_document",
    # Tags
    "filter_by_tag",
    "tag_universe",
    # Repository
    "ProductRepository",
    "RepositoryUpdate",
    "get_product_repository",
]
