"""Domain layer for the Kaayko store.

Exports the product and cart models, value objects, the view
lifecycle state machine, observer plumbing and domain exceptions.
"""

from kaayko.domain.entities import DEFAULT_MAX_QUANTITY, CartLine, Product
from kaayko.domain.events import Publisher, Subscription
from kaayko.domain.exceptions import (
    CartError,
    CartLineNotFoundError,
    DomainError,
    ImageResolutionError,
    InvalidSelectionError,
    InvalidStateTransitionError,
    MalformedRecordError,
    ProductNotFoundError,
    RemoteUnavailableError,
)
from kaayko.domain.state_machines import ViewPhase
from kaayko.domain.value_objects import ALL_TAGS, CartLineKey, parse_display_price

__all__ = [
    # Entities
    "CartLine",
    "DEFAULT_MAX_QUANTITY",
    "Product",
    # Value objects
    "ALL_TAGS",
    "CartLineKey",
    "parse_display_price",
    # State machines
    "ViewPhase",
    # Observers
    "Publisher",
    "Subscription",
    # Exceptions
    "CartError",
    "CartLineNotFoundError",
    "DomainError",
    "ImageResolutionError",
    "InvalidSelectionError",
    "InvalidStateTransitionError",
    "MalformedRecordError",
    "ProductNotFoundError",
    "RemoteUnavailableError",
]
