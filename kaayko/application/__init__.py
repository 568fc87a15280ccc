"""Application services layer.

Contains the cart store and the product view-state coordinator that
the presentation layer reads from and calls into.
"""

from kaayko.application.cart_service import CartStore, get_cart_store
from kaayko.application.product_view_state import (
    ProductViewStateCoordinator,
    ViewState,
    get_view_state_coordinator,
)

__all__ = [
    "CartStore",
    "ProductViewStateCoordinator",
    "ViewState",
    "get_cart_store",
    "get_view_state_coordinator",
]
