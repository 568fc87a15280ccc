"""API layer module.

Contains FastAPI routers and request/response schemas.
"""

from kaayko.api.cart import router as cart_router
from kaayko.api.health import router as health_router
from kaayko.api.products import router as products_router
from kaayko.api.products import tags_router

__all__ = [
    "cart_router",
    "health_router",
    "products_router",
    "tags_router",
]
