"""Cart API endpoints.

Provides endpoints for reading and changing the shopper's cart. The
buy-panel rules (a color and size must be picked when the product
offers them, and a purchase may not exceed the product's maximum
quantity) are checked here before the cart store is touched.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from kaayko.api.products import get_coordinator, product_to_schema
from kaayko.api.schemas import (
    CartLineCreateRequest,
    CartLineSchema,
    CartLineUpdateRequest,
    CartLineUpdateResponse,
    CartResponse,
    ErrorResponse,
)
from kaayko.application.cart_service import CartStore, get_cart_store
from kaayko.application.product_view_state import ProductViewStateCoordinator
from kaayko.domain.entities import CartLine, Product
from kaayko.domain.exceptions import CartLineNotFoundError, InvalidSelectionError

router = APIRouter(prefix="/cart", tags=["Cart"])


# ============================================================================
# Dependencies
# ============================================================================


def get_cart() -> CartStore:
    """Get the cart store."""
    return get_cart_store()


Cart = Annotated[CartStore, Depends(get_cart)]
Coordinator = Annotated[ProductViewStateCoordinator, Depends(get_coordinator)]


# ============================================================================
# Converters
# ============================================================================


def line_to_schema(line: CartLine) -> CartLineSchema:
    """Convert CartLine entity to response schema."""
    return CartLineSchema(
        id=line.id,
        product=product_to_schema(line.product),
        color=line.color,
        size=line.size,
        quantity=line.quantity,
        unit_price=line.unit_price,
        line_total=line.line_total,
    )


def cart_to_response(cart: CartStore) -> CartResponse:
    """Convert the cart store to response schema."""
    return CartResponse(
        lines=[line_to_schema(line) for line in cart.lines()],
        total_item_count=cart.total_item_count(),
        total_price=cart.total_price(),
    )


# ============================================================================
# Selection Rules
# ============================================================================


def _check_option(name: str, value: str | None, options: tuple[str, ...]) -> None:
    if options:
        if value is None:
            raise InvalidSelectionError(name, value, f"a {name} must be selected")
        if value not in options:
            raise InvalidSelectionError(name, value, f"choose one of {list(options)}")
    elif value is not None:
        raise InvalidSelectionError(name, value, f"product has no {name} options")


def validate_selection(
    product: Product,
    color: str | None,
    size: str | None,
    quantity: int,
) -> None:
    """Check a buy selection against the product's options.

    Raises:
        InvalidSelectionError: If the selection does not fit the product.
    """
    _check_option("color", color, product.available_colors)
    _check_option("size", size, product.available_sizes)
    if quantity > product.max_quantity:
        raise InvalidSelectionError(
            "quantity", quantity, f"at most {product.max_quantity} per purchase"
        )


def line_not_found(line_id: str) -> HTTPException:
    """Build the 404 raised for an unknown line."""
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={
            "error_code": "CART_LINE_NOT_FOUND",
            "message": f"Cart line not found: {line_id}",
        },
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get("", response_model=CartResponse, summary="Get cart")
async def get_cart_contents(cart: Cart) -> CartResponse:
    """Get every line with totals."""
    return cart_to_response(cart)


@router.post(
    "/lines",
    response_model=CartResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
    summary="Add to cart",
    description="Add units of a product with a color/size selection. Adding the same "
    "selection again increases the line's quantity.",
)
async def add_line(
    request: CartLineCreateRequest,
    cart: Cart,
    coordinator: Coordinator,
) -> CartResponse:
    """Add a product to the cart.

    Raises:
        ProductNotFoundError: If the product is not in the catalog.
        HTTPException: If the selection is invalid.
    """
    product = coordinator.repository.get_product(request.product_id)

    try:
        validate_selection(product, request.color, request.size, request.quantity)
    except InvalidSelectionError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "error_code": "INVALID_SELECTION",
                "message": e.message,
                "details": [{"field": e.details["field"], "message": e.details["reason"]}],
            },
        ) from e

    cart.add_many(product, request.quantity, request.color, request.size)
    return cart_to_response(cart)


@router.patch(
    "/lines/{line_id}",
    response_model=CartLineUpdateResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Change line quantity",
)
async def update_line(
    line_id: str,
    request: CartLineUpdateRequest,
    cart: Cart,
) -> CartLineUpdateResponse:
    """Change a line's quantity; the line goes away at zero.

    Raises:
        HTTPException: If the line does not exist.
    """
    try:
        line = cart.adjust_quantity(line_id, request.delta)
    except CartLineNotFoundError as e:
        raise line_not_found(line_id) from e

    return CartLineUpdateResponse(
        line=line_to_schema(line) if line else None,
        removed=line is None,
        cart=cart_to_response(cart),
    )


@router.delete(
    "/lines/{line_id}",
    response_model=CartResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Remove line",
)
async def remove_line(line_id: str, cart: Cart) -> CartResponse:
    """Remove a line.

    Raises:
        HTTPException: If the line does not exist.
    """
    try:
        cart.remove(line_id)
    except CartLineNotFoundError as e:
        raise line_not_found(line_id) from e
    return cart_to_response(cart)


@router.delete("", response_model=CartResponse, summary="Empty cart")
async def clear_cart(cart: Cart) -> CartResponse:
    """Remove every line."""
    cart.clear()
    return cart_to_response(cart)


@router.post(
    "/checkout",
    responses={
        400: {"model": ErrorResponse},
        501: {"model": ErrorResponse},
    },
    summary="Checkout (not available)",
    description="Checkout and payment are not offered by this service.",
)
async def checkout(cart: Cart) -> None:
    """Reject checkout.

    Raises:
        HTTPException: Always; 400 for an empty cart, otherwise 501.
    """
    if cart.is_empty:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error_code": "CART_EMPTY", "message": "Cannot checkout an empty cart"},
        )
    raise HTTPException(
        status_code=status.HTTP_501_NOT_IMPLEMENTED,
        detail={
            "error_code": "CHECKOUT_NOT_AVAILABLE",
            "message": "Checkout is not available",
        },
    )
