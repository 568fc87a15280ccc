"""Product API endpoints.

Provides endpoints for the filtered product view, tags and voting.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from kaayko.api.schemas import (
    ErrorResponse,
    FilterRequest,
    ProductListResponse,
    ProductSchema,
    ProductSearchResponse,
    TagsResponse,
    VoteRequest,
    VoteResponse,
)
from kaayko.application.product_view_state import (
    ProductViewStateCoordinator,
    ViewState,
    get_view_state_coordinator,
)
from kaayko.domain.entities import Product
from kaayko.domain.exceptions import RemoteUnavailableError

router = APIRouter(prefix="/products", tags=["Products"])
tags_router = APIRouter(tags=["Tags"])


# ============================================================================
# Dependencies
# ============================================================================


def get_coordinator() -> ProductViewStateCoordinator:
    """Get the product view-state coordinator."""
    return get_view_state_coordinator()


Coordinator = Annotated[ProductViewStateCoordinator, Depends(get_coordinator)]


# ============================================================================
# Converters
# ============================================================================


def product_to_schema(product: Product) -> ProductSchema:
    """Convert Product entity to response schema."""
    return ProductSchema(**product.to_dict())


def state_to_response(state: ViewState) -> ProductListResponse:
    """Convert a view state to the listing response."""
    return ProductListResponse(
        phase=state.phase,
        items=[product_to_schema(p) for p in state.products],
        total=len(state.all_products),
        tags=list(state.tags),
        selected_tag=state.selected_tag,
        is_loading=state.is_loading,
        error_message=state.error_message,
    )


def remote_unavailable(message: str) -> HTTPException:
    """Build the 503 raised when the remote store fails."""
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={"error_code": "REMOTE_UNAVAILABLE", "message": message},
    )


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ProductListResponse,
    summary="Get product view",
    description="Products passing the active tag filter, plus tags and load status. "
    "Passing `tag` changes the active filter first.",
)
async def list_products(
    coordinator: Coordinator,
    tag: Annotated[str | None, Query(min_length=1, max_length=100)] = None,
) -> ProductListResponse:
    """Get the current product view.

    Args:
        coordinator: View-state coordinator.
        tag: Optional tag to select before listing.

    Returns:
        Product view.
    """
    if tag is not None:
        coordinator.filter_products(tag)
    return state_to_response(coordinator.state)


@router.post(
    "/filter",
    response_model=ProductListResponse,
    summary="Select filter tag",
)
async def filter_products(
    request: FilterRequest,
    coordinator: Coordinator,
) -> ProductListResponse:
    """Select the active tag filter."""
    return state_to_response(coordinator.filter_products(request.tag))


@router.post(
    "/refresh",
    response_model=ProductListResponse,
    summary="Reload products",
    description="Re-fetch every product from the store and reset the filter to 'All'. "
    "Failures are reported in `error_message`.",
)
async def refresh_products(coordinator: Coordinator) -> ProductListResponse:
    """Reload the catalog."""
    await coordinator.refresh()
    return state_to_response(coordinator.state)


@router.get(
    "/search",
    response_model=ProductSearchResponse,
    responses={503: {"model": ErrorResponse}},
    summary="Query products by tag",
    description="Run a tag query against the store instead of filtering the loaded catalog.",
)
async def search_products(
    coordinator: Coordinator,
    tag: Annotated[str, Query(min_length=1, max_length=100)],
) -> ProductSearchResponse:
    """Query the store for products carrying a tag.

    Raises:
        HTTPException: If the store query fails.
    """
    try:
        products = await coordinator.repository.fetch_by_tag(tag)
    except RemoteUnavailableError as e:
        raise remote_unavailable(e.message) from e

    return ProductSearchResponse(
        tag=tag,
        items=[product_to_schema(p) for p in products],
    )


@router.get(
    "/{product_id}",
    response_model=ProductSchema,
    responses={404: {"model": ErrorResponse}},
    summary="Get product",
)
async def get_product(product_id: str, coordinator: Coordinator) -> ProductSchema:
    """Get one product from the loaded catalog.

    An unknown ID raises ``ProductNotFoundError``, answered with 404.
    """
    return product_to_schema(coordinator.repository.get_product(product_id))


@router.post(
    "/{product_id}/votes",
    response_model=VoteResponse,
    responses={
        404: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    summary="Vote on a product",
    description="Atomically change a product's vote count. The new count is visible "
    "immediately.",
)
async def vote_product(
    product_id: str,
    request: VoteRequest,
    coordinator: Coordinator,
) -> VoteResponse:
    """Change a product's votes.

    Raises:
        ProductNotFoundError: If the product is not in the catalog.
        HTTPException: If the store update fails.
    """
    repository = coordinator.repository
    repository.get_product(product_id)

    if not await coordinator.update_votes(product_id, request.delta):
        raise remote_unavailable(
            coordinator.state.error_message or "Vote update failed"
        )

    return VoteResponse(product=product_to_schema(repository.get_product(product_id)))


@tags_router.get(
    "/tags",
    response_model=TagsResponse,
    summary="List tags",
)
async def list_tags(coordinator: Coordinator) -> TagsResponse:
    """List the filter tags of the loaded catalog."""
    state = coordinator.state
    return TagsResponse(tags=list(state.tags), selected_tag=state.selected_tag)
