"""API schemas for the Kaayko store API.

Pydantic models for request/response validation and serialization.
"""

from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from kaayko.domain.state_machines import ViewPhase


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Product Schemas
# ============================================================================


class ProductSchema(BaseModel):
    """A product as shown in listings."""

    id: str = Field(..., description="Store document ID")
    product_id: str = Field(..., description="Stable external ID (image folder key)")
    title: str = Field(default="", description="Product title")
    description: str = Field(default="", description="Product description")
    price: str = Field(default="", description="Display price (e.g., '$25')")
    votes: int = Field(default=0, description="Vote count")
    tags: list[str] = Field(default_factory=list, description="Category tags")
    image_urls: list[str] = Field(default_factory=list, description="Image download URLs")
    available_colors: list[str] = Field(default_factory=list, description="Color options")
    available_sizes: list[str] = Field(default_factory=list, description="Size options")
    max_quantity: int = Field(..., ge=1, description="Maximum units per purchase")


class ProductListResponse(BaseModel):
    """Current product view: filtered products plus view status."""

    phase: ViewPhase = Field(..., description="View lifecycle phase")
    items: list[ProductSchema] = Field(..., description="Products passing the filter")
    total: int = Field(..., description="Number of products in the whole catalog")
    tags: list[str] = Field(..., description="Tag universe, 'All' first")
    selected_tag: str = Field(..., description="Active filter tag")
    is_loading: bool = Field(..., description="Whether a load is in progress")
    error_message: str | None = Field(default=None, description="Last failure, if any")


class ProductSearchResponse(BaseModel):
    """Products returned by a server-side tag query."""

    tag: str = Field(..., description="Queried tag")
    items: list[ProductSchema] = Field(..., description="Matching products")


class TagsResponse(BaseModel):
    """Available filter tags."""

    tags: list[str] = Field(..., description="Tag universe, 'All' first")
    selected_tag: str = Field(..., description="Active filter tag")


class FilterRequest(BaseModel):
    """Request to change the active tag filter."""

    tag: str = Field(..., min_length=1, max_length=100, description="Tag to show ('All' for everything)")


class VoteRequest(BaseModel):
    """Request to change a product's votes."""

    delta: int = Field(default=1, ge=-100, le=100, description="Vote change (+1 like, -1 unlike)")

    @field_validator("delta")
    @classmethod
    def delta_not_zero(cls, value: int) -> int:
        """Reject a no-op vote."""
        if value == 0:
            raise ValueError("delta must not be zero")
        return value


class VoteResponse(BaseModel):
    """Product after a vote change."""

    product: ProductSchema = Field(..., description="Product with its updated vote count")


# ============================================================================
# Cart Schemas
# ============================================================================


class CartLineCreateRequest(BaseModel):
    """Request to add a product to the cart."""

    product_id: str = Field(..., min_length=1, description="Store document ID of the product")
    color: str | None = Field(default=None, description="Selected color")
    size: str | None = Field(default=None, description="Selected size")
    quantity: int = Field(default=1, ge=1, description="Units to add")


class CartLineUpdateRequest(BaseModel):
    """Request to change a line's quantity."""

    delta: int = Field(..., description="Quantity change; reaching zero removes the line")


class CartLineSchema(BaseModel):
    """A line in the cart."""

    id: str = Field(..., description="Line ID")
    product: ProductSchema = Field(..., description="Product snapshot taken when added")
    color: str | None = Field(default=None, description="Selected color")
    size: str | None = Field(default=None, description="Selected size")
    quantity: int = Field(..., ge=1, description="Units")
    unit_price: Decimal = Field(..., description="Unit price parsed from the display price")
    line_total: Decimal = Field(..., description="Unit price times quantity")


class CartResponse(BaseModel):
    """The whole cart with totals."""

    lines: list[CartLineSchema] = Field(..., description="Cart lines")
    total_item_count: int = Field(..., description="Sum of quantities")
    total_price: Decimal = Field(..., description="Approximate total from display prices")


class CartLineUpdateResponse(BaseModel):
    """Outcome of a quantity change."""

    line: CartLineSchema | None = Field(default=None, description="Updated line, absent if removed")
    removed: bool = Field(..., description="Whether the line was removed")
    cart: CartResponse = Field(..., description="Cart after the change")
