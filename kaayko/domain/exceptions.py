"""Domain exceptions.

All domain-level errors raised by the catalog, the cart and the
remote store adapters. Every failure in this service is recoverable:
callers surface them as messages, never as crashes.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# State Machine Errors
# ============================================================================


class InvalidStateTransitionError(DomainError):
    """Raised when an invalid state transition is attempted."""

    def __init__(
        self,
        entity_type: str,
        current_state: str,
        target_state: str,
        allowed_transitions: list[str] | None = None,
    ) -> None:
        """Initialize invalid state transition error.

        Args:
            entity_type: Type of the stateful object (e.g., "ViewState").
            current_state: Current state.
            target_state: Attempted target state.
            allowed_transitions: List of allowed target states from current state.
        """
        allowed = allowed_transitions or []
        message = (
            f"Cannot transition {entity_type} "
            f"from '{current_state}' to '{target_state}'. "
            f"Allowed transitions: {allowed}"
        )
        super().__init__(
            message,
            details={
                "entity_type": entity_type,
                "current_state": current_state,
                "target_state": target_state,
                "allowed_transitions": allowed,
            },
        )


# ============================================================================
# Remote Store Errors
# ============================================================================


class RemoteUnavailableError(DomainError):
    """Raised when a query, listen or update call to the backing store fails.

    Never retried automatically.
    """

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize remote unavailable error.

        Args:
            operation: Store operation that failed (e.g., "list_documents").
            reason: Underlying error description.
        """
        super().__init__(
            f"Remote store unavailable during {operation}: {reason}",
            details={"operation": operation, "reason": reason},
        )
        self.operation = operation
        self.reason = reason


class MalformedRecordError(DomainError):
    """Raised when a product document lacks its required external id.

    The repository drops such documents silently.
    """

    def __init__(self, document_id: str, field_name: str) -> None:
        """Initialize malformed record error.

        Args:
            document_id: Store document ID.
            field_name: Required field that is missing or mistyped.
        """
        super().__init__(
            f"Document {document_id} is missing required field '{field_name}'",
            details={"document_id": document_id, "field": field_name},
        )


class ImageResolutionError(DomainError):
    """Raised when a single image object's download URL cannot be resolved."""

    def __init__(self, object_name: str, reason: str) -> None:
        """Initialize image resolution error.

        Args:
            object_name: Full storage object name.
            reason: Underlying error description.
        """
        super().__init__(
            f"Could not resolve download URL for {object_name}: {reason}",
            details={"object_name": object_name, "reason": reason},
        )


# ============================================================================
# Catalog Errors
# ============================================================================


class ProductNotFoundError(DomainError):
    """Raised when a product is not in the current catalog snapshot."""

    def __init__(self, product_id: str) -> None:
        """Initialize product not found error.

        Args:
            product_id: Store document ID of the product.
        """
        super().__init__(
            f"Product {product_id} not found",
            details={"product_id": product_id},
        )


# ============================================================================
# Cart Errors
# ============================================================================


class CartError(DomainError):
    """Base class for cart-related errors."""

    pass


class CartLineNotFoundError(CartError):
    """Raised when a cart line is not found."""

    def __init__(self, line_id: str) -> None:
        """Initialize cart line not found error.

        Args:
            line_id: ID of the line.
        """
        super().__init__(
            f"Line {line_id} not found in cart",
            details={"line_id": line_id},
        )


class InvalidSelectionError(CartError):
    """Raised when a buy selection does not fit the product's options."""

    def __init__(self, field_name: str, value: object, reason: str) -> None:
        """Initialize invalid selection error.

        Args:
            field_name: Selection field ("color", "size" or "quantity").
            value: The rejected value.
            reason: Explanation of why the selection is invalid.
        """
        super().__init__(
            f"Invalid {field_name} {value!r}: {reason}",
            details={"field": field_name, "value": value, "reason": reason},
        )
