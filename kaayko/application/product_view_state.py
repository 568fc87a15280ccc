"""Product view-state coordinator.

Bridges repository data to displayable state: subscribes to the
product repository, applies the selected tag filter, and republishes a
complete ``ViewState`` snapshot on every change.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable

import structlog

from kaayko.catalog.repository import (
    ProductRepository,
    RepositoryUpdate,
    get_product_repository,
)
from kaayko.catalog.tags import filter_by_tag, tag_universe
from kaayko.domain.entities import Product
from kaayko.domain.events import Publisher, Subscription
from kaayko.domain.exceptions import RemoteUnavailableError
from kaayko.domain.state_machines import ViewPhase
from kaayko.domain.value_objects import ALL_TAGS
from kaayko.infrastructure.config import settings

logger = structlog.get_logger()


@dataclass(frozen=True)
class ViewState:
    """Snapshot of what the presentation layer shows.

    Attributes:
        phase: Lifecycle phase.
        products: Products passing the selected tag filter.
        all_products: Every product in the catalog.
        tags: Tag universe, sentinel first.
        selected_tag: Active filter tag.
        is_loading: Whether a load is in progress.
        error_message: Last failure, if any.
    """

    phase: ViewPhase = ViewPhase.IDLE
    products: tuple[Product, ...] = ()
    all_products: tuple[Product, ...] = ()
    tags: tuple[str, ...] = (ALL_TAGS,)
    selected_tag: str = ALL_TAGS
    is_loading: bool = False
    error_message: str | None = None


class ProductViewStateCoordinator:
    """Coordinator for the filtered product view.

    State machine: IDLE -> LOADING -> READY, then READY on every
    update. A failure keeps the phase at READY and sets
    ``error_message``, since earlier data stays displayable.
    """

    def __init__(self, repository: ProductRepository, realtime: bool = False) -> None:
        """Initialize coordinator.

        Args:
            repository: Product repository to follow.
            realtime: Keep a standing subscription instead of a one-off fetch.
        """
        self.repository = repository
        self.realtime = realtime
        self._state = ViewState()
        self._states: Publisher[ViewState] = Publisher("product_view_state")
        self._subscription: Subscription | None = None

    @property
    def state(self) -> ViewState:
        """Current view state."""
        return self._state

    def subscribe(self, listener: Callable[[ViewState], None]) -> Subscription:
        """Receive every new view state.

        Args:
            listener: Called with each ``ViewState`` snapshot.

        Returns:
            Subscription handle.
        """
        return self._states.subscribe(listener)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Begin loading products.

        Subscribes to the repository and either opens the standing
        subscription or runs a single fetch. The first product batch
        moves the state to READY. Calling again after start is a no-op.
        """
        if self._state.phase is not ViewPhase.IDLE:
            return

        self._set_state(phase=ViewPhase.LOADING, is_loading=True, error_message=None)
        self._subscription = self.repository.subscribe(self._on_repository_update)

        try:
            if self.realtime:
                self.repository.start_listening()
            else:
                await self.repository.fetch_all()
        except RemoteUnavailableError as e:
            logger.warning("Product load failed", error=e.message)
            self._fail(e.message)

    async def refresh(self) -> None:
        """Re-fetch every product and reset the filter to the sentinel."""
        if self._state.phase is ViewPhase.IDLE:
            await self.start()
            return

        self._set_state(
            is_loading=True,
            error_message=None,
            selected_tag=ALL_TAGS,
            products=self._state.all_products,
        )
        try:
            await self.repository.fetch_all()
        except RemoteUnavailableError as e:
            logger.warning("Product refresh failed", error=e.message)
            self._fail(e.message)
            return
        self._set_state(is_loading=False)

    def stop(self) -> None:
        """Stop following the repository."""
        self.repository.stop_listening()
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def filter_products(self, tag: str) -> ViewState:
        """Select a tag and recompute the visible products.

        Args:
            tag: Tag to show; the sentinel shows everything.

        Returns:
            The new view state.
        """
        self._set_state(
            selected_tag=tag,
            products=filter_by_tag(self._state.all_products, tag),
        )
        return self._state

    async def update_votes(self, product_id: str, delta: int) -> bool:
        """Change a product's votes through the repository.

        The repository publishes the optimistic change, which flows back
        through the subscription. A failure sets ``error_message``; no
        local state is rolled back.

        Args:
            product_id: Store document ID.
            delta: Vote change.

        Returns:
            True if the store accepted the update.
        """
        try:
            await self.repository.update_votes(product_id, delta)
        except RemoteUnavailableError as e:
            logger.warning(
                "Vote update failed",
                product_id=product_id,
                delta=delta,
                error=e.message,
            )
            self._set_state(error_message=e.message)
            return False
        return True

    # -------------------------------------------------------------------------
    # Repository Updates
    # -------------------------------------------------------------------------

    def _on_repository_update(self, update: RepositoryUpdate) -> None:
        if update.error is not None:
            self._fail(update.error)
            return

        self._set_state(
            phase=ViewPhase.READY,
            is_loading=False,
            all_products=update.products,
            tags=tuple(tag_universe(update.products)),
            products=filter_by_tag(update.products, self._state.selected_tag),
        )

    def _fail(self, message: str) -> None:
        self._set_state(phase=ViewPhase.READY, is_loading=False, error_message=message)

    def _set_state(self, **changes: Any) -> None:
        current = self._state
        if "phase" in changes:
            current.phase.transition_to(changes["phase"])
        self._state = replace(current, **changes)
        self._states.publish(self._state)


# Global coordinator instance
_coordinator: ProductViewStateCoordinator | None = None


def get_view_state_coordinator() -> ProductViewStateCoordinator:
    """Get the product view-state coordinator singleton."""
    global _coordinator
    if _coordinator is None:
        _coordinator = ProductViewStateCoordinator(
            get_product_repository(),
            realtime=settings.realtime_updates,
        )
    return _coordinator
