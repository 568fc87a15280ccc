"""Product repository.

Owns the canonical product list. Reads product documents from the
remote store, merges each with the download URLs of its images, and
publishes the merged list to subscribers, either on demand or from a
standing subscription to the collection.

Example usage:
    repo = ProductRepository(store, images)
    repo.subscribe(lambda update: print(len(update.products)))
    await repo.fetch_all()
    await repo.update_votes(product_id, +1)
"""

import asyncio
from collections import defaultdict
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, TypeVar

import structlog

from kaayko.catalog.records import parse_documents
from kaayko.catalog.tags import tag_universe
from kaayko.domain.entities import Product
from kaayko.domain.events import Publisher, Subscription
from kaayko.domain.exceptions import ProductNotFoundError, RemoteUnavailableError
from kaayko.domain.value_objects import ALL_TAGS
from kaayko.infrastructure.config import settings
from kaayko.infrastructure.factory import build_remote_store
from kaayko.infrastructure.store import (
    ImageSource,
    ListenerHandle,
    ProductDocument,
    ProductStore,
)

logger = structlog.get_logger()

T = TypeVar("T")
R = TypeVar("R")


@dataclass(frozen=True)
class RepositoryUpdate:
    """Notification sent to repository subscribers.

    Attributes:
        products: The complete merged product list.
        error: Set when the standing subscription failed; products then
            holds the last list published.
    """

    products: tuple[Product, ...]
    error: str | None = None


async def _gather_bounded(
    items: list[T],
    func: Callable[[T], Awaitable[R]],
    limit: int,
) -> list[R | Exception]:
    """Run ``func`` over items with at most ``limit`` calls in flight.

    Failures are returned in place of results, in input order.
    """
    semaphore = asyncio.Semaphore(limit)

    async def run(item: T) -> R:
        async with semaphore:
            return await func(item)

    results = await asyncio.gather(*(run(item) for item in items), return_exceptions=True)
    outcomes: list[R | Exception] = []
    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            # Cancellation is not a per-item failure.
            raise result
        outcomes.append(result)
    return outcomes


class ProductRepository:
    """Repository for the merged product catalog.

    Products are held as an immutable tuple that is swapped in by a
    single assignment, so readers never observe a half-merged list.
    """

    def __init__(
        self,
        store: ProductStore,
        images: ImageSource,
        image_fetch_concurrency: int = 8,
    ) -> None:
        """Initialize repository.

        Args:
            store: Product document store.
            images: Product image source.
            image_fetch_concurrency: Most image requests in flight per batch.
        """
        self.store = store
        self.images = images
        self.image_fetch_concurrency = max(image_fetch_concurrency, 1)
        self._products: tuple[Product, ...] = ()
        self._image_cache: dict[str, tuple[str, ...]] = {}
        self._updates: Publisher[RepositoryUpdate] = Publisher("product_repository")
        self._vote_locks: defaultdict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._generation = 0
        self._listener: ListenerHandle | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._merge_tasks: set[asyncio.Task] = set()

    # -------------------------------------------------------------------------
    # Query Methods
    # -------------------------------------------------------------------------

    @property
    def products(self) -> tuple[Product, ...]:
        """Current merged product list."""
        return self._products

    @property
    def is_listening(self) -> bool:
        """Whether the standing subscription is open."""
        return self._listener is not None

    def get_product(self, product_id: str) -> Product:
        """Find a product in the current list by document ID.

        Args:
            product_id: Store document ID.

        Returns:
            The product.

        Raises:
            ProductNotFoundError: If the current list has no such product.
        """
        for product in self._products:
            if product.id == product_id:
                return product
        raise ProductNotFoundError(product_id)

    def subscribe(self, listener: Callable[[RepositoryUpdate], None]) -> Subscription:
        """Receive every published product list.

        Args:
            listener: Called with a ``RepositoryUpdate`` on each publish.

        Returns:
            Subscription handle.
        """
        return self._updates.subscribe(listener)

    # -------------------------------------------------------------------------
    # Fetching
    # -------------------------------------------------------------------------

    async def fetch_all(self) -> list[Product]:
        """Fetch every product and merge it with freshly listed images.

        The merged list replaces the cached one and is published, unless
        a newer fetch or snapshot started while this one was merging. A
        failed query leaves merges already in flight untouched.

        Returns:
            Products in store order.

        Raises:
            RemoteUnavailableError: If the document query fails.
        """
        documents = await self.store.list_documents()
        generation = self._next_generation()
        merged = await self._merge(parse_documents(documents), refresh=True)
        self._publish_if_current(merged, generation)

        logger.info(
            "Fetched products",
            product_count=len(merged),
            document_count=len(documents),
        )
        return list(merged)

    async def fetch_by_tag(self, tag: str) -> list[Product]:
        """Fetch the products carrying a tag with a server-side query.

        The result does not replace the cached list. The sentinel tag
        fetches everything.

        Args:
            tag: Tag to query.

        Returns:
            Matching products, merged with images.

        Raises:
            RemoteUnavailableError: If the query fails.
        """
        if tag == ALL_TAGS:
            return await self.fetch_all()

        documents = await self.store.query_by_tag(tag)
        merged = await self._merge(parse_documents(documents), refresh=False)
        return list(merged)

    async def fetch_images(self, product_key: str) -> list[str]:
        """Resolve the download URLs of every image of a product.

        Never raises: a listing failure yields no images, and an object
        whose URL cannot be resolved is left out.

        Args:
            product_key: The product's ``productID``.

        Returns:
            Download URLs in listing order.
        """
        try:
            return await self._resolve_images(product_key)
        except RemoteUnavailableError as e:
            logger.warning(
                "Image listing failed",
                product_key=product_key,
                error=e.message,
            )
            return []

    async def _resolve_images(self, product_key: str) -> list[str]:
        object_names = await self.images.list_objects(product_key)
        results = await _gather_bounded(
            object_names, self.images.resolve_url, self.image_fetch_concurrency
        )

        urls: list[str] = []
        for object_name, result in zip(object_names, results):
            if isinstance(result, Exception):
                logger.warning(
                    "Image URL resolution failed",
                    product_key=product_key,
                    object_name=object_name,
                    error=str(result),
                )
                continue
            urls.append(result)
        return urls

    def fetch_tags(self) -> list[str]:
        """Tags of the current product list, sentinel first.

        Returns:
            ``"All"`` followed by the sorted unique tags.
        """
        return tag_universe(self._products)

    # -------------------------------------------------------------------------
    # Votes
    # -------------------------------------------------------------------------

    async def update_votes(self, product_id: str, delta: int) -> None:
        """Add ``delta`` to a product's votes.

        The store applies an atomic increment. Once it succeeds the
        cached copy is updated and published right away, without waiting
        for the standing subscription to echo the change. Updates to the
        same product run one at a time.

        Args:
            product_id: Store document ID.
            delta: Vote change (+1 to like, -1 to unlike).

        Raises:
            RemoteUnavailableError: If the store update fails; the cached
                vote count is left unchanged.
        """
        async with self._vote_locks[product_id]:
            await self.store.increment_votes(product_id, delta)
            self._apply_vote(product_id, delta)

        logger.info("Votes updated", product_id=product_id, delta=delta)

    def _apply_vote(self, product_id: str, delta: int) -> None:
        products = self._products
        for index, product in enumerate(products):
            if product.id == product_id:
                updated = product.with_votes(product.votes + delta)
                self._publish(products[:index] + (updated,) + products[index + 1 :])
                return

    # -------------------------------------------------------------------------
    # Real-time Updates
    # -------------------------------------------------------------------------

    def start_listening(self) -> None:
        """Open the standing subscription to the product collection.

        Must be called from the event loop that will run the merges.
        Does nothing if already listening.

        Raises:
            RemoteUnavailableError: If the subscription cannot be opened.
        """
        if self._listener is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._listener = self.store.listen(self._on_documents, self._on_listen_error)

    def stop_listening(self) -> None:
        """Close the standing subscription, if open."""
        if self._listener is None:
            return
        self._listener.remove()
        self._listener = None
        logger.info("Stopped listening for product changes")

    def _on_documents(self, documents: list[ProductDocument]) -> None:
        # Store callbacks may arrive on a foreign thread.
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._schedule_merge, list(documents))

    def _on_listen_error(self, error: Exception) -> None:
        if self._loop is None or self._loop.is_closed():
            return
        self._loop.call_soon_threadsafe(self._publish_error, str(error))

    def _schedule_merge(self, documents: list[ProductDocument]) -> None:
        generation = self._next_generation()
        task = asyncio.create_task(self._merge_snapshot(documents, generation))
        self._merge_tasks.add(task)
        task.add_done_callback(self._merge_tasks.discard)

    async def _merge_snapshot(self, documents: list[ProductDocument], generation: int) -> None:
        merged = await self._merge(parse_documents(documents), refresh=False)
        self._publish_if_current(merged, generation)

    async def wait_for_merges(self) -> None:
        """Wait until every scheduled snapshot merge has finished."""
        while self._merge_tasks:
            await asyncio.gather(*list(self._merge_tasks), return_exceptions=True)

    # -------------------------------------------------------------------------
    # Merging and Publishing
    # -------------------------------------------------------------------------

    async def _merge(self, raw: Iterable[Product], refresh: bool) -> tuple[Product, ...]:
        """Attach images to products.

        Cached image lists are reused unless ``refresh`` is set; missing
        ones are fetched concurrently. A product whose fetch failed gets
        no images and is still included.
        """
        raw = list(raw)
        keys = list(dict.fromkeys(p.product_id for p in raw))
        if not refresh:
            keys = [key for key in keys if key not in self._image_cache]

        results = await _gather_bounded(keys, self._resolve_images, self.image_fetch_concurrency)
        for key, result in zip(keys, results):
            if isinstance(result, Exception):
                logger.warning("Image fetch failed", product_key=key, error=str(result))
                continue
            self._image_cache[key] = tuple(result)

        return tuple(p.with_images(self._image_cache.get(p.product_id, ())) for p in raw)

    def _next_generation(self) -> int:
        self._generation += 1
        return self._generation

    def _publish_if_current(self, products: tuple[Product, ...], generation: int) -> None:
        if generation != self._generation:
            logger.debug(
                "Discarding stale product merge",
                generation=generation,
                latest_generation=self._generation,
            )
            return
        self._publish(products)

    def _publish(self, products: tuple[Product, ...]) -> None:
        self._products = products
        self._updates.publish(RepositoryUpdate(products=products))

    def _publish_error(self, message: str) -> None:
        logger.error("Product subscription failed", error=message)
        self._updates.publish(RepositoryUpdate(products=self._products, error=message))


# Global repository instance
_product_repository: ProductRepository | None = None


def get_product_repository() -> ProductRepository:
    """Get the product repository singleton.

    Returns:
        ProductRepository built from the configured remote store.
    """
    global _product_repository
    if _product_repository is None:
        store, images = build_remote_store(settings)
        _product_repository = ProductRepository(
            store,
            images,
            image_fetch_concurrency=settings.image_fetch_concurrency,
        )
    return _product_repository
