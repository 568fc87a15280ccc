"""In-memory product store.

Local stand-in for the Firestore collection and the Storage image
folders, used for development and tests. Documents keep the same
field layout as the remote collection.
"""

import copy
import json
from pathlib import Path
from typing import Any, Iterable

import structlog

from kaayko.domain.exceptions import ImageResolutionError, RemoteUnavailableError
from kaayko.infrastructure.store import (
    DocumentsCallback,
    ErrorCallback,
    ImageSource,
    ProductDocument,
    ProductStore,
)

logger = structlog.get_logger()

DEFAULT_SEED_FILE = Path(__file__).with_name("seed_products.json")


class _MemoryListener:
    """Listener registration on an in-memory store."""

    def __init__(
        self,
        store: "InMemoryProductStore",
        on_documents: DocumentsCallback,
        on_error: ErrorCallback,
    ) -> None:
        self._store = store
        self.on_documents = on_documents
        self.on_error = on_error

    def remove(self) -> None:
        """Stop delivering change notifications."""
        self._store._remove_listener(self)


class InMemoryProductStore(ProductStore):
    """Product collection held in a dict.

    Every write notifies listeners with the full document set, the way
    a Firestore snapshot listener does.
    """

    def __init__(self, documents: Iterable[ProductDocument] = ()) -> None:
        self._documents: dict[str, dict[str, Any]] = {
            doc.id: copy.deepcopy(doc.data) for doc in documents
        }
        self._listeners: list[_MemoryListener] = []

    def snapshot(self) -> list[ProductDocument]:
        """Copy of the current documents, in insertion order."""
        return [
            ProductDocument(id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._documents.items()
        ]

    async def list_documents(self) -> list[ProductDocument]:
        return self.snapshot()

    async def query_by_tag(self, tag: str) -> list[ProductDocument]:
        return [
            doc
            for doc in self.snapshot()
            if isinstance(doc.data.get("tags"), list) and tag in doc.data["tags"]
        ]

    async def increment_votes(self, document_id: str, delta: int) -> None:
        data = self._documents.get(document_id)
        if data is None:
            raise RemoteUnavailableError(
                "increment_votes", f"No document to update: {document_id}"
            )
        votes = data.get("votes")
        if not isinstance(votes, int) or isinstance(votes, bool):
            votes = 0
        data["votes"] = votes + delta
        self._notify()

    def listen(
        self,
        on_documents: DocumentsCallback,
        on_error: ErrorCallback,
    ) -> _MemoryListener:
        listener = _MemoryListener(self, on_documents, on_error)
        self._listeners.append(listener)
        listener.on_documents(self.snapshot())
        return listener

    def put_document(self, document: ProductDocument) -> None:
        """Create or replace a document and notify listeners."""
        self._documents[document.id] = copy.deepcopy(document.data)
        self._notify()

    def delete_document(self, document_id: str) -> None:
        """Delete a document (if present) and notify listeners."""
        if self._documents.pop(document_id, None) is not None:
            self._notify()

    def fail_listeners(self, error: Exception) -> None:
        """Report a listen error to every listener."""
        for listener in list(self._listeners):
            listener.on_error(error)

    @property
    def listener_count(self) -> int:
        """Number of active listeners."""
        return len(self._listeners)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener.on_documents(self.snapshot())

    def _remove_listener(self, listener: _MemoryListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)


class InMemoryImageSource(ImageSource):
    """Image folders held in a dict of product key to download URLs."""

    def __init__(
        self,
        images: dict[str, list[str]] | None = None,
        namespace: str = "kaaykoStoreTShirtImages",
    ) -> None:
        self.namespace = namespace
        self._objects: dict[str, str] = {}
        self._folders: dict[str, list[str]] = {}
        for product_key, urls in (images or {}).items():
            self.set_images(product_key, urls)

    def set_images(self, product_key: str, urls: list[str]) -> None:
        """Replace the images stored under a product key."""
        for name in self._folders.pop(product_key, []):
            self._objects.pop(name, None)
        names = []
        for index, url in enumerate(urls):
            name = f"{self.namespace}/{product_key}/image-{index}"
            self._objects[name] = url
            names.append(name)
        self._folders[product_key] = names

    async def list_objects(self, product_key: str) -> list[str]:
        return list(self._folders.get(product_key, []))

    async def resolve_url(self, object_name: str) -> str:
        url = self._objects.get(object_name)
        if url is None:
            raise ImageResolutionError(object_name, "object not found")
        return url


def load_seed(
    path: str | Path | None = None,
    namespace: str = "kaaykoStoreTShirtImages",
) -> tuple[InMemoryProductStore, InMemoryImageSource]:
    """Build in-memory stores from a JSON seed file.

    The file holds ``{"products": [{"id", "data", "images"}]}`` where
    ``data`` uses the remote document field names and ``images`` lists
    download URLs for the product's ``productID`` folder.

    Args:
        path: Seed file path. Defaults to the bundled sample catalog.
        namespace: Image folder namespace.

    Returns:
        Document store and image source populated from the file.
    """
    seed_path = Path(path) if path else DEFAULT_SEED_FILE
    payload = json.loads(seed_path.read_text(encoding="utf-8"))

    documents: list[ProductDocument] = []
    images: dict[str, list[str]] = {}
    for entry in payload.get("products", []):
        data = entry.get("data", {})
        documents.append(ProductDocument(id=entry["id"], data=data))
        product_key = data.get("productID")
        if isinstance(product_key, str):
            images[product_key] = list(entry.get("images", []))

    logger.info(
        "Loaded product seed",
        path=str(seed_path),
        document_count=len(documents),
    )
    return InMemoryProductStore(documents), InMemoryImageSource(images, namespace)
