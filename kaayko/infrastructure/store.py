"""Remote product store contract.

The product catalog lives in two remote places: a document collection
keyed by document ID, and a blob store holding each product's images
under a folder named after its ``productID``. Adapters implement the
two halves separately so the image side can be swapped on its own.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Protocol


@dataclass(frozen=True)
class ProductDocument:
    """Raw product document as read from the store.

    Attributes:
        id: Store document ID.
        data: Document fields, unvalidated.
    """

    id: str
    data: dict[str, Any] = field(default_factory=dict)


DocumentsCallback = Callable[[list[ProductDocument]], None]
ErrorCallback = Callable[[Exception], None]


class ListenerHandle(Protocol):
    """Registration returned by ``ProductStore.listen``."""

    def remove(self) -> None:
        """Stop delivering change notifications."""
        ...


class ProductStore(ABC):
    """Access contract for the product document collection."""

    @abstractmethod
    async def list_documents(self) -> list[ProductDocument]:
        """Read every document in the collection.

        Raises:
            RemoteUnavailableError: If the query fails.
        """

    @abstractmethod
    async def query_by_tag(self, tag: str) -> list[ProductDocument]:
        """Read the documents whose ``tags`` array contains a tag.

        Raises:
            RemoteUnavailableError: If the query fails.
        """

    @abstractmethod
    async def increment_votes(self, document_id: str, delta: int) -> None:
        """Atomically add ``delta`` to a document's ``votes`` field.

        Raises:
            RemoteUnavailableError: If the update fails.
        """

    @abstractmethod
    def listen(
        self,
        on_documents: DocumentsCallback,
        on_error: ErrorCallback,
    ) -> ListenerHandle:
        """Start a standing subscription to the collection.

        ``on_documents`` receives the complete document set after every
        change, starting with the current contents. Callbacks may run on
        any thread.

        Raises:
            RemoteUnavailableError: If the subscription cannot be opened.
        """


class ImageSource(ABC):
    """Access contract for the product image folders."""

    @abstractmethod
    async def list_objects(self, product_key: str) -> list[str]:
        """List the object names stored under a product's image folder.

        Raises:
            RemoteUnavailableError: If the listing fails.
        """

    @abstractmethod
    async def resolve_url(self, object_name: str) -> str:
        """Resolve the public download URL of one object.

        Raises:
            ImageResolutionError: If the URL cannot be resolved.
        """

    async def close(self) -> None:
        """Release network resources."""
        return None
