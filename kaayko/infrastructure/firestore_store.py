"""Firestore-backed product store.

Reads and watches the product collection through the Firebase Admin
SDK. The SDK client is synchronous; blocking calls run in a worker
thread so the event loop stays free, and snapshot callbacks arrive on
the SDK's own watch thread.
"""

import asyncio
from typing import Any, Iterable

import firebase_admin
import structlog
from firebase_admin import credentials, firestore
from google.api_core.exceptions import GoogleAPIError

from kaayko.domain.exceptions import RemoteUnavailableError
from kaayko.infrastructure.config import Settings
from kaayko.infrastructure.store import (
    DocumentsCallback,
    ErrorCallback,
    ProductDocument,
    ProductStore,
)

logger = structlog.get_logger()


def get_firebase_app(settings: Settings) -> firebase_admin.App:
    """Get or initialize the default Firebase Admin app.

    Uses the service account file from settings when given, otherwise
    Application Default Credentials.

    Args:
        settings: Application settings.

    Returns:
        Initialized Firebase app.
    """
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass

    if settings.firebase_credentials_path:
        cred = credentials.Certificate(settings.firebase_credentials_path)
    else:
        cred = credentials.ApplicationDefault()

    options: dict[str, Any] = {"storageBucket": settings.storage_bucket}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id

    app = firebase_admin.initialize_app(cred, options)
    logger.info(
        "Firebase Admin SDK initialized",
        project_id=settings.firebase_project_id,
        storage_bucket=settings.storage_bucket,
    )
    return app


def _to_document(snapshot: Any) -> ProductDocument:
    return ProductDocument(id=snapshot.id, data=snapshot.to_dict() or {})


class FirestoreWatch:
    """Listener registration wrapping a Firestore ``Watch``."""

    def __init__(self, watch: Any) -> None:
        self._watch = watch

    def remove(self) -> None:
        """Stop the snapshot listener."""
        self._watch.unsubscribe()


class FirestoreProductStore(ProductStore):
    """Product collection in Cloud Firestore."""

    def __init__(self, client: Any, collection_name: str = "kaaykoproducts") -> None:
        """Initialize store.

        Args:
            client: ``google.cloud.firestore.Client`` (from firebase_admin).
            collection_name: Name of the product collection.
        """
        self.client = client
        self.collection_name = collection_name

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirestoreProductStore":
        """Create a store using the default Firebase app.

        Args:
            settings: Application settings.

        Returns:
            FirestoreProductStore instance.
        """
        app = get_firebase_app(settings)
        return cls(firestore.client(app), settings.products_collection)

    def _collection(self) -> Any:
        return self.client.collection(self.collection_name)

    async def list_documents(self) -> list[ProductDocument]:
        try:
            snapshots = await asyncio.to_thread(lambda: list(self._collection().stream()))
        except GoogleAPIError as e:
            logger.error(
                "Product query failed",
                collection=self.collection_name,
                error=str(e),
            )
            raise RemoteUnavailableError("list_documents", str(e)) from e
        return [_to_document(s) for s in snapshots]

    async def query_by_tag(self, tag: str) -> list[ProductDocument]:
        query = self._collection().where(
            filter=firestore.FieldFilter("tags", "array_contains", tag)
        )
        try:
            snapshots = await asyncio.to_thread(lambda: list(query.stream()))
        except GoogleAPIError as e:
            logger.error(
                "Product tag query failed",
                collection=self.collection_name,
                tag=tag,
                error=str(e),
            )
            raise RemoteUnavailableError("query_by_tag", str(e)) from e
        return [_to_document(s) for s in snapshots]

    async def increment_votes(self, document_id: str, delta: int) -> None:
        doc_ref = self._collection().document(document_id)
        try:
            await asyncio.to_thread(
                doc_ref.update, {"votes": firestore.Increment(delta)}
            )
        except GoogleAPIError as e:
            logger.error(
                "Vote update failed",
                document_id=document_id,
                delta=delta,
                error=str(e),
            )
            raise RemoteUnavailableError("increment_votes", str(e)) from e

    def listen(
        self,
        on_documents: DocumentsCallback,
        on_error: ErrorCallback,
    ) -> FirestoreWatch:
        def on_snapshot(doc_snapshots: list[Any], changes: Any, read_time: Any) -> None:
            try:
                on_documents([_to_document(s) for s in doc_snapshots])
            except Exception as e:
                logger.exception(
                    "Snapshot delivery failed",
                    collection=self.collection_name,
                    error=str(e),
                )
                on_error(e)

        try:
            watch = self._collection().on_snapshot(on_snapshot)
        except GoogleAPIError as e:
            raise RemoteUnavailableError("listen", str(e)) from e

        logger.info("Listening for product changes", collection=self.collection_name)
        return FirestoreWatch(watch)

    async def upsert_documents(self, documents: Iterable[ProductDocument]) -> int:
        """Write documents in one batch, merging into existing ones.

        Args:
            documents: Documents to write.

        Returns:
            Number of documents written.

        Raises:
            RemoteUnavailableError: If the batch commit fails.
        """
        batch = self.client.batch()
        count = 0
        for document in documents:
            batch.set(self._collection().document(document.id), document.data, merge=True)
            count += 1
        try:
            await asyncio.to_thread(batch.commit)
        except GoogleAPIError as e:
            raise RemoteUnavailableError("upsert_documents", str(e)) from e
        return count
