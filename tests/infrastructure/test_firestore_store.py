"""Tests for the Firestore product store.

The Firestore client is replaced by a MagicMock; these tests check how
the store drives the SDK and maps its errors.
"""

from unittest.mock import MagicMock, patch

import pytest
from google.api_core.exceptions import ServiceUnavailable

from kaayko.domain.exceptions import RemoteUnavailableError
from kaayko.infrastructure.config import Settings
from kaayko.infrastructure.firestore_store import FirestoreProductStore, get_firebase_app


def make_snapshot(doc_id: str, data: dict | None) -> MagicMock:
    """Create a fake document snapshot."""
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.to_dict.return_value = data
    return snapshot


@pytest.fixture
def client() -> MagicMock:
    """Mock Firestore client."""
    return MagicMock()


@pytest.fixture
def store(client: MagicMock) -> FirestoreProductStore:
    """Store over the mock client."""
    return FirestoreProductStore(client, "kaaykoproducts")


class TestReads:
    """Tests for collection reads."""

    @pytest.mark.asyncio
    async def test_list_documents(self, store: FirestoreProductStore, client: MagicMock) -> None:
        """Every snapshot becomes a document."""
        client.collection.return_value.stream.return_value = [
            make_snapshot("doc-1", {"productID": "tee-001"}),
            make_snapshot("doc-2", None),
        ]

        documents = await store.list_documents()

        client.collection.assert_called_with("kaaykoproducts")
        assert [d.id for d in documents] == ["doc-1", "doc-2"]
        assert documents[0].data == {"productID": "tee-001"}
        assert documents[1].data == {}

    @pytest.mark.asyncio
    async def test_list_documents_failure(
        self, store: FirestoreProductStore, client: MagicMock
    ) -> None:
        """SDK errors become remote failures."""
        client.collection.return_value.stream.side_effect = ServiceUnavailable("backend down")

        with pytest.raises(RemoteUnavailableError) as exc_info:
            await store.list_documents()

        assert exc_info.value.operation == "list_documents"

    @pytest.mark.asyncio
    async def test_query_by_tag(self, store: FirestoreProductStore, client: MagicMock) -> None:
        """The query filters on the tags array."""
        query = client.collection.return_value.where.return_value
        query.stream.return_value = [make_snapshot("doc-2", {"productID": "tee-002"})]

        documents = await store.query_by_tag("Summer")

        assert [d.id for d in documents] == ["doc-2"]
        field_filter = client.collection.return_value.where.call_args.kwargs["filter"]
        assert field_filter.field_path == "tags"
        assert field_filter.op_string == "array_contains"
        assert field_filter.value == "Summer"

    @pytest.mark.asyncio
    async def test_query_by_tag_failure(
        self, store: FirestoreProductStore, client: MagicMock
    ) -> None:
        """Query errors become remote failures."""
        query = client.collection.return_value.where.return_value
        query.stream.side_effect = ServiceUnavailable("backend down")

        with pytest.raises(RemoteUnavailableError):
            await store.query_by_tag("Summer")


class TestVotes:
    """Tests for vote increments."""

    @pytest.mark.asyncio
    async def test_uses_atomic_increment(
        self, store: FirestoreProductStore, client: MagicMock
    ) -> None:
        """The update sends a server-side increment."""
        doc_ref = client.collection.return_value.document.return_value

        await store.increment_votes("doc-1", -1)

        client.collection.return_value.document.assert_called_with("doc-1")
        update = doc_ref.update.call_args.args[0]
        assert update["votes"].value == -1

    @pytest.mark.asyncio
    async def test_failure(self, store: FirestoreProductStore, client: MagicMock) -> None:
        """Update errors become remote failures."""
        doc_ref = client.collection.return_value.document.return_value
        doc_ref.update.side_effect = ServiceUnavailable("backend down")

        with pytest.raises(RemoteUnavailableError) as exc_info:
            await store.increment_votes("doc-1", 1)

        assert exc_info.value.operation == "increment_votes"


class TestListen:
    """Tests for the snapshot listener."""

    def test_delivers_documents_and_unsubscribes(
        self, store: FirestoreProductStore, client: MagicMock
    ) -> None:
        """Snapshots are converted; remove() unsubscribes the watch."""
        collection = client.collection.return_value
        received: list[list[str]] = []

        handle = store.listen(lambda docs: received.append([d.id for d in docs]), MagicMock())
        callback = collection.on_snapshot.call_args.args[0]
        callback([make_snapshot("doc-1", {"productID": "a"})], [], None)
        handle.remove()

        assert received == [["doc-1"]]
        collection.on_snapshot.return_value.unsubscribe.assert_called_once()

    def test_callback_failure_reported(
        self, store: FirestoreProductStore, client: MagicMock
    ) -> None:
        """An exception while delivering goes to the error callback."""
        collection = client.collection.return_value
        on_error = MagicMock()

        def broken(documents) -> None:
            raise RuntimeError("bad snapshot")

        store.listen(broken, on_error)
        collection.on_snapshot.call_args.args[0]([], [], None)

        on_error.assert_called_once()
        assert str(on_error.call_args.args[0]) == "bad snapshot"

    def test_open_failure(self, store: FirestoreProductStore, client: MagicMock) -> None:
        """Failing to open the listener is a remote failure."""
        client.collection.return_value.on_snapshot.side_effect = ServiceUnavailable("down")

        with pytest.raises(RemoteUnavailableError):
            store.listen(MagicMock(), MagicMock())


class TestUpsert:
    """Tests for batch writes."""

    @pytest.mark.asyncio
    async def test_writes_batch(self, store: FirestoreProductStore, client: MagicMock, documents) -> None:
        """Every document is merged into the collection in one commit."""
        batch = client.batch.return_value

        written = await store.upsert_documents(documents)

        assert written == 3
        assert batch.set.call_count == 3
        assert batch.set.call_args.kwargs == {"merge": True}
        batch.commit.assert_called_once()

    @pytest.mark.asyncio
    async def test_commit_failure(
        self, store: FirestoreProductStore, client: MagicMock, documents
    ) -> None:
        """Commit errors become remote failures."""
        client.batch.return_value.commit.side_effect = ServiceUnavailable("down")

        with pytest.raises(RemoteUnavailableError):
            await store.upsert_documents(documents)


class TestFirebaseApp:
    """Tests for Firebase app initialization."""

    def test_reuses_existing_app(self) -> None:
        """An initialized default app is returned as is."""
        app = MagicMock()
        with patch("kaayko.infrastructure.firestore_store.firebase_admin.get_app", return_value=app):
            assert get_firebase_app(Settings(_env_file=None)) is app

    def test_initializes_with_service_account(self) -> None:
        """A credentials file and project are passed to the SDK."""
        settings = Settings(
            _env_file=None,
            firebase_credentials_path="/secrets/sa.json",
            firebase_project_id="kaaykostore",
        )
        module = "kaayko.infrastructure.firestore_store"
        with (
            patch(f"{module}.firebase_admin.get_app", side_effect=ValueError("no app")),
            patch(f"{module}.credentials.Certificate") as certificate,
            patch(f"{module}.firebase_admin.initialize_app") as initialize_app,
        ):
            get_firebase_app(settings)

        certificate.assert_called_once_with("/secrets/sa.json")
        options = initialize_app.call_args.args[1]
        assert options == {"storageBucket": "kaaykostore.appspot.com", "projectId": "kaaykostore"}
