"""Tests for product API endpoints."""

from unittest.mock import AsyncMock

from fastapi.testclient import TestClient

from kaayko.application.product_view_state import ProductViewStateCoordinator
from kaayko.domain.exceptions import RemoteUnavailableError
from kaayko.infrastructure.memory_store import InMemoryProductStore


class TestListProducts:
    """Tests for GET /products."""

    def test_lists_loaded_products(self, client: TestClient) -> None:
        """Startup loads the catalog; every product is shown."""
        response = client.get("/products")
        assert response.status_code == 200

        data = response.json()
        assert data["phase"] == "ready"
        assert data["total"] == 3
        assert data["selected_tag"] == "All"
        assert data["is_loading"] is False
        assert data["error_message"] is None
        assert data["tags"] == ["All", "Accessories", "Nostalgia", "Summer", "T-Shirt"]
        assert [p["id"] for p in data["items"]] == ["doc-1", "doc-2", "doc-3"]

        first = data["items"][0]
        assert first["product_id"] == "tee-001"
        assert first["price"] == "$25"
        assert first["votes"] == 4
        assert first["image_urls"] == [
            "https://img.test/tee-001/front.jpg",
            "https://img.test/tee-001/back.jpg",
        ]

    def test_tag_query_selects_filter(self, client: TestClient) -> None:
        """Passing ?tag= changes the active filter."""
        response = client.get("/products", params={"tag": "Summer"})
        assert response.status_code == 200

        data = response.json()
        assert data["selected_tag"] == "Summer"
        assert [p["id"] for p in data["items"]] == ["doc-2"]

        # Filter sticks for later reads
        data = client.get("/products").json()
        assert data["selected_tag"] == "Summer"

    def test_empty_tag_rejected(self, client: TestClient) -> None:
        """An empty tag fails validation."""
        response = client.get("/products", params={"tag": ""})
        assert response.status_code == 422


class TestFilterProducts:
    """Tests for POST /products/filter."""

    def test_filter(self, client: TestClient) -> None:
        """Selecting a tag filters the items."""
        response = client.post("/products/filter", json={"tag": "T-Shirt"})
        assert response.status_code == 200
        assert [p["id"] for p in response.json()["items"]] == ["doc-1", "doc-2"]

    def test_filter_all(self, client: TestClient) -> None:
        """Selecting "All" shows everything."""
        client.post("/products/filter", json={"tag": "Summer"})
        response = client.post("/products/filter", json={"tag": "All"})
        assert len(response.json()["items"]) == 3

    def test_unknown_tag(self, client: TestClient) -> None:
        """An unused tag shows nothing."""
        response = client.post("/products/filter", json={"tag": "Winter"})
        assert response.status_code == 200
        assert response.json()["items"] == []


class TestRefreshProducts:
    """Tests for POST /products/refresh."""

    def test_refresh_resets_filter(self, client: TestClient) -> None:
        """Refresh reloads and selects "All"."""
        client.post("/products/filter", json={"tag": "Summer"})

        response = client.post("/products/refresh")

        assert response.status_code == 200
        data = response.json()
        assert data["selected_tag"] == "All"
        assert len(data["items"]) == 3

    def test_refresh_failure_reported_in_state(
        self,
        client: TestClient,
        memory_store: InMemoryProductStore,
    ) -> None:
        """A failed reload keeps the products and reports the error."""
        memory_store.list_documents = AsyncMock(  # type: ignore[method-assign]
            side_effect=RemoteUnavailableError("list_documents", "offline")
        )

        response = client.post("/products/refresh")

        assert response.status_code == 200
        data = response.json()
        assert len(data["items"]) == 3
        assert "offline" in data["error_message"]


class TestSearchProducts:
    """Tests for GET /products/search."""

    def test_search_by_tag(self, client: TestClient) -> None:
        """The store is queried for the tag."""
        response = client.get("/products/search", params={"tag": "Accessories"})
        assert response.status_code == 200

        data = response.json()
        assert data["tag"] == "Accessories"
        assert [p["id"] for p in data["items"]] == ["doc-3"]

    def test_search_requires_tag(self, client: TestClient) -> None:
        """The tag parameter is required."""
        assert client.get("/products/search").status_code == 422

    def test_search_failure(self, client: TestClient, memory_store: InMemoryProductStore) -> None:
        """A failing query returns 503."""
        memory_store.query_by_tag = AsyncMock(  # type: ignore[method-assign]
            side_effect=RemoteUnavailableError("query_by_tag", "offline")
        )

        response = client.get("/products/search", params={"tag": "Summer"})

        assert response.status_code == 503
        assert response.json()["error_code"] == "REMOTE_UNAVAILABLE"


class TestGetProduct:
    """Tests for GET /products/{product_id}."""

    def test_get_product(self, client: TestClient) -> None:
        """A loaded product is returned."""
        response = client.get("/products/doc-2")
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Product doc-2"
        assert data["tags"] == ["T-Shirt", "Summer"]
        assert data["max_quantity"] == 10

    def test_get_product_not_found(self, client: TestClient) -> None:
        """An unknown product returns 404."""
        response = client.get("/products/missing")
        assert response.status_code == 404
        data = response.json()
        assert data["error_code"] == "PRODUCT_NOT_FOUND"
        assert data["request_id"] is not None


class TestVotes:
    """Tests for POST /products/{product_id}/votes."""

    def test_like(self, client: TestClient) -> None:
        """A like raises the count right away."""
        response = client.post("/products/doc-1/votes", json={"delta": 1})
        assert response.status_code == 200
        assert response.json()["product"]["votes"] == 5

        listed = client.get("/products").json()["items"][0]
        assert listed["votes"] == 5

    def test_default_delta_is_one(self, client: TestClient) -> None:
        """An empty body votes +1."""
        response = client.post("/products/doc-2/votes", json={})
        assert response.json()["product"]["votes"] == 2

    def test_unlike(self, client: TestClient) -> None:
        """A negative delta lowers the count."""
        response = client.post("/products/doc-1/votes", json={"delta": -1})
        assert response.json()["product"]["votes"] == 3

    def test_zero_delta_rejected(self, client: TestClient) -> None:
        """A zero delta fails validation."""
        response = client.post("/products/doc-1/votes", json={"delta": 0})
        assert response.status_code == 422

    def test_unknown_product(self, client: TestClient) -> None:
        """Voting on an unknown product returns 404."""
        response = client.post("/products/missing/votes", json={"delta": 1})
        assert response.status_code == 404
        assert response.json()["error_code"] == "PRODUCT_NOT_FOUND"
        assert response.json()["details"] == []

    def test_store_failure(
        self,
        client: TestClient,
        memory_store: InMemoryProductStore,
        coordinator: ProductViewStateCoordinator,
    ) -> None:
        """A refused update returns 503 and leaves the count."""
        memory_store.increment_votes = AsyncMock(  # type: ignore[method-assign]
            side_effect=RemoteUnavailableError("increment_votes", "permission denied")
        )

        response = client.post("/products/doc-1/votes", json={"delta": 1})

        assert response.status_code == 503
        assert "permission denied" in response.json()["message"]
        assert coordinator.state.all_products[0].votes == 4


class TestTags:
    """Tests for GET /tags."""

    def test_list_tags(self, client: TestClient) -> None:
        """Tags come sentinel first with the active filter."""
        client.post("/products/filter", json={"tag": "Nostalgia"})

        response = client.get("/tags")

        assert response.status_code == 200
        assert response.json() == {
            "tags": ["All", "Accessories", "Nostalgia", "Summer", "T-Shirt"],
            "selected_tag": "Nostalgia",
        }
