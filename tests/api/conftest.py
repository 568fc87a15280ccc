"""Shared fixtures for API tests."""

from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from kaayko.application.product_view_state import ProductViewStateCoordinator
from kaayko.catalog.repository import ProductRepository
from kaayko.main import app


@pytest.fixture
def coordinator(repository: ProductRepository) -> ProductViewStateCoordinator:
    """Install a coordinator over the in-memory test stores."""
    import kaayko.application.product_view_state as product_view_state

    coordinator = ProductViewStateCoordinator(repository)
    product_view_state._coordinator = coordinator
    return coordinator


@pytest.fixture
def client(coordinator: ProductViewStateCoordinator) -> Iterator[TestClient]:
    """Create test client; startup loads the test catalog."""
    with TestClient(app) as client:
        yield client
