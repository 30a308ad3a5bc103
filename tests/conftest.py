"""Pytest configuration and fixtures."""

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from toyamm.api.endpoints import get_service
from toyamm.api.main import app
from toyamm.api.service import PoolService
from toyamm.pool import ToyAMM
from toyamm.settlement import RecordingTransferService

from tests.helpers import NDENOM, make_liquid_pool, make_pool


@pytest.fixture
def transfers() -> RecordingTransferService:
    """Transfer service that records every outbound handoff."""
    return RecordingTransferService()


@pytest.fixture
def pool(transfers: RecordingTransferService) -> ToyAMM:
    """Initialized pool with zero reserves."""
    return make_pool(transfers)


@pytest.fixture
def liquid_pool(transfers: RecordingTransferService) -> ToyAMM:
    """Pool holding 100 FT0 and 300 FT1 (24 decimals)."""
    return make_liquid_pool(100 * NDENOM, 300 * NDENOM, transfers)


# =============================================================================
# API fixtures
# =============================================================================


@pytest.fixture
def service(transfers: RecordingTransferService) -> PoolService:
    """Fresh service wrapping an initialized, empty pool."""
    return PoolService(make_pool(transfers))


@pytest.fixture
def client(service: PoolService) -> Iterator[TestClient]:
    """Test client bound to the injected service."""
    app.dependency_overrides[get_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def uninitialized_client() -> Iterator[TestClient]:
    """Test client bound to a pool that has not been initialized."""
    fresh = PoolService(ToyAMM(RecordingTransferService()))
    app.dependency_overrides[get_service] = lambda: fresh
    yield TestClient(app)
    app.dependency_overrides.clear()

