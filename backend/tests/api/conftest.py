"""API test fixtures backed by the fixture call map directory."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from callmap.loader import load_chain
from callmap.provider import SignatureProvider
from callmap_api.api.v1.deps import get_chain, get_provider
from callmap_api.main import app


@pytest.fixture
def client(callmap_dir: Path, callmap_versions: list[str]) -> Iterator[TestClient]:
    """Test client whose call map comes from tests/fixtures/callmap."""
    provider = SignatureProvider.from_directory(callmap_dir, callmap_versions)
    chain = load_chain(callmap_dir, callmap_versions)
    app.dependency_overrides[get_provider] = lambda: provider
    app.dependency_overrides[get_chain] = lambda: chain
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
