"""Shared fixtures for call map tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from callmap.signature import Signature

FIXTURES_DIR = Path(__file__).parent / "fixtures" / "callmap"
FIXTURE_VERSIONS = ["8.2", "8.3", "8.4"]


@pytest.fixture
def callmap_dir() -> Path:
    """Directory with a baseline at 8.4 and deltas into 8.3 and 8.4."""
    return FIXTURES_DIR


@pytest.fixture
def callmap_versions() -> list[str]:
    return list(FIXTURE_VERSIONS)


@pytest.fixture
def exit_old() -> Signature:
    return Signature.of("mixed", ("status", "int|string"))


@pytest.fixture
def exit_new() -> Signature:
    return Signature.of("mixed", ("status=", "int|string"))
