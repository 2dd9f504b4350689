# ABOUTME: Shared pytest fixtures for bookmeta tests.
# ABOUTME: Provides a fake clock, default resolver settings, and a clean BOOKMETA_* environment.

import os

import pytest

from bookmeta.config import ResolverSettings
from tests.fixtures.fakes import FakeClock


@pytest.fixture(autouse=True)
def _clean_bookmeta_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's BOOKMETA_* environment out of settings loaded in tests."""
    for key in list(os.environ):
        if key.startswith("BOOKMETA_"):
            monkeypatch.delenv(key)


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def settings() -> ResolverSettings:
    """Default resolver settings."""
    return ResolverSettings()
