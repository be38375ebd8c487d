"""Shared fixtures for bz tests."""

import pytest

from bz_cli.factory import AppContext
from tests.fakes import FakeExtractor, FakeTriggerRunner


@pytest.fixture
def make_app_context(tmp_path):
    """Factory for an AppContext whose cache lives under tmp_path."""

    def _make(resolvers, extractor=None, trigger_runner=None) -> AppContext:
        return AppContext(
            user_dir=str(tmp_path / "home"),
            cache_dir=str(tmp_path / "cache"),
            user_config={"servers": {}},
            resolvers=list(resolvers),
            extractor=extractor or FakeExtractor(),
            trigger_runner=trigger_runner or FakeTriggerRunner(),
        )

    return _make


@pytest.fixture
def project_dir(tmp_path):
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture(autouse=True)
def isolated_user_dir(tmp_path, monkeypatch):
    """Keep every test away from the real ~/.bz."""
    monkeypatch.setenv("BZ_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("BZ_CACHE_DIR", raising=False)
    monkeypatch.delenv("BZ_DEBUG", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
