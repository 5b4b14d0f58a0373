from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make the biblioteca package importable when running tests from a checkout
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from biblioteca.core.config import Settings  # noqa: E402
from biblioteca.repositories.json_storage import JsonFileStorage  # noqa: E402
from biblioteca.repositories.local_store import LocalStore  # noqa: E402
from biblioteca.repositories.store_provider import StoreProvider  # noqa: E402


def _make_settings(tmp_path: Path, **overrides) -> Settings:
    values = dict(
        app_env="test",
        supabase_url="",
        supabase_anon_key="",
        remote_timeout_seconds=1.0,
        local_storage_path=tmp_path / "local_storage.json",
        local_storage_url="",
        local_latency_min_ms=0,
        local_latency_max_ms=0,
        notification_timeout_ms=3000,
        log_level="WARNING",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def settings_factory(tmp_path):
    return lambda **overrides: _make_settings(tmp_path, **overrides)


@pytest.fixture()
def storage(tmp_path):
    return JsonFileStorage(tmp_path / "local_storage.json")


@pytest.fixture()
def local_store(storage):
    return LocalStore(storage, latency=(0, 0))


@pytest.fixture()
def local_provider(local_store):
    return StoreProvider(local=local_store)
