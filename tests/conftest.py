"""Shared fixtures for FairSplit tests."""

import pytest

from fairsplit.config import get_settings
from fairsplit.config.settings import SplitSettings, StorageSettings
from fairsplit.controller import StateController
from fairsplit.services.storage import InMemoryBackend, PersistenceStore


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Run every test in an empty directory with freshly loaded settings."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "SPLIT_DEFAULT_PARTY_A_SALARY",
        "SPLIT_DEFAULT_PARTY_B_SALARY",
        "SPLIT_DEFAULT_EXPENSE",
        "SPLIT_MAX_DIGITS",
        "SPLIT_THOUSANDS_SEPARATOR",
        "STORAGE_BACKEND",
        "STORAGE_FILE_PATH",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def store(backend):
    return PersistenceStore(backend, settings=StorageSettings())


@pytest.fixture
def controller(store):
    return StateController(store=store, settings=SplitSettings())
