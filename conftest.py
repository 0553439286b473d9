import shutil
from pathlib import Path

import pytest

from backend import storage
from backend.variable_store import set_variable_store

TEST_DATA_DIR = Path("data-tests")


@pytest.fixture(autouse=True)
def clean_test_data(monkeypatch):
    """Wipe and re-init data-tests/ before every test."""
    monkeypatch.delenv("VARIABLE_STORE_URL", raising=False)
    monkeypatch.delenv("VARIABLE_STORE_API_KEY", raising=False)
    if TEST_DATA_DIR.exists():
        shutil.rmtree(TEST_DATA_DIR)
    storage.init_storage(TEST_DATA_DIR)
    set_variable_store(None)
    yield
    # leave data-tests around after tests for inspection; CI can ignore it
