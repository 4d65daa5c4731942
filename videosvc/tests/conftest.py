"""Pytest configuration and fixtures."""
from unittest.mock import patch
import pytest
from videosvc.core.sql_store import SqlVideoStore
from videosvc.core.video_store import InMemoryVideoStore

TEST_BASE_URL = "http://testserver"


@pytest.fixture(autouse=True)
def patch_settings(tmp_path):
    """Automatically patch settings for all tests to use temp directories."""
    data_dir = tmp_path / "video-data"
    with patch("videosvc.core.config.settings.data_dir", str(data_dir)), \
         patch("videosvc.core.config.settings.api_base_url", TEST_BASE_URL), \
         patch("videosvc.core.config.settings.store_backend", "memory"), \
         patch("videosvc.core.config.settings.data_backend", "local"):
        yield


@pytest.fixture
def memory_store():
    return InMemoryVideoStore(TEST_BASE_URL)


@pytest.fixture
def sql_store(tmp_path):
    store = SqlVideoStore(TEST_BASE_URL, f"sqlite:///{tmp_path / 'videos.db'}")
    yield store
    store.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Run a test once against each store backend."""
    return request.getfixturevalue(f"{request.param}_store")
