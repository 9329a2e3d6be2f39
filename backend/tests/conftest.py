"""
Shared test fixtures and configuration.
"""

import pytest
import os

# Set test environment variables before importing doubtdesk modules
os.environ.setdefault("SECRET_KEY", "test-secret-key-for-testing")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/doubtdesk_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")
os.environ.setdefault("LLM_API_KEY", "")
os.environ.setdefault("GEMINI_API_KEY", "")

from doubtdesk.storage import LocalStorage, SessionStore  # noqa: E402


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def local_storage(tmp_path):
    return LocalStorage(str(tmp_path))


@pytest.fixture
def session_store(local_storage):
    return SessionStore(local_storage)
