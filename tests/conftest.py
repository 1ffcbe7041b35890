"""
Pytest configuration and fixtures for Relayer tests.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add the repository root to path for imports
# This allows `from relayer.engine import ...` to work
repo_root = Path(__file__).parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from relayer.config import AppSettings, get_settings
from relayer.engine.executor import ActionExecutor
from relayer.integrations.documents import FileDocumentStore
from relayer.integrations.http import OutboundResponse
from relayer.integrations.secrets import InMemorySecretStore


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached process-wide; isolate each test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def settings(tmp_path):
    """Settings pointing the document store at a temporary directory."""
    return AppSettings(documents_root=str(tmp_path))


@pytest.fixture
def held_secret():
    """Secret the session holds during a call."""
    return {"username": "relay-user", "password": "hunter2-s3cr3t"}


@pytest.fixture
def secret_store(held_secret):
    """In-memory secret store preloaded with the API and QA secrets."""
    return InMemorySecretStore(
        {
            "relayer/development": held_secret,
            "common/QA": {"apiKey": "qa-key-123"},
        }
    )


@pytest.fixture
def documents_dir(tmp_path):
    """Directory holding one JSON and one JPEG document."""
    folder = tmp_path / "documents"
    folder.mkdir()
    (folder / "document.json").write_text('{"name": "relayer", "items": [1, 2]}')
    (folder / "document.jpg").write_bytes(b"\xff\xd8\xff\xe0fake-jpeg\xff\xd9")
    return tmp_path


@pytest.fixture
def document_store(documents_dir):
    return FileDocumentStore(documents_dir)


@pytest.fixture
def mock_runner():
    """Outbound runner whose send() returns a JSON user by default."""
    runner = AsyncMock()
    runner.send.return_value = OutboundResponse(
        status_code=200,
        headers={"content-type": "application/json; charset=utf-8"},
        body={"name": "x"},
        content_type="application/json; charset=utf-8",
    )
    return runner


@pytest.fixture
def executor(mock_runner, secret_store, document_store):
    return ActionExecutor(
        runner=mock_runner,
        secrets=secret_store,
        documents=document_store,
    )


@pytest.fixture
def sample_event_data():
    """API Gateway shaped event for the text endpoint."""
    return {
        "path": "/relayer/v1/text",
        "httpMethod": "GET",
        "queryStringParameters": None,
        "headers": {"Accept": "*/*"},
        "body": None,
    }
