"""
Shared test fixtures and configuration.
"""

import os
import tempfile

# Keep test logs out of the source tree; must run before app modules import
os.environ.setdefault("EXTFORGE_LOG_DIR", tempfile.mkdtemp(prefix="extforge-logs-"))

import pytest
from fastapi.testclient import TestClient

from main import create_app
from models.schemas import GeneratedFile
from services.errors import GenerationError
from utils.config import AppConfig


POPUP_FILES = [
    GeneratedFile(filename="manifest.json", content='{"name": "Demo", "permissions": ["storage", "tabs"]}'),
    GeneratedFile(filename="popup.html", content='<html><head><link rel="stylesheet" href="style.css"></head>'
                                                 '<body><script src="popup.js"></script></body></html>'),
    GeneratedFile(filename="popup.js", content="console.log(1)"),
    GeneratedFile(filename="style.css", content="body { color: red; }"),
]


class FakeAdapter:
    """Stands in for the hosted model: returns canned files or raises."""

    def __init__(self, files=None, error=None):
        self.files = list(POPUP_FILES if files is None else files)
        self.error = error
        self.calls = []

    async def generate_files(self, messages):
        self.calls.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.files


@pytest.fixture
def fake_adapter():
    return FakeAdapter()


@pytest.fixture
def failing_adapter():
    return FakeAdapter(error=GenerationError("Failed to generate code. quota exceeded"))


@pytest.fixture
def config(tmp_path):
    return AppConfig(data_dir=str(tmp_path / "data"))


@pytest.fixture
def store(tmp_path):
    from database.kv_store import KeyValueStore
    return KeyValueStore(str(tmp_path / "kv"))


@pytest.fixture
def app(config, fake_adapter):
    return create_app(config, adapter_factory=lambda: fake_adapter)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
