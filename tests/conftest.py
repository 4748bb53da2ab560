"""Shared test fixtures and configuration."""

import os

import pytest

from note_search.config import Settings
from note_search.domain.model import Document
from note_search.search.engine import IndexEngine


# Pin every setting so a developer's .env or shell cannot leak into tests
TEST_ENV = {
    "NOTE_SEARCH_WORKER_THREAD_NAME": "note-search-test-worker",
    "NOTE_SEARCH_INBOUND_QUEUE_SIZE": "0",
    "NOTE_SEARCH_SHUTDOWN_TIMEOUT_SECONDS": "5",
    "NOTE_SEARCH_BM25_K1": "1.2",
    "NOTE_SEARCH_BM25_B": "0.75",
    "NOTE_SEARCH_LOG_LEVEL": "info",
    "NOTE_SEARCH_LOG_JSON": "false",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value
os.environ.pop("NOTE_SEARCH_REQUEST_TIMEOUT_SECONDS", None)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset note-search environment variables before each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    monkeypatch.delenv("NOTE_SEARCH_REQUEST_TIMEOUT_SECONDS", raising=False)


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def engine() -> IndexEngine:
    return IndexEngine()


@pytest.fixture
def sample_notes() -> list[Document]:
    return [
        Document(id="d1", text="the cat sat"),
        Document(id="d2", text="the dog sat on the cat"),
        Document(id="d3", text="Cat, meet dog."),
    ]
