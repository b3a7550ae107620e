"""Pytest fixtures and configuration for ghtasks tests."""

import hashlib
from datetime import datetime, timezone
from typing import Optional

import pytest
from fastapi.testclient import TestClient

from ghtasks.api.app import create_app
from ghtasks.config import GitHubStoreSettings
from ghtasks.engine.session import TaskSession
from ghtasks.integrations.credentials import TokenStore
from ghtasks.integrations.github_store import (
    SyncError,
    SyncErrorKind,
    SyncResult,
    decode_document,
    encode_document,
)
from ghtasks.models.document import Document


class FakeRemoteStore:
    """In-memory stand-in for the GitHub Contents API.

    Enforces the SHA precondition deterministically: a save naming any version
    other than the current one fails with SAVE_FAILED (409), never merges.
    The SHA is derived from the content, so an unchanged document keeps its SHA.
    """

    def __init__(self, document: Optional[Document] = None):
        self.content: Optional[str] = None
        self.sha: Optional[str] = None
        self.load_calls = 0
        self.save_calls = 0
        self.fail_next_save = False
        if document is not None:
            self._write(document)

    def _write(self, document: Document) -> None:
        self.content = encode_document(document)
        self.sha = hashlib.sha1(self.content.encode("ascii")).hexdigest()

    def load(self, token: str) -> SyncResult:
        self.load_calls += 1
        if self.content is None:
            return SyncResult(error=SyncError(SyncErrorKind.LOAD_FAILED, "Not Found", status_code=404))
        return SyncResult(document=decode_document(self.content), version=self.sha)

    def save(self, token: str, version: Optional[str], document: Document) -> SyncResult:
        self.save_calls += 1
        if self.fail_next_save:
            self.fail_next_save = False
            return SyncResult(error=SyncError(SyncErrorKind.SAVE_FAILED, "Server Error", status_code=500))
        if version != self.sha:
            return SyncResult(
                error=SyncError(SyncErrorKind.SAVE_FAILED, "sha does not match", status_code=409)
            )
        self._write(document)
        return SyncResult(document=document, version=self.sha)


@pytest.fixture
def fixed_now():
    """A fixed, timezone-aware 'now' (Monday 2026-10-19 09:30 UTC)."""
    return datetime(2026, 10, 19, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def sample_task_base(fixed_now):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    return {
        "id": "task-1",
        "title": "Test Task",
        "priority": "P1",
        "completed": False,
        "completedAt": None,
        "project": None,
        "themes": [],
        "tags": [],
        "dueDate": None,
        "created": fixed_now,
    }


@pytest.fixture
def sample_recurring_base(fixed_now):
    return {
        "id": "recurring-1",
        "title": "Stretch",
        "project": None,
        "frequency": "daily",
        "completions": [],
        "created": fixed_now,
    }


@pytest.fixture
def token_store(tmp_path):
    store = TokenStore(str(tmp_path / "token.json"))
    store.set("test_token_value")
    return store


@pytest.fixture
def remote():
    return FakeRemoteStore(Document())


@pytest.fixture
def empty_remote():
    """Remote repository where the task file does not exist yet."""
    return FakeRemoteStore()


@pytest.fixture
def session(remote, token_store):
    task_session = TaskSession(remote, token_store)
    assert task_session.load().ok
    return task_session


@pytest.fixture
def test_client(session):
    return TestClient(create_app(session, GitHubStoreSettings(owner="octo")))
