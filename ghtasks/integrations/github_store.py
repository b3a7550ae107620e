"""GitHub Contents API persistence for ghtasks.

The whole Document lives in one JSON file in a GitHub repository. Reads return
the decoded document plus the blob SHA; writes send the full document together
with the SHA the caller last saw, so GitHub rejects a write whose precondition
is stale (409/422) instead of silently losing another writer's update.

There is no retry, merge or queueing here: callers must not overlap saves and
must reload and reapply their change after a failed save.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Tuple

import requests
from pydantic import ValidationError

from ghtasks.config import GitHubStoreSettings
from ghtasks.models.document import Document, VersionTag

logger = logging.getLogger(__name__)


class SyncErrorKind(str, Enum):
    LOAD_FAILED = "load_failed"
    SAVE_FAILED = "save_failed"


class SyncError(Exception):
    """Load or save of the remote document failed."""

    def __init__(
        self,
        kind: SyncErrorKind,
        message: str,
        *,
        cause: Optional[BaseException] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.cause = cause
        self.status_code = status_code


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a load or save: either (document, version) or an error."""

    document: Optional[Document] = None
    version: Optional[VersionTag] = None
    error: Optional[SyncError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> Tuple[Document, VersionTag]:
        """Return (document, version) or raise the carried SyncError."""
        if self.error is not None:
            raise self.error
        return self.document, self.version


def _status_code(error: requests.RequestException) -> Optional[int]:
    response = getattr(error, "response", None)
    return response.status_code if response is not None else None


def encode_document(document: Document) -> str:
    """Serialize a document to base64-encoded JSON (the Contents API transport form)."""
    return base64.b64encode(document.to_json().encode("utf-8")).decode("ascii")


def decode_document(content: str) -> Document:
    """Decode base64 JSON content (GitHub wraps it in newlines) into a Document."""
    raw = base64.b64decode(content)
    return Document.from_json_dict(json.loads(raw.decode("utf-8")))


def _commit_message(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"Update tasks - {stamp}"


class GitHubContentsStore:
    """Remote store for the task document backed by the GitHub Contents API."""

    def __init__(self, settings: GitHubStoreSettings):
        """Initialize the store.

        Args:
            settings: Repository owner/name, file path, branch and HTTP timeout.
        """
        self.settings = settings

    @property
    def contents_url(self) -> str:
        s = self.settings
        return f"{s.api_base}/repos/{s.owner}/{s.repo}/contents/{s.path}"

    def _headers(self, token: str) -> dict:
        return {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
        }

    def load(self, token: str) -> SyncResult:
        """Fetch and decode the remote document.

        Returns:
            SyncResult with the Document and its blob SHA, or a LOAD_FAILED error.
            Nothing is cached on failure.
        """
        try:
            response = requests.get(
                self.contents_url,
                headers=self._headers(token),
                params={"ref": self.settings.branch},
                timeout=self.settings.timeout_sec,
            )
            response.raise_for_status()
            payload = response.json()
            encoding = payload.get("encoding", "base64")
            if encoding != "base64":
                raise ValueError(f"Unsupported content encoding: {encoding!r}")
            document = decode_document(payload["content"])
            sha = payload["sha"]
        except requests.RequestException as e:
            logger.error(f"Failed to load {self.contents_url}: {type(e).__name__}: {str(e)}")
            return SyncResult(
                error=SyncError(
                    SyncErrorKind.LOAD_FAILED,
                    f"Failed to load tasks from GitHub: {e}",
                    cause=e,
                    status_code=_status_code(e),
                )
            )
        except (KeyError, TypeError, ValueError, binascii.Error, ValidationError) as e:
            logger.error(f"Malformed task document at {self.contents_url}: {type(e).__name__}: {str(e)}")
            return SyncResult(
                error=SyncError(
                    SyncErrorKind.LOAD_FAILED,
                    f"Malformed task document: {e}",
                    cause=e,
                )
            )

        logger.debug(f"Loaded {len(document.tasks)} tasks at {sha}")
        return SyncResult(document=document, version=sha)

    def save(self, token: str, version: Optional[VersionTag], document: Document) -> SyncResult:
        """Overwrite the remote document, conditional on ``version``.

        Args:
            token: GitHub access token
            version: SHA from the last successful load/save; None creates the file
            document: Full document to persist

        Returns:
            SyncResult with the new SHA, or a SAVE_FAILED error (including
            revision-mismatch responses).
        """
        body = {
            "message": _commit_message(),
            "content": encode_document(document),
            "branch": self.settings.branch,
        }
        if version:
            body["sha"] = version

        try:
            response = requests.put(
                self.contents_url,
                headers={**self._headers(token), "Content-Type": "application/json"},
                json=body,
                timeout=self.settings.timeout_sec,
            )
            response.raise_for_status()
            new_sha = response.json()["content"]["sha"]
        except requests.RequestException as e:
            logger.error(f"Failed to save {self.contents_url}: {type(e).__name__}: {str(e)}")
            return SyncResult(
                error=SyncError(
                    SyncErrorKind.SAVE_FAILED,
                    f"Failed to save tasks to GitHub: {e}",
                    cause=e,
                    status_code=_status_code(e),
                )
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Unexpected save response from {self.contents_url}: {type(e).__name__}: {str(e)}")
            return SyncResult(
                error=SyncError(
                    SyncErrorKind.SAVE_FAILED,
                    f"Unexpected response from GitHub: {e}",
                    cause=e,
                )
            )

        logger.debug(f"Saved {len(document.tasks)} tasks: {version} -> {new_sha}")
        return SyncResult(document=document, version=new_sha)
