"""One-way subtask sync to GitHub issue descriptions.

The app is the source of truth; the issue body only mirrors the task's
description plus a rendered subtask checklist.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from ghtasks.config import GITHUB_API_BASE, DEFAULT_TIMEOUT_SEC
from ghtasks.engine.subtasks import build_issue_body
from ghtasks.models.task import Subtask, TaskRecord

logger = logging.getLogger(__name__)


def validate_sync_config(
    owner: Optional[str], repo: Optional[str], token: Optional[str], issue_number: Any
) -> Tuple[bool, List[str]]:
    """Check that an issue sync has everything it needs.

    Returns:
        Tuple of (valid, errors)
    """
    errors = []
    if not owner or not isinstance(owner, str):
        errors.append("Repository owner is required")
    if not repo or not isinstance(repo, str):
        errors.append("Repository name is required")
    if not token or not isinstance(token, str):
        errors.append("GitHub token is required")
    if isinstance(issue_number, bool) or not isinstance(issue_number, int) or issue_number <= 0:
        errors.append("Issue number must be a valid number")
    return (not errors, errors)


class GitHubIssueClient:
    """Client for writing subtask checklists into GitHub issues."""

    def __init__(self, token: str, api_base: str = GITHUB_API_BASE, timeout_sec: float = DEFAULT_TIMEOUT_SEC):
        if not token:
            raise ValueError("GitHub token is required.")
        self.token = token
        self.api_base = api_base.rstrip("/")
        self.timeout_sec = timeout_sec
        self.headers = {
            "Authorization": f"token {token}",
            "Accept": "application/vnd.github.v3+json",
            "Content-Type": "application/json",
        }

    def sync_subtasks(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        current_body: Optional[str],
        subtasks: List[Subtask],
    ) -> dict:
        """Replace the issue body with the description plus a fresh subtask section.

        Returns:
            Updated issue dictionary from the GitHub API

        Raises:
            RuntimeError: If the API call fails
        """
        url = f"{self.api_base}/repos/{owner}/{repo}/issues/{issue_number}"
        body = build_issue_body(current_body, subtasks)
        try:
            response = requests.patch(url, headers=self.headers, json={"body": body}, timeout=self.timeout_sec)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            raise RuntimeError(f"Failed to sync subtasks to GitHub: {e}") from e

    def sync_task(self, owner: str, repo: str, task: TaskRecord) -> dict:
        """Sync one task's description and subtasks into its linked issue.

        Raises:
            ValueError: If the task is not linked to an issue
            RuntimeError: If the API call fails
        """
        valid, errors = validate_sync_config(owner, repo, self.token, task.github_issue_number)
        if not valid:
            raise ValueError("; ".join(errors))
        return self.sync_subtasks(owner, repo, task.github_issue_number, task.description or "", task.subtasks)

    def batch_sync_subtasks(self, owner: str, repo: str, tasks: List[TaskRecord]) -> List[Dict[str, Any]]:
        """Sync every task that is linked to an issue; one failure does not stop the rest."""
        results = []
        for task in tasks:
            if not task.github_issue_number:
                continue
            try:
                data = self.sync_subtasks(
                    owner, repo, task.github_issue_number, task.description or "", task.subtasks
                )
                results.append({"task_id": task.id, "success": True, "data": data})
            except RuntimeError as e:
                logger.error(f"Subtask sync failed for task {task.id}: {str(e)}")
                results.append({"task_id": task.id, "success": False, "error": str(e)})
        return results
