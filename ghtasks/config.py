"""Configuration for ghtasks.

Values come from the environment (optionally via a `.env` file in the working
directory). Nothing here talks to the network.
"""

import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()

GITHUB_API_BASE = "https://api.github.com"
DEFAULT_REPO_NAME = "myfiles"
DEFAULT_FILE_PATH = "task-data.json"
DEFAULT_BRANCH = "main"
DEFAULT_TIMEOUT_SEC = 10.0
DEFAULT_TOKEN_PATH = "github_token.json"


class GitHubStoreSettings(BaseModel):
    """Location of the remote task document."""

    owner: str = Field(..., description="Repository owner (GitHub username or org)")
    repo: str = Field(DEFAULT_REPO_NAME, description="Repository name")
    path: str = Field(DEFAULT_FILE_PATH, description="Path of the JSON document inside the repository")
    branch: str = Field(DEFAULT_BRANCH, description="Branch to read from and commit to")
    api_base: str = Field(GITHUB_API_BASE, description="GitHub REST API base URL")
    timeout_sec: float = Field(DEFAULT_TIMEOUT_SEC, gt=0, description="Per-request HTTP timeout")

    @classmethod
    def from_env(cls, owner: Optional[str] = None) -> "GitHubStoreSettings":
        """Build settings from GITHUB_* environment variables.

        Raises:
            ValueError: If no repository owner is configured
        """
        owner = owner or os.getenv("GITHUB_USERNAME")
        if not owner:
            raise ValueError(
                "GitHub repository owner is required. Set GITHUB_USERNAME env var "
                "(in your shell or a .env file)."
            )
        return cls(
            owner=owner,
            repo=os.getenv("GITHUB_REPO", DEFAULT_REPO_NAME),
            path=os.getenv("GITHUB_FILE_PATH", DEFAULT_FILE_PATH),
            branch=os.getenv("GITHUB_BRANCH", DEFAULT_BRANCH),
            api_base=os.getenv("GITHUB_API_BASE", GITHUB_API_BASE).rstrip("/"),
            timeout_sec=float(os.getenv("GITHUB_TIMEOUT_SEC", str(DEFAULT_TIMEOUT_SEC))),
        )


def get_token_path() -> str:
    """Path of the local file holding the GitHub access token."""
    return os.getenv("GHTASKS_TOKEN_PATH", DEFAULT_TOKEN_PATH)
