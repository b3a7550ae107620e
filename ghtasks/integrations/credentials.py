"""Local storage for the GitHub access token.

One opaque string under a fixed key in a small JSON file. The token is not
validated or encrypted here.
"""

import json
import logging
import os
from typing import Optional

from ghtasks.config import get_token_path

logger = logging.getLogger(__name__)

TOKEN_KEY = "githubToken"


class TokenStore:
    """Synchronous get/set/remove of the stored token."""

    def __init__(self, token_path: Optional[str] = None):
        self.token_path = token_path or get_token_path()

    def _read(self) -> dict:
        if not os.path.exists(self.token_path):
            return {}
        with open(self.token_path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return data if isinstance(data, dict) else {}

    def get(self) -> Optional[str]:
        return self._read().get(TOKEN_KEY)

    def set(self, token: str) -> None:
        data = self._read()
        data[TOKEN_KEY] = token
        with open(self.token_path, "w", encoding="utf-8") as f:
            json.dump(data, f)
        logger.debug(f"Stored GitHub token in {self.token_path}")

    def remove(self) -> None:
        data = self._read()
        if TOKEN_KEY not in data:
            return
        del data[TOKEN_KEY]
        if data:
            with open(self.token_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
        else:
            os.remove(self.token_path)
        logger.debug(f"Removed GitHub token from {self.token_path}")
