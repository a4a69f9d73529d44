# app/content/github.py
"""Read chapter files from a book's GitHub repository (REST API v3)."""
from __future__ import annotations

import base64
from typing import List, Optional

import requests

from app.core.config import GITHUB_API_URL, GITHUB_TIMEOUT, GITHUB_TOKEN

SKIP_FILES = {"readme.md"}


class ContentSourceError(RuntimeError):
    pass


class GitHubClient:
    def __init__(
        self,
        token: Optional[str] = GITHUB_TOKEN,
        *,
        base_url: str = GITHUB_API_URL,
        timeout: float = GITHUB_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers["Accept"] = "application/vnd.github+json"
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    def _get(self, path: str, **params):
        url = f"{self.base_url}/{path.lstrip('/')}"
        try:
            resp = self.session.get(url, params=params or None, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as e:
            raise ContentSourceError(f"GitHub request failed for {path}: {e}") from e
        return resp.json()

    def list_markdown_files(self, repo: str) -> List[str]:
        """Chapter files at the repo root: every *.md except README.md."""
        items = self._get(f"repos/{repo}/contents")
        return sorted(
            item["path"]
            for item in items
            if item.get("type") == "file"
            and item["name"].lower().endswith(".md")
            and item["name"].lower() not in SKIP_FILES
        )

    def get_file(self, repo: str, path: str) -> str:
        data = self._get(f"repos/{repo}/contents/{path}")
        if data.get("encoding") != "base64":
            raise ContentSourceError(f"Unexpected encoding for {path}: {data.get('encoding')}")
        return base64.b64decode(data.get("content") or "").decode("utf-8")

    def latest_commit_sha(self, repo: str) -> Optional[str]:
        commits = self._get(f"repos/{repo}/commits", per_page=1)
        return commits[0]["sha"] if commits else None
