"""HTTP client for CLI commands that talk to a running server."""

from __future__ import annotations

import json
import os
from typing import Any

import httpx

from droid_mirror.config import DEFAULT_PORT, ENV_PREFIX

DEFAULT_URL = f"http://127.0.0.1:{DEFAULT_PORT}"


def default_base_url() -> str:
    """Server URL from DROID_MIRROR_URL, or the local default."""
    return os.environ.get(f"{ENV_PREFIX}URL", DEFAULT_URL)


class MirrorClient:
    """Thin httpx wrapper for the server's /api endpoints."""

    def __init__(self, base_url: str | None = None, *, timeout: float = 10.0) -> None:
        self.base_url = (base_url or default_base_url()).rstrip("/")
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout)

    def close(self) -> None:
        self._client.close()

    def request(
        self, method: str, path: str, json_body: dict[str, Any] | None = None
    ) -> httpx.Response:
        return self._client.request(method, path, json=json_body)


def format_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=True)
