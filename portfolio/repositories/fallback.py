"""Static projects resource used to seed an empty storage."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import requests

from portfolio.repositories.errors import ProjectFetchError, ProjectParseError

logger = logging.getLogger(__name__)


def parse_project_list(raw: str | bytes, *, source: str = "") -> list[dict[str, Any]]:
    """Decode a JSON array of project objects or raise ProjectParseError."""
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise ProjectParseError(f"Invalid JSON in {source or 'payload'}: {exc}") from exc
    if not isinstance(data, list):
        raise ProjectParseError(f"Expected a JSON array in {source or 'payload'}")
    for pos, entry in enumerate(data, start=1):
        if not isinstance(entry, dict):
            raise ProjectParseError(f"Entry {pos} in {source or 'payload'} is not a JSON object")
    return data


class FallbackSource:
    """
    Reads the static projects file from an http(s) URL or a local path.

    Any non-2xx response or unreadable file raises ProjectFetchError; a body
    that is not a JSON array raises ProjectParseError.
    """

    def __init__(self, location: str, *, timeout: float = 10.0) -> None:
        self.location = (location or "").strip()
        self.timeout = timeout

    @property
    def is_remote(self) -> bool:
        return self.location.startswith("http://") or self.location.startswith("https://")

    def _read_remote(self) -> bytes:
        try:
            resp = requests.get(self.location, timeout=self.timeout)
        except requests.RequestException as exc:
            raise ProjectFetchError(f"Could not fetch {self.location}: {exc}") from exc
        if not resp.ok:
            raise ProjectFetchError(f"Fetching {self.location} returned HTTP {resp.status_code}")
        return resp.content

    def _read_local(self) -> bytes:
        path = Path(self.location)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise ProjectFetchError(f"Could not read {path}: {exc}") from exc

    def fetch(self) -> list[dict[str, Any]]:
        if not self.location:
            raise ProjectFetchError("No fallback source configured")
        raw = self._read_remote() if self.is_remote else self._read_local()
        projects = parse_project_list(raw, source=self.location)
        logger.info("Loaded %d projects from fallback %s", len(projects), self.location)
        return projects
