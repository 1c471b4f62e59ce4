"""Project use cases consumed by routers and scripts."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Callable, Optional

from portfolio.core.config import Settings, get_settings
from portfolio.core.utils import format_size
from portfolio.domain.projects import load_categories
from portfolio.repositories.errors import ProjectError
from portfolio.repositories.fallback import FallbackSource
from portfolio.repositories.project_repository import ProjectRepository
from portfolio.repositories.storage import (
    LAST_UPDATE_CHECK_KEY,
    LAST_UPDATE_KEY,
    PROJECTS_KEY,
    StorageAdapter,
    build_storage,
)

logger = logging.getLogger(__name__)

EXPORT_PREFIX = "portfolio-projects"
TRACKED_KEYS = (PROJECTS_KEY, LAST_UPDATE_KEY, LAST_UPDATE_CHECK_KEY)


@dataclass
class StorageUsage:
    bytes: int
    formatted: str


@dataclass
class UpdateCheckResult:
    checked: bool
    changed: bool
    checked_at: Optional[int]


def _now_ms() -> int:
    return int(time.time() * 1000)


class ProjectService:
    """Wraps the repository with export naming, storage diagnostics and the update check."""

    def __init__(
        self,
        repository: ProjectRepository,
        *,
        update_check_interval_seconds: int = 3600,
        now_ms: Callable[[], int] = _now_ms,
    ) -> None:
        self.repository = repository
        self.update_check_interval_seconds = update_check_interval_seconds
        self._now_ms = now_ms

    @property
    def storage(self) -> StorageAdapter:
        return self.repository.storage

    def list_projects(self, category: str = "all", query: str = "") -> list[dict]:
        """Category filter narrowed by the search query, collection order kept."""
        projects = self.repository.filter(category)
        if not (query or "").strip():
            return projects
        matching = {str(p.get("id")) for p in self.repository.search(query)}
        return [p for p in projects if str(p.get("id")) in matching]

    def export_filename(self, today: date | None = None) -> str:
        day = today or date.today()
        return f"{EXPORT_PREFIX}-{day.isoformat()}.json"

    def export_payload(self, today: date | None = None) -> tuple[str, str]:
        return self.export_filename(today), self.repository.export_all()

    def storage_usage(self) -> StorageUsage:
        """Size of the tracked keys counted as UTF-16 code units, 2 bytes each."""
        total = 0
        for key in TRACKED_KEYS:
            value = self.storage.get(key)
            if value is None:
                continue
            total += len((key + value).encode("utf-16-le"))
        return StorageUsage(bytes=total, formatted=format_size(total))

    def check_for_updates(self, *, force: bool = False) -> UpdateCheckResult:
        """
        Compare the fallback resource with the current collection at most once
        per interval. The collection is never modified here.
        """
        now = self._now_ms()
        last_raw = self.storage.get(LAST_UPDATE_CHECK_KEY)
        try:
            last = int(last_raw) if last_raw else 0
        except ValueError:
            last = 0
        if not force and last and now - last < self.update_check_interval_seconds * 1000:
            return UpdateCheckResult(checked=False, changed=False, checked_at=last)

        self.storage.set(LAST_UPDATE_CHECK_KEY, str(now))
        fallback = self.repository.fallback
        if not fallback:
            return UpdateCheckResult(checked=True, changed=False, checked_at=now)
        try:
            remote = fallback.fetch()
        except ProjectError as exc:
            logger.warning("Update check failed: %s", exc)
            return UpdateCheckResult(checked=True, changed=False, checked_at=now)
        changed = remote != self.repository.all()
        if changed:
            logger.info("Fallback projects differ from stored collection")
        return UpdateCheckResult(checked=True, changed=changed, checked_at=now)


def build_project_service(
    settings: Settings | None = None,
    storage: StorageAdapter | None = None,
) -> ProjectService:
    """Wire storage, fallback and repository from Settings."""
    settings = settings or get_settings()
    repository = ProjectRepository(
        storage if storage is not None else build_storage(settings),
        FallbackSource(settings.fallback_source, timeout=settings.fallback_timeout),
        categories=load_categories(settings.categories_file),
    )
    return ProjectService(
        repository,
        update_check_interval_seconds=settings.update_check_interval_seconds,
    )
