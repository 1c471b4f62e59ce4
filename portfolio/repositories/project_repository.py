"""In-memory project collection kept in sync with a key-value storage."""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Iterable, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError

from portfolio.domain.projects import (
    CATEGORY_ALL,
    DEFAULT_CATEGORIES,
    PROJECT_STATUSES,
    ValidationResult,
    matches_keywords,
    matches_query,
    project_status,
    validate_project,
)
from portfolio.repositories.errors import (
    DuplicateProjectError,
    ProjectError,
    ProjectParseError,
    ProjectValidationError,
)
from portfolio.repositories.fallback import FallbackSource, parse_project_list
from portfolio.repositories.storage import LAST_UPDATE_KEY, PROJECTS_KEY, StorageAdapter

logger = logging.getLogger(__name__)

ProjectId = int | str
# fields owned by the repository; patches never overwrite them
PROTECTED_FIELDS = ("id", "createdAt")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(value: datetime) -> str:
    """Millisecond ISO-8601 in UTC with a Z suffix (ex.: 2026-10-19T08:15:00.123Z)."""
    value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def parse_timestamp(value: Any) -> Optional[datetime]:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def same_id(left: Any, right: Any) -> bool:
    """Ids match when equal or when their string forms are equal (URL path ids)."""
    if left is None or right is None:
        return False
    return left == right or str(left) == str(right)


@dataclass
class ProjectState:
    """Owned collection, most recent first."""

    projects: list[dict[str, Any]] = field(default_factory=list)
    loaded: bool = False
    # set when neither storage nor the fallback could provide a collection
    load_failed: bool = False

    def replace(self, projects: Iterable[dict[str, Any]]) -> None:
        self.projects = [dict(p) for p in projects]
        self.loaded = True

    def clear(self) -> None:
        self.projects = []
        self.load_failed = False


class ProjectRepository:
    """
    Sole mutation gateway for the project collection.

    Every mutation is written back to the storage adapter before returning.
    Reads and mutations load the collection lazily on first use.
    """

    def __init__(
        self,
        storage: StorageAdapter,
        fallback: FallbackSource | None = None,
        *,
        state: ProjectState | None = None,
        categories: Mapping[str, Iterable[str]] | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.storage = storage
        self.fallback = fallback
        self.state = state if state is not None else ProjectState()
        table = categories if categories is not None else DEFAULT_CATEGORIES
        self.categories = {name.lower(): tuple(keywords) for name, keywords in table.items()}
        self._clock = clock

    # -------------------------------------- helpers --------------------------------------
    def _ensure_loaded(self) -> None:
        if not self.state.loaded:
            self.load()

    def _find_index(self, project_id: ProjectId) -> int:
        for idx, project in enumerate(self.state.projects):
            if same_id(project.get("id"), project_id):
                return idx
        return -1

    def _next_id(self, taken: set[str]) -> int:
        candidate = int(self._clock().timestamp() * 1000)
        while str(candidate) in taken:
            candidate += 1
        return candidate

    def _assign_missing_ids(self, projects: list[dict[str, Any]]) -> bool:
        """Give id-less records a fresh unique id in place; True when any was assigned."""
        taken = {str(p["id"]) for p in projects if p.get("id") not in (None, "")}
        assigned = False
        for project in projects:
            if project.get("id") in (None, ""):
                project["id"] = self._next_id(taken)
                taken.add(str(project["id"]))
                assigned = True
        return assigned

    def _stamp_after(self, previous: Any) -> str:
        now = self._clock()
        prev = parse_timestamp(previous)
        # millisecond resolution: two updates within the same ms must still move forward
        if prev is not None and iso_timestamp(now) <= iso_timestamp(prev):
            now = prev + timedelta(milliseconds=1)
        return iso_timestamp(now)

    def _persist(self) -> bool:
        try:
            self.storage.set(PROJECTS_KEY, json.dumps(self.state.projects, ensure_ascii=False))
            self.storage.set(LAST_UPDATE_KEY, iso_timestamp(self._clock()))
        except (OSError, SQLAlchemyError):
            logger.exception("Failed to persist %d projects", len(self.state.projects))
            return False
        return True

    def _load_from_fallback(self) -> list[dict[str, Any]]:
        if not self.fallback:
            logger.warning("Storage is empty and no fallback source is configured")
            self.state.replace([])
            return []
        try:
            projects = self.fallback.fetch()
        except ProjectError as exc:
            logger.error("Could not load fallback projects: %s", exc)
            self.state.replace([])
            self.state.load_failed = True
            return []
        self.state.replace(projects)
        self._assign_missing_ids(self.state.projects)
        self._persist()
        return self.state.projects

    # -------------------------------------- loading --------------------------------------
    def load(self) -> list[dict[str, Any]]:
        """Populate the collection from storage, seeding it from the fallback when empty."""
        raw = self.storage.get(PROJECTS_KEY)
        if raw:
            try:
                projects = parse_project_list(raw, source=PROJECTS_KEY)
            except ProjectParseError as exc:
                logger.error("Stored projects are unreadable, using fallback: %s", exc)
            else:
                self.state.replace(projects)
                self.state.load_failed = False
                if self._assign_missing_ids(self.state.projects):
                    self._persist()
                return self.all()
        self.state.load_failed = False
        self._load_from_fallback()
        return self.all()

    # -------------------------------------- reads --------------------------------------
    def all(self) -> list[dict[str, Any]]:
        self._ensure_loaded()
        return [dict(p) for p in self.state.projects]

    def get_by_id(self, project_id: ProjectId) -> Optional[dict[str, Any]]:
        self._ensure_loaded()
        idx = self._find_index(project_id)
        return dict(self.state.projects[idx]) if idx >= 0 else None

    def filter(self, category: str) -> list[dict[str, Any]]:
        key = (category or "").strip().lower()
        if key == CATEGORY_ALL:
            return self.all()
        keywords = self.categories.get(key)
        if keywords is None:
            logger.warning("Unknown project category '%s'", category)
            return []
        return [p for p in self.all() if matches_keywords(p, keywords)]

    def search(self, query: str) -> list[dict[str, Any]]:
        return [p for p in self.all() if matches_query(p, query)]

    def stats(self) -> dict[str, Any]:
        projects = self.all()
        by_status = {status: 0 for status in PROJECT_STATUSES}
        technologies: list[str] = []
        images = 0
        for project in projects:
            by_status[project_status(project)] += 1
            for tech in project.get("technologies") or []:
                if isinstance(tech, str) and tech not in technologies:
                    technologies.append(tech)
            images += len(project.get("images") or [])
        return {
            "total": len(projects),
            "by_status": by_status,
            "featured": sum(1 for p in projects if p.get("featured")),
            "technologies": technologies,
            "images": images,
            "last_update": self.storage.get(LAST_UPDATE_KEY),
        }

    def export_all(self) -> str:
        return json.dumps(self.all(), ensure_ascii=False, indent=2)

    @staticmethod
    def validate(project: Mapping[str, Any]) -> ValidationResult:
        return validate_project(project)

    # -------------------------------------- mutations --------------------------------------
    def add(self, project: Mapping[str, Any]) -> dict[str, Any]:
        self._ensure_loaded()
        record = dict(project)
        taken = {str(p.get("id")) for p in self.state.projects}
        supplied = record.get("id")
        if supplied is None or supplied == "":
            record["id"] = self._next_id(taken)
        elif str(supplied) in taken:
            raise DuplicateProjectError(f"Project {supplied} already exists")
        now = iso_timestamp(self._clock())
        record["createdAt"] = now
        record["updatedAt"] = now
        self.state.projects.insert(0, record)
        self._persist()
        logger.info("Added project %s", record["id"])
        return dict(record)

    def update(self, project_id: ProjectId, patch: Mapping[str, Any]) -> Optional[dict[str, Any]]:
        self._ensure_loaded()
        idx = self._find_index(project_id)
        if idx < 0:
            return None
        current = self.state.projects[idx]
        updated = dict(current)
        updated.update({k: v for k, v in patch.items() if k not in PROTECTED_FIELDS})
        updated["updatedAt"] = self._stamp_after(current.get("updatedAt"))
        self.state.projects[idx] = updated
        self._persist()
        return dict(updated)

    def delete(self, project_id: ProjectId) -> bool:
        self._ensure_loaded()
        idx = self._find_index(project_id)
        if idx < 0:
            return False
        removed = self.state.projects.pop(idx)
        self._persist()
        logger.info("Deleted project %s", removed.get("id"))
        return True

    def import_from(self, blob: str | bytes) -> int:
        """Replace the whole collection with a JSON array; returns the imported count."""
        try:
            data = json.loads(blob)
        except (TypeError, ValueError) as exc:
            raise ProjectParseError(f"Import is not valid JSON: {exc}") from exc
        if not isinstance(data, list):
            raise ProjectValidationError(["Imported data must be a JSON array of projects"])

        messages = []
        seen: set[str] = set()
        for pos, entry in enumerate(data, start=1):
            if not isinstance(entry, dict):
                messages.append(f"Project {pos}: must be an object")
                continue
            for key in ("title", "description"):
                value = entry.get(key)
                if not isinstance(value, str) or not value.strip():
                    messages.append(f"Project {pos}: {key} is required")
            if entry.get("id") not in (None, ""):
                ident = str(entry["id"])
                if ident in seen:
                    messages.append(f"Project {pos}: duplicate id {ident}")
                seen.add(ident)
        if messages:
            raise ProjectValidationError(messages)

        projects = [dict(entry) for entry in data]
        self._assign_missing_ids(projects)
        self.state.replace(projects)
        self.state.load_failed = False
        self._persist()
        logger.info("Imported %d projects", len(projects))
        return len(projects)

    def reset(self) -> None:
        self.state.clear()
        self.state.loaded = True
        self.storage.remove(PROJECTS_KEY)
        self.storage.remove(LAST_UPDATE_KEY)
        logger.info("Project storage reset")
