"""Domain helpers for project records: statuses, categories, matching, validation."""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

STATUS_COMPLETED = "completed"
STATUS_IN_PROGRESS = "in-progress"
STATUS_PLANNED = "planned"
PROJECT_STATUSES = (STATUS_COMPLETED, STATUS_IN_PROGRESS, STATUS_PLANNED)
DEFAULT_STATUS = STATUS_COMPLETED

CATEGORY_ALL = "all"

# category -> keywords matched against technologies, title and description
DEFAULT_CATEGORIES: dict[str, tuple[str, ...]] = {
    "web": ("html", "css", "javascript", "typescript", "react", "vue", "angular", "node", "php", "web"),
    "database": ("sql", "mysql", "postgres", "sqlite", "mongodb", "firebase", "redis", "database"),
    "frontend": ("html", "css", "javascript", "react", "vue", "angular", "svelte", "tailwind", "bootstrap", "frontend"),
}


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)


def project_status(project: Mapping[str, Any]) -> str:
    """Return the record status, defaulting unknown/missing values to completed."""
    status = _text(project.get("status")).lower()
    return status if status in PROJECT_STATUSES else DEFAULT_STATUS


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [item for item in value if isinstance(item, str)]


def validate_project(project: Mapping[str, Any]) -> ValidationResult:
    """Check required fields; never raises."""
    errors = []
    if not _text(project.get("title")):
        errors.append("Title is required")
    if not _text(project.get("description")):
        errors.append("Description is required")
    if not _text(project.get("date")):
        errors.append("Date is required")
    if not [t for t in _string_list(project.get("technologies")) if t.strip()]:
        errors.append("At least one technology is required")
    if not [i for i in _string_list(project.get("images")) if i.strip()]:
        errors.append("At least one image is required")
    return ValidationResult(valid=not errors, errors=errors)


def matches_keywords(project: Mapping[str, Any], keywords: Iterable[str]) -> bool:
    """True when any keyword is a substring of a technology, the title or the description."""
    haystack = [t.lower() for t in _string_list(project.get("technologies"))]
    haystack.append(_text(project.get("title")).lower())
    haystack.append(_text(project.get("description")).lower())
    for keyword in keywords:
        needle = keyword.lower()
        if any(needle in field_value for field_value in haystack):
            return True
    return False


def matches_query(project: Mapping[str, Any], query: str) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    for key in ("title", "description", "details"):
        if needle in _text(project.get(key)).lower():
            return True
    return any(needle in tech.lower() for tech in _string_list(project.get("technologies")))


def load_categories(path: str | None) -> dict[str, tuple[str, ...]]:
    """
    Read a category table from a JSON object {"category": ["keyword", ...]}.
    Empty path returns the built-in table.
    """
    if not path:
        return dict(DEFAULT_CATEGORIES)
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"Category table in {path} must be a JSON object")
    table = {}
    for name, keywords in data.items():
        if not isinstance(keywords, list):
            raise ValueError(f"Category '{name}' must map to a list of keywords")
        table[str(name).strip().lower()] = tuple(str(k) for k in keywords if str(k).strip())
    return table
