"""Helpers turning project records into card/modal view models."""
from __future__ import annotations

from typing import Any, Mapping

from portfolio.core.utils import format_date
from portfolio.domain.projects import project_status

PLACEHOLDER_IMAGE = "https://via.placeholder.com/400x250/1e3a8a/ffffff?text=Projet"
BROKEN_IMAGE = "https://via.placeholder.com/400x250/1e3a8a/ffffff?text=Image+Indisponible"


def normalize_external_url(value: str | None) -> str:
    """
    Ensure external links carry a scheme when the author omitted it (https://).
    """
    v = (value or "").strip()
    if not v:
        return ""
    if v.startswith("http://") or v.startswith("https://"):
        return v
    return "https://" + v.lstrip("/")


def cover_image(project: Mapping[str, Any]) -> str:
    for image in project.get("images") or []:
        if isinstance(image, str) and image.strip():
            return image.strip()
    return PLACEHOLDER_IMAGE


def project_card(project: Mapping[str, Any]) -> dict[str, Any]:
    """Flatten a record into what the card and its modal render."""
    description = project.get("description") or ""
    return {
        "id": project.get("id"),
        "dom_id": f"project-{project.get('id')}",
        "title": project.get("title") or "",
        "description": description,
        "details": project.get("details") or description,
        "date": project.get("date") or "",
        "date_display": format_date(project.get("date")),
        "image": cover_image(project),
        "image_fallback": BROKEN_IMAGE,
        "technologies": [t for t in project.get("technologies") or [] if isinstance(t, str)],
        "status": project_status(project),
        "featured": bool(project.get("featured")),
        "github": normalize_external_url(project.get("github")),
        "demo": normalize_external_url(project.get("demo")),
    }
