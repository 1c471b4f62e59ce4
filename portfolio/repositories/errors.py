"""Exceptions raised by the project repository and its adapters."""

from __future__ import annotations


class ProjectError(Exception):
    """Base exception for project data workflow."""


class ProjectParseError(ProjectError):
    """Raised when stored, fetched or imported JSON is malformed."""


class ProjectFetchError(ProjectError):
    """Raised when the fallback resource is unavailable."""


class ProjectValidationError(ProjectError):
    def __init__(self, messages: list[str]):
        super().__init__("; ".join(messages) or "Invalid projects")
        self.messages = list(messages)


class DuplicateProjectError(ProjectError):
    """Raised when a caller-supplied id is already in the collection."""
