#!/usr/bin/env python3
"""
Replace the stored projects with the contents of a JSON file.

Usage:
  python scripts/import_projects.py projects.json [--dry-run]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from portfolio.core.logging import setup_logging
from portfolio.repositories.errors import ProjectParseError, ProjectValidationError
from portfolio.repositories.project_repository import ProjectRepository
from portfolio.repositories.storage import MemoryStorage
from portfolio.services.project_service import build_project_service


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Import projects from a JSON array")
    ap.add_argument("path", help="JSON file with an array of projects")
    ap.add_argument("--dry-run", action="store_true", help="Validate only, do not write storage")
    args = ap.parse_args(argv)

    setup_logging()
    path = Path(args.path)
    if not path.exists():
        raise SystemExit(f"File '{path}' not found")
    blob = path.read_text(encoding="utf-8")

    svc = build_project_service()
    repo = svc.repository
    if args.dry_run:
        # throwaway repository: storage is left alone
        repo = ProjectRepository(MemoryStorage())
    try:
        count = repo.import_from(blob)
    except ProjectParseError as exc:
        raise SystemExit(f"Invalid JSON: {exc}")
    except ProjectValidationError as exc:
        raise SystemExit("Import rejected:\n  " + "\n  ".join(exc.messages))
    verb = "would import" if args.dry_run else "imported"
    print(f"OK: {verb} {count} projects")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
