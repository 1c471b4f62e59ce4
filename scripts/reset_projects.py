#!/usr/bin/env python3
"""
Clear stored projects; the next load seeds again from the fallback file.

Usage:
  python scripts/reset_projects.py --yes
"""
from __future__ import annotations

import argparse
import sys

from portfolio.core.logging import setup_logging
from portfolio.services.project_service import build_project_service


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Reset stored projects")
    ap.add_argument("--yes", action="store_true", help="Confirm the reset")
    args = ap.parse_args(argv)
    if not args.yes:
        raise SystemExit("Refusing to reset without --yes")

    setup_logging()
    svc = build_project_service()
    usage = svc.storage_usage()
    svc.repository.reset()
    print(f"OK: storage cleared ({usage.formatted} freed)")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
