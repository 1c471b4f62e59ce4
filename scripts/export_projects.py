#!/usr/bin/env python3
"""
Write the stored projects to a dated JSON file.

Usage:
  python scripts/export_projects.py [--out-dir exports/]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from portfolio.core.logging import setup_logging
from portfolio.services.project_service import build_project_service


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Export projects to JSON")
    ap.add_argument("--out-dir", default=".", help="Destination directory (default: current)")
    args = ap.parse_args(argv)

    setup_logging()
    svc = build_project_service()
    filename, body = svc.export_payload()
    out_dir = Path(args.out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    target = out_dir / filename
    target.write_text(body, encoding="utf-8")
    print(f"OK: {len(svc.repository.all())} projects written to {target}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
