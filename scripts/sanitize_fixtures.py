#!/usr/bin/env python3
"""Anonymize recorded Nubarium JSON responses in place.

Usage:
  python3 scripts/sanitize_fixtures.py [tests/testdata/responses]
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from nubarium.sanitize import sanitize_directory


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("dir", nargs="?", default="tests/testdata/responses", help="Fixtures directory")
    args = ap.parse_args()

    try:
        sanitize_directory(Path(args.dir), on_file=lambda p: print(f"sanitized {p}"))
    except (RuntimeError, FileNotFoundError) as e:
        print(f"sanitize failed: {e}", file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
