"""
Export Firestore to JSON.

    python -m arta_backend.scripts.export_firestore [collection] [--out exports]

Without a collection name every top-level collection is exported into a
single file.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

from arta_backend.logger import get_logger
from arta_backend.scripts._bootstrap import build_services


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Export Firestore collections to JSON")
    parser.add_argument("collection", nargs="?", default=None, help="Collection to export")
    parser.add_argument("--out", type=Path, default=Path("exports"), help="Output directory")
    args = parser.parse_args(argv)
    logger = get_logger("scripts")

    services, _ = build_services()
    try:
        path = services["maintenance_service"].export_collections(args.out, args.collection)
    except Exception as exc:
        logger.error("Export failed: %s", exc)
        return 1

    print(f"Exported to: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
