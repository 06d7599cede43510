#!/usr/bin/env python3
"""
Import legacy case files into the SQLite case archive.

The previous deployment wrote one `<id>.json` file per generated case
into a `cases/` directory, with the mentor under "teacher" and the
target role under "position".

Usage:
    python scripts/import_case_files.py --cases-dir cases --db data/cases.db
"""

import argparse
import json
from pathlib import Path
import sys

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from mentormatch.archive import CaseArchive
from mentormatch.errors import InvalidRequest


def to_record(data: dict, fallback_id: str) -> dict:
    """Map a legacy case file onto the archive's record shape."""
    return {
        "id": str(data.get("id") or fallback_id),
        "timestamp": data.get("timestamp"),
        "mentor": data.get("teacher") or data.get("mentor") or {},
        "direction": data.get("direction") or "",
        "role": data.get("position") or data.get("role") or "",
        "customer_problems": data.get("customer_problems") or [],
        "core_content": data.get("core_content") or "",
        "highlights": data.get("highlights") or "",
        "language_style": data.get("language_style") or "professional",
        "case": data.get("case"),
    }


def import_cases(cases_dir: Path, db_path: Path, dry_run: bool = False) -> bool:
    """
    Import every *.json file in cases_dir.

    Args:
        cases_dir: Directory of legacy case files
        db_path: Path to SQLite database file
        dry_run: If True, don't write to database
    """
    files = sorted(cases_dir.glob("*.json"))
    print(f"Found {len(files)} case files in {cases_dir}")

    if dry_run:
        print("\n[DRY RUN] Would import the following cases:")
        for i, path in enumerate(files[:5], 1):
            print(f"  {i}. {path.stem}")
        if len(files) > 5:
            print(f"  ... and {len(files) - 5} more")
        return True

    print(f"\nOpening archive at {db_path}...")
    archive = CaseArchive(db_path)

    imported = 0
    skipped = 0
    errors = 0

    for path in files:
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            print(f"❌ Cannot read {path.name}: {e}")
            errors += 1
            continue

        if not isinstance(data, dict):
            print(f"⚠️  Skipping {path.name}: not a JSON object")
            skipped += 1
            continue

        try:
            archive.save(to_record(data, path.stem))
        except InvalidRequest as e:
            print(f"⚠️  Skipping {path.name}: {e}")
            skipped += 1
            continue
        imported += 1

        if imported % 20 == 0:
            print(f"  Imported {imported} cases...")

    print(f"\n✅ Import complete!")
    print(f"   Imported: {imported}")
    print(f"   Skipped:  {skipped}")
    print(f"   Errors:   {errors}")
    return errors == 0


def main():
    parser = argparse.ArgumentParser(description="Import legacy case JSON files into the archive")
    parser.add_argument("--cases-dir", type=Path, default=Path("cases"),
                       help="Directory holding <id>.json case files")
    parser.add_argument("--db", type=Path, default=Path("data/cases.db"),
                       help="Path to SQLite database file")
    parser.add_argument("--dry-run", action="store_true",
                       help="Show what would be imported without writing")

    args = parser.parse_args()

    if not args.cases_dir.is_dir():
        print(f"❌ Cases directory not found: {args.cases_dir}")
        sys.exit(1)

    ok = import_cases(args.cases_dir, args.db, dry_run=args.dry_run)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
