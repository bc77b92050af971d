#!/usr/bin/env python3
"""Command-line backup, restore and maintenance for the local CheckKit store."""

from __future__ import annotations

import argparse
import datetime
import logging
import sys
from pathlib import Path
from typing import Sequence

from checkkit.core.db import create_session
from checkkit.core.errors import CheckKitError
from checkkit.services.backup_service import export_data, import_data
from checkkit.services.encryption_service import get_encryption_service
from checkkit.services.instance_service import get_day_instances

logger = logging.getLogger("checkkit.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="CheckKit local data tools")
    parser.add_argument("--key-path", default=None, help="Device key file (defaults to CHECKKIT_KEY_PATH)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Write an encrypted backup file")
    export_parser.add_argument("output", help="Destination file for the backup blob")

    import_parser = subparsers.add_parser("import", help="Replace all data with a backup file")
    import_parser.add_argument("input", help="Backup file produced by 'export'")
    import_parser.add_argument(
        "--yes",
        action="store_true",
        help="Confirm that existing routines, instances and settings will be replaced",
    )

    day_parser = subparsers.add_parser("day", help="Materialize and reconcile one day")
    day_parser.add_argument("--date", default=None, help="YYYY-MM-DD (defaults to today)")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    encryption = get_encryption_service(args.key_path)

    db = create_session()
    try:
        if args.command == "export":
            blob = export_data(db, encryption)
            Path(args.output).write_text(blob, encoding="utf-8")
            print(f"Backup written to {args.output}")
            return 0

        if args.command == "import":
            if not args.yes:
                print("Refusing to replace existing data without --yes.", file=sys.stderr)
                return 1
            input_path = Path(args.input)
            if not input_path.exists():
                print(f"Backup file not found: {input_path}", file=sys.stderr)
                return 1
            summary = import_data(db, input_path.read_text(encoding="utf-8"), encryption)
            print(f"Restored {summary['routines']} routine(s) and {summary['instances']} instance(s).")
            return 0

        date_value = args.date or datetime.date.today().isoformat()
        instances = get_day_instances(db, date_value)
        print(f"{date_value}: {len(instances)} instance(s)")
        return 0
    except CheckKitError as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    raise SystemExit(main())
