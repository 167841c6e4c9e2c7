#!/usr/bin/env python3
from __future__ import annotations

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT))

from coffee_ops.core.config import DATABASE_URL, IS_PROD  # noqa: E402
from coffee_ops.core.database import Database  # noqa: E402
from coffee_ops.core.logging_setup import configure_logging  # noqa: E402
from coffee_ops.services.seed import seed_sample_data  # noqa: E402


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Load sample menu, inventory and member data.")
    parser.add_argument("--database-url", default=DATABASE_URL, help="SQLAlchemy database URL")
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables first (SQLite development databases)",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Allow seeding when ENV is production",
    )
    return parser.parse_args()


def main() -> int:
    args = parse_args()
    configure_logging()

    if IS_PROD and not args.force:
        print("Refusing to seed a production database. Use --force to override.")
        return 1

    database = Database(args.database_url)
    database.open()
    try:
        if args.create_tables:
            database.create_all()
        with database.transaction() as db:
            created = seed_sample_data(db)
    finally:
        database.close()

    summary = ", ".join(f"{name}={count}" for name, count in created.items())
    print(f"Seed complete: {summary}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
