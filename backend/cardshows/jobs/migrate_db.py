from __future__ import annotations

import argparse
import os

from cardshows.migrations.runner import apply_pending


def migrate(database_url: str | None = None) -> list[int]:
    ran = apply_pending(database_url=database_url)
    print(f"[migrate_db] applied={ran or 'none'}")
    return ran


def main() -> None:
    parser = argparse.ArgumentParser(description="Run DB migrations for Card Show Finder")
    parser.add_argument("--database-url", dest="database_url", default=None)
    args = parser.parse_args()
    database_url = args.database_url or os.getenv("DATABASE_URL")
    if not database_url:
        raise SystemExit("DATABASE_URL must be provided via --database-url or env")
    migrate(database_url)


if __name__ == "__main__":
    main()
