"""Storefront database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables

PROTEAN_ENV selects the config overlay; use ``production`` with DATABASE_URL
set to target PostgreSQL.
"""

import argparse
import sys


def _domain():
    from storefront.domain import storefront

    storefront.init()
    return storefront


def setup_databases() -> None:
    from storefront.utils.db import setup_db

    print("Creating storefront database schema...")
    touched = setup_db(_domain())
    if touched:
        print(f"  Tables created for provider(s): {', '.join(touched)}")
    else:
        print("  No SQL providers configured, nothing to create.")


def drop_databases() -> None:
    from storefront.utils.db import drop_db

    print("Dropping storefront database schema...")
    touched = drop_db(_domain())
    if touched:
        print(f"  Tables dropped for provider(s): {', '.join(touched)}")
    else:
        print("  No SQL providers configured, nothing to drop.")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
