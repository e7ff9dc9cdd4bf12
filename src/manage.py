"""Storefront database management CLI.

Creates and drops the ordering domain's database schema when it is
configured with an RDBMS provider (sqlite or postgresql). The default
memory provider needs no schema.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
"""

import argparse
import sys


def setup_databases():
    """Create database schemas for the ordering domain."""
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Creating ordering database schema...")
    setup_db(ordering)
    print("  ordering schema ready.")
    print("Done.")


def drop_databases():
    """Drop database schemas for the ordering domain."""
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    print("Initializing ordering domain...")
    ordering.init()
    print("Dropping ordering database schema...")
    drop_db(ordering)
    print("  ordering schema dropped.")
    print("Done.")


def main():
    parser = argparse.ArgumentParser(description="Storefront database management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
