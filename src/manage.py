"""MuStore database management CLI.

Usage:
    python src/manage.py setup-db   # Create all tables
    python src/manage.py drop-db    # Drop all tables
    python src/manage.py seed       # Load the demo catalogue
"""

import argparse
import sys


def setup_database():
    from mustore.domain import mustore
    from mustore.utils.db import setup_db

    print("Initializing mustore domain...")
    mustore.init()
    print("Creating database schema...")
    setup_db(mustore)
    print("Done.")


def drop_database():
    from mustore.domain import mustore
    from mustore.utils.db import drop_db

    print("Initializing mustore domain...")
    mustore.init()
    print("Dropping database schema...")
    drop_db(mustore)
    print("Done.")


def seed_database():
    from mustore.domain import mustore
    from mustore.utils.seed import seed_catalogue

    mustore.init()
    with mustore.domain_context():
        counts = seed_catalogue()
    print(f"Seeded {counts['brands']} brands, {counts['categories']} categories, {counts['products']} products.")


def main():
    parser = argparse.ArgumentParser(description="MuStore database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")
    subparsers.add_parser("seed", help="Load the demo catalogue")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed":
        seed_database()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
