"""Storefront management CLI.

Creates and drops the database schema, and runs the periodic maintenance
jobs an external scheduler would otherwise trigger over HTTP.

Usage:
    python src/manage.py setup-db                      # Create all tables
    python src/manage.py drop-db                       # Drop all tables
    python src/manage.py release-abandoned-carts       # Clear idle carts
    python src/manage.py refresh-catalogue             # Seed stock from the catalogue
"""

import argparse
import sys


def _domain():
    from storefront.domain import storefront

    print("Initializing storefront domain...")
    storefront.init()
    return storefront


def setup_database():
    """Create the database schema for the storefront."""
    from storefront.utils.db import setup_db

    domain = _domain()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    """Drop the storefront database schema."""
    from storefront.utils.db import drop_db

    domain = _domain()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def release_abandoned_carts(idle_minutes=None):
    from storefront.cart.abandonment import ReleaseAbandonedCarts

    domain = _domain()
    with domain.domain_context():
        released = domain.process(ReleaseAbandonedCarts(idle_minutes=idle_minutes), asynchronous=False)
    print(f"Released {released} abandoned cart(s).")


def refresh_catalogue():
    from storefront.catalogue.ingestion import refresh_catalogue as refresh

    domain = _domain()
    with domain.domain_context():
        products = refresh()
    print(f"Fetched {len(products)} product(s).")


def main():
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    release_parser = subparsers.add_parser("release-abandoned-carts", help="Clear idle carts and free their stock")
    release_parser.add_argument(
        "--idle-minutes",
        type=int,
        help="Minutes without changes before a cart counts as abandoned (default: CART_IDLE_MINUTES)",
    )

    subparsers.add_parser("refresh-catalogue", help="Fetch products and initialize stock for new variants")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "release-abandoned-carts":
        release_abandoned_carts(args.idle_minutes)
    elif args.command == "refresh-catalogue":
        refresh_catalogue()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
