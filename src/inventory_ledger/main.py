"""
Command-line entry point for the Inventory Ledger.

Read-only reporting over the ledger database, plus table creation.

Usage Examples:
    # Create tables in the configured database
    inventory-ledger init

    # Print inventory and purchase totals
    inventory-ledger totals

    # Show the first 10 low or out of stock materials
    inventory-ledger low-stock --limit 10

    # List purchases whose material no longer exists
    inventory-ledger orphans

    # Use a specific database
    inventory-ledger --db-url sqlite:///shop.db totals
"""

import argparse
import logging
import sys
from typing import List, Optional

from .services import database, purchase_ledger, stock_classifier, valuation_service
from .services.exceptions import ServiceError
from .services.material_registry import list_materials
from .utils.config import get_config
from .utils.constants import LOW_STOCK_ALERT_LIMIT

logger = logging.getLogger(__name__)


def show_totals(store) -> int:
    """Print the valuation summary."""
    totals = valuation_service.compute_totals(store)
    print(f"Materials:            {totals['material_count']}")
    print(f"Inventory value:      {totals['total_material_value']:,}")
    print(f"Purchases:            {totals['purchase_count']}")
    print(f"Purchase value:       {totals['total_purchase_value']:,}")
    print(f"Pending payments:     {totals['pending_payments_count']}")
    print(f"Outstanding amount:   {totals['outstanding_amount']:,}")
    print(f"Low/out of stock:     {totals['low_stock_count']}")
    return 0


def show_low_stock(store, limit: int) -> int:
    """Print the low stock alert feed."""
    alerts = stock_classifier.low_stock_alerts(list_materials(store), limit=limit)
    if not alerts:
        print("All materials are in stock.")
        return 0
    for alert in alerts:
        unit = f" {alert['unit']}" if alert["unit"] else ""
        print(
            f"[{alert['label']}] {alert['name']}: "
            f"{alert['quantity']}{unit} (minimum {alert['min_stock']}{unit})"
        )
    return 0


def show_orphans(store) -> int:
    """Print purchases whose material name matches no material."""
    orphans = purchase_ledger.find_orphaned_purchases(store)
    if not orphans:
        print("No orphaned purchases.")
        return 0
    for purchase in orphans:
        print(
            f"#{purchase.id} {purchase.purchase_date.isoformat()} "
            f"'{purchase.material_name}' x {purchase.quantity}"
        )
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="inventory-ledger",
        description="Inventory Ledger reporting utility",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--db-url", help="SQLAlchemy database URL (overrides configuration)")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")
    subparsers.add_parser("init", help="Create database tables")
    subparsers.add_parser("totals", help="Show inventory and purchase totals")
    low_stock_parser = subparsers.add_parser("low-stock", help="Show low stock alerts")
    low_stock_parser.add_argument(
        "--limit",
        type=int,
        default=LOW_STOCK_ALERT_LIMIT,
        help=f"Maximum number of alerts (default: {LOW_STOCK_ALERT_LIMIT})",
    )
    subparsers.add_parser("orphans", help="List purchases with no matching material")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = get_config()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    engine = database.initialize_app_database(args.db_url)
    if args.command == "init":
        engine.dispose()
        print("Database initialized.")
        return 0

    session_factory = database.create_session_factory(engine)
    try:
        with database.store_scope(session_factory) as store:
            if args.command == "totals":
                return show_totals(store)
            elif args.command == "low-stock":
                return show_low_stock(store, args.limit)
            elif args.command == "orphans":
                return show_orphans(store)
            else:
                print(f"Unknown command: {args.command}")
                return 1
    except ServiceError as e:
        logger.error(f"{args.command} failed: {e}")
        print(f"ERROR: {e}")
        return 1
    finally:
        engine.dispose()


if __name__ == "__main__":
    sys.exit(main())
