"""Entry point for the matrix-quick-order Textual app."""

from __future__ import annotations

import argparse

from matrix_order.backend import SqliteBackend
from matrix_order.config import DB_PATH, PRINT_TICKETS
from matrix_order.quick_order_app import QuickOrderApp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matrix-order",
        description="Enter quantities on a size/color grid and create draft orders.",
    )
    parser.add_argument("--db", default=DB_PATH, help=f"SQLite store path (default: {DB_PATH})")
    parser.add_argument("--product", help="Product id to open on start")
    parser.add_argument(
        "--no-seed",
        dest="seed",
        action="store_false",
        help="Do not insert the demo catalog into an empty store",
    )
    parser.add_argument(
        "--print-tickets",
        action="store_true",
        default=PRINT_TICKETS,
        help="Print a ticket on the USB thermal printer after each order",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Run the Textual application."""
    args = build_parser().parse_args(argv)
    backend = SqliteBackend(args.db)
    backend.bootstrap_schema()
    if args.seed:
        backend.seed_demo_catalog()
    QuickOrderApp(backend, product_id=args.product, print_tickets=args.print_tickets).run()


if __name__ == "__main__":
    main()
