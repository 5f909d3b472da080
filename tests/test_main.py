"""Tests for the command line parser."""

from matrix_order.main import build_parser


def test_defaults():
    args = build_parser().parse_args([])
    assert args.seed is True
    assert args.product is None
    assert args.print_tickets is False


def test_flags():
    args = build_parser().parse_args(
        ["--db", "/tmp/x.db", "--product", "gid://shopify/Product/1002", "--no-seed", "--print-tickets"]
    )
    assert args.db == "/tmp/x.db"
    assert args.product == "gid://shopify/Product/1002"
    assert args.seed is False
    assert args.print_tickets is True
