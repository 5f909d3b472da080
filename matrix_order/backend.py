"""Commerce backend interface and the bundled SQLite store."""

from __future__ import annotations

import itertools
import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Iterator, Protocol
from uuid import uuid4

from matrix_order.config import (
    APP_TAG,
    CUSTOMER_SEARCH_LIMIT,
    DB_PATH,
    INVOICE_BASE_URL,
    RECENT_ORDER_DISPLAY_LIMIT,
    RECENT_ORDER_SCAN_LIMIT,
    WALK_IN_CUSTOMER,
)
from matrix_order.constant import DEMO_CUSTOMERS, DEMO_PRODUCTS
from matrix_order.errors import BackendUnavailableError
from matrix_order.models import (
    CreatedOrder,
    Customer,
    DiscountKind,
    DraftOrderResult,
    Product,
    ProductOption,
    RecentOrder,
    UserError,
    Variant,
)


class CommerceBackend(Protocol):
    """What the quick order screen needs from a commerce platform."""

    def list_products(self, query: str = "") -> list[Product]: ...

    def fetch_product(self, product_id: str) -> Product | None: ...

    def search_customers(self, query: str) -> list[Customer]: ...

    def recent_orders(
        self, product_id: str | None = None, limit: int = RECENT_ORDER_DISPLAY_LIMIT
    ) -> list[RecentOrder]: ...

    def create_draft_order(self, draft_input: dict[str, Any]) -> DraftOrderResult: ...


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def customer_display_name(first_name: str | None, last_name: str | None, email: str | None) -> str:
    """Full name, or the email when both name parts are blank."""
    name = f"{first_name or ''} {last_name or ''}".strip()
    return name or (email or "")


class SqliteBackend:
    """Local commerce store kept in SQLite.

    Draft orders are validated the way a hosted platform would: problems with
    the submitted input come back as user errors, not exceptions.
    """

    def __init__(self, db_path: str | Path = DB_PATH) -> None:
        self.db_path = Path(db_path)

    @contextmanager
    def _connect(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(self.db_path)
        except (OSError, sqlite3.Error) as exc:
            raise BackendUnavailableError(operation, str(exc)) from exc
        try:
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA foreign_keys = ON")
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise BackendUnavailableError(operation, str(exc)) from exc
        finally:
            conn.close()

    def bootstrap_schema(self) -> None:
        """Create the store schema if it does not already exist."""
        with self._connect("bootstrap") as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS products (
                    id TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    image_url TEXT,
                    created_at TEXT NOT NULL
                );

                CREATE TABLE IF NOT EXISTS product_options (
                    product_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    option_values TEXT NOT NULL,
                    PRIMARY KEY (product_id, position),
                    FOREIGN KEY(product_id) REFERENCES products(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS variants (
                    id TEXT PRIMARY KEY,
                    product_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    title TEXT NOT NULL,
                    price TEXT NOT NULL,
                    inventory_quantity INTEGER,
                    FOREIGN KEY(product_id) REFERENCES products(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS variant_options (
                    variant_id TEXT NOT NULL,
                    position INTEGER NOT NULL,
                    name TEXT NOT NULL,
                    value TEXT NOT NULL,
                    PRIMARY KEY (variant_id, position),
                    FOREIGN KEY(variant_id) REFERENCES variants(id) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS customers (
                    id TEXT PRIMARY KEY,
                    first_name TEXT NOT NULL DEFAULT '',
                    last_name TEXT NOT NULL DEFAULT '',
                    email TEXT NOT NULL DEFAULT ''
                );

                CREATE TABLE IF NOT EXISTS draft_orders (
                    number INTEGER PRIMARY KEY AUTOINCREMENT,
                    id TEXT UNIQUE,
                    name TEXT,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    status TEXT NOT NULL DEFAULT 'OPEN',
                    note TEXT NOT NULL DEFAULT '',
                    customer_id TEXT,
                    invoice_url TEXT,
                    discount_description TEXT,
                    discount_value TEXT,
                    discount_type TEXT,
                    FOREIGN KEY(customer_id) REFERENCES customers(id)
                );

                CREATE TABLE IF NOT EXISTS draft_order_lines (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    draft_order_number INTEGER NOT NULL,
                    line_index INTEGER NOT NULL,
                    variant_id TEXT NOT NULL,
                    product_id TEXT NOT NULL,
                    quantity INTEGER NOT NULL,
                    FOREIGN KEY(draft_order_number) REFERENCES draft_orders(number) ON DELETE CASCADE
                );

                CREATE TABLE IF NOT EXISTS draft_order_tags (
                    draft_order_number INTEGER NOT NULL,
                    tag TEXT NOT NULL,
                    PRIMARY KEY (draft_order_number, tag),
                    FOREIGN KEY(draft_order_number) REFERENCES draft_orders(number) ON DELETE CASCADE
                );

                CREATE INDEX IF NOT EXISTS idx_variants_product
                    ON variants(product_id, position);

                CREATE INDEX IF NOT EXISTS idx_draft_order_lines_order
                    ON draft_order_lines(draft_order_number, line_index);
                """
            )

    def seed_demo_catalog(self) -> None:
        """Insert the demo products and customers when the catalog is empty."""
        with self._connect("seed") as conn:
            (existing,) = conn.execute("SELECT COUNT(*) FROM products").fetchone()
            if existing:
                return

            for product_no, entry in enumerate(DEMO_PRODUCTS, start=1):
                self._insert_demo_product(conn, product_no, entry)

            conn.executemany(
                "INSERT OR IGNORE INTO customers (id, first_name, last_name, email) VALUES (?, ?, ?, ?)",
                [
                    (c["customer_id"], c["first_name"], c["last_name"], c["email"])
                    for c in DEMO_CUSTOMERS
                ],
            )

    def _insert_demo_product(self, conn: sqlite3.Connection, product_no: int, entry: dict[str, Any]) -> None:
        product_id = str(entry["product_id"])
        options: list[tuple[str, list[str]]] = list(entry["options"])
        missing = set(entry.get("missing", []))
        stock_overrides: dict[str, int | None] = dict(entry.get("stock", {}))
        price_overrides: dict[str, str] = dict(entry.get("price_overrides", {}))

        conn.execute(
            "INSERT INTO products (id, title, image_url, created_at) VALUES (?, ?, ?, ?)",
            (product_id, entry["title"], entry.get("image_url"), _utc_now_iso()),
        )
        for position, (name, values) in enumerate(options):
            conn.execute(
                "INSERT INTO product_options (product_id, position, name, option_values) VALUES (?, ?, ?, ?)",
                (product_id, position, name, json.dumps(values)),
            )

        value_lists = [values for _, values in options]
        position = 0
        for combo in itertools.product(*value_lists):
            key = "/".join(combo)
            if key in missing:
                continue
            position += 1
            variant_id = f"gid://shopify/ProductVariant/{product_no}{position:03d}"
            price = next((price_overrides[v] for v in combo if v in price_overrides), entry["price"])
            stock = stock_overrides.get(key, entry.get("default_stock"))
            conn.execute(
                """
                INSERT INTO variants (id, product_id, position, title, price, inventory_quantity)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (variant_id, product_id, position, " / ".join(combo), price, stock),
            )
            for option_position, ((name, _), value) in enumerate(zip(options, combo)):
                conn.execute(
                    "INSERT INTO variant_options (variant_id, position, name, value) VALUES (?, ?, ?, ?)",
                    (variant_id, option_position, name, value),
                )

    def list_products(self, query: str = "") -> list[Product]:
        pattern = f"%{query.strip()}%"
        with self._connect("list_products") as conn:
            rows = conn.execute(
                "SELECT id FROM products WHERE title LIKE ? ORDER BY title COLLATE NOCASE",
                (pattern,),
            ).fetchall()
            return [self._load_product(conn, row["id"]) for row in rows]

    def fetch_product(self, product_id: str) -> Product | None:
        with self._connect("fetch_product") as conn:
            return self._load_product(conn, product_id)

    def _load_product(self, conn: sqlite3.Connection, product_id: str) -> Product | None:
        row = conn.execute(
            "SELECT id, title, image_url FROM products WHERE id = ?", (product_id,)
        ).fetchone()
        if row is None:
            return None

        options = tuple(
            ProductOption(name=opt["name"], values=tuple(json.loads(opt["option_values"])))
            for opt in conn.execute(
                "SELECT name, option_values FROM product_options WHERE product_id = ? ORDER BY position",
                (product_id,),
            )
        )

        selected: dict[str, list[tuple[str, str]]] = {}
        for opt in conn.execute(
            """
            SELECT vo.variant_id, vo.name, vo.value
            FROM variant_options vo JOIN variants v ON v.id = vo.variant_id
            WHERE v.product_id = ?
            ORDER BY vo.variant_id, vo.position
            """,
            (product_id,),
        ):
            selected.setdefault(opt["variant_id"], []).append((opt["name"], opt["value"]))

        variants = tuple(
            Variant(
                variant_id=v["id"],
                price=Decimal(v["price"]),
                selected_options=tuple(selected.get(v["id"], [])),
                inventory_quantity=v["inventory_quantity"],
                title=v["title"],
            )
            for v in conn.execute(
                """
                SELECT id, title, price, inventory_quantity FROM variants
                WHERE product_id = ? ORDER BY position
                """,
                (product_id,),
            )
        )

        return Product(
            product_id=row["id"],
            title=row["title"],
            options=options,
            variants=variants,
            image_url=row["image_url"],
        )

    def search_customers(self, query: str) -> list[Customer]:
        pattern = f"%{query.strip()}%"
        with self._connect("search_customers") as conn:
            rows = conn.execute(
                """
                SELECT id, first_name, last_name, email FROM customers
                WHERE first_name LIKE ? OR last_name LIKE ? OR email LIKE ?
                   OR (first_name || ' ' || last_name) LIKE ?
                ORDER BY last_name COLLATE NOCASE, first_name COLLATE NOCASE, email
                LIMIT ?
                """,
                (pattern, pattern, pattern, pattern, CUSTOMER_SEARCH_LIMIT),
            ).fetchall()
        return [
            Customer(
                customer_id=row["id"],
                display_name=customer_display_name(row["first_name"], row["last_name"], row["email"]),
                email=row["email"],
            )
            for row in rows
        ]

    def recent_orders(
        self, product_id: str | None = None, limit: int = RECENT_ORDER_DISPLAY_LIMIT
    ) -> list[RecentOrder]:
        """Most recently updated open draft orders created by this tool."""
        with self._connect("recent_orders") as conn:
            rows = conn.execute(
                """
                SELECT d.number, d.id, d.name, d.created_at, d.invoice_url,
                       c.first_name, c.last_name, c.email, c.id AS customer_id
                FROM draft_orders d
                JOIN draft_order_tags t ON t.draft_order_number = d.number AND t.tag = ?
                LEFT JOIN customers c ON c.id = d.customer_id
                WHERE d.status = 'OPEN'
                ORDER BY d.updated_at DESC, d.number DESC
                LIMIT ?
                """,
                (APP_TAG, RECENT_ORDER_SCAN_LIMIT),
            ).fetchall()

            orders: list[RecentOrder] = []
            for row in rows:
                lines = conn.execute(
                    """
                    SELECT variant_id, product_id, quantity FROM draft_order_lines
                    WHERE draft_order_number = ? ORDER BY line_index
                    """,
                    (row["number"],),
                ).fetchall()
                if product_id and not any(line["product_id"] == product_id for line in lines):
                    continue

                if row["customer_id"] is None:
                    customer = WALK_IN_CUSTOMER
                else:
                    customer = customer_display_name(row["first_name"], row["last_name"], row["email"])
                orders.append(
                    RecentOrder(
                        order_id=row["id"],
                        name=row["name"],
                        created_at=row["created_at"],
                        customer=customer,
                        url=row["invoice_url"],
                        items=tuple((line["variant_id"], line["quantity"]) for line in lines),
                    )
                )
                if len(orders) >= limit:
                    break
        return orders

    def create_draft_order(self, draft_input: dict[str, Any]) -> DraftOrderResult:
        """Validate and store a draft order."""
        with self._connect("create_draft_order") as conn:
            errors, lines = self._validate_draft_input(conn, draft_input)
            if errors:
                return DraftOrderResult(user_errors=errors)

            now = _utc_now_iso()
            discount = draft_input.get("appliedDiscount") or {}
            cur = conn.execute(
                """
                INSERT INTO draft_orders (
                    created_at, updated_at, status, note, customer_id,
                    discount_description, discount_value, discount_type
                ) VALUES (?, ?, 'OPEN', ?, ?, ?, ?, ?)
                """,
                (
                    now,
                    now,
                    str(draft_input.get("note") or ""),
                    draft_input.get("customerId") or None,
                    discount.get("description"),
                    str(discount["value"]) if "value" in discount else None,
                    discount.get("valueType"),
                ),
            )
            number = int(cur.lastrowid)
            order = CreatedOrder(
                order_id=f"gid://shopify/DraftOrder/{number}",
                name=f"#D{number}",
                invoice_url=f"{INVOICE_BASE_URL}/{uuid4().hex}",
            )
            conn.execute(
                "UPDATE draft_orders SET id = ?, name = ?, invoice_url = ? WHERE number = ?",
                (order.order_id, order.name, order.invoice_url, number),
            )
            conn.executemany(
                """
                INSERT INTO draft_order_lines (draft_order_number, line_index, variant_id, product_id, quantity)
                VALUES (?, ?, ?, ?, ?)
                """,
                [(number, idx, vid, pid, qty) for idx, (vid, pid, qty) in enumerate(lines)],
            )
            conn.executemany(
                "INSERT OR IGNORE INTO draft_order_tags (draft_order_number, tag) VALUES (?, ?)",
                [(number, str(tag)) for tag in draft_input.get("tags") or []],
            )
        return DraftOrderResult(order=order)

    def _validate_draft_input(
        self, conn: sqlite3.Connection, draft_input: dict[str, Any]
    ) -> tuple[list[UserError], list[tuple[str, str, int]]]:
        errors: list[UserError] = []
        lines: list[tuple[str, str, int]] = []

        line_items = draft_input.get("lineItems") or []
        if not line_items:
            errors.append(UserError("Line items can't be blank", ("lineItems",)))

        for idx, item in enumerate(line_items):
            variant_id = item.get("variantId")
            quantity = item.get("quantity")
            row = conn.execute("SELECT product_id FROM variants WHERE id = ?", (variant_id,)).fetchone()
            if row is None:
                errors.append(UserError(f"Variant {variant_id} does not exist", ("lineItems", str(idx), "variantId")))
                continue
            if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                errors.append(UserError("Quantity must be greater than 0", ("lineItems", str(idx), "quantity")))
                continue
            lines.append((variant_id, row["product_id"], quantity))

        customer_id = draft_input.get("customerId")
        if customer_id:
            found = conn.execute("SELECT 1 FROM customers WHERE id = ?", (customer_id,)).fetchone()
            if found is None:
                errors.append(UserError("Customer does not exist", ("customerId",)))

        discount = draft_input.get("appliedDiscount")
        if discount:
            errors.extend(_validate_discount(discount))

        return errors, lines


def _validate_discount(discount: dict[str, Any]) -> list[UserError]:
    kinds = {kind.value for kind in DiscountKind}
    if discount.get("valueType") not in kinds:
        return [UserError("Applied discount value type is invalid", ("appliedDiscount", "valueType"))]
    try:
        value = Decimal(str(discount.get("value")))
    except InvalidOperation:
        return [UserError("Applied discount value is invalid", ("appliedDiscount", "value"))]
    if not value.is_finite() or value < 0:
        return [UserError("Applied discount value is invalid", ("appliedDiscount", "value"))]
    if discount["valueType"] == DiscountKind.PERCENTAGE.value and value > 100:
        return [UserError("Percentage discount can't exceed 100", ("appliedDiscount", "value"))]
    return []
