"""Runtime configuration defaults for the backend store, logging and printing."""

from __future__ import annotations

import os

DB_PATH = os.environ.get("MATRIX_ORDER_DB_PATH", "data/matrix_order.db")
DEBUG_LOG_PATH = os.environ.get("MATRIX_ORDER_DEBUG_LOG", "/tmp/matrix-order-debug.log")

# Draft orders created here are tagged so recent orders can be found again.
APP_TAG = "MatrixApp"
DISCOUNT_DESCRIPTION = "Custom Discount"
WALK_IN_CUSTOMER = "Walk-in"

RECENT_ORDER_SCAN_LIMIT = 50
RECENT_ORDER_DISPLAY_LIMIT = 5
CUSTOMER_SEARCH_MIN_CHARS = 2
CUSTOMER_SEARCH_LIMIT = 10

PRINT_TICKETS = os.environ.get("MATRIX_ORDER_PRINT_TICKETS", "").strip() == "1"
PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 28
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNS.ttf"
PRINTER_LEFT_INDENT_PX = 16
PRINTER_TAIL_SPACER_PX = 70

INVOICE_BASE_URL = "https://matrix-order.local/invoices"
