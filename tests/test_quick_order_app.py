"""Headless tests for the quick order screen."""

import asyncio

from matrix_order.models import DiscountKind
from matrix_order.quantities import QuantityStore
from matrix_order.quick_order_app import QuickOrderApp
from matrix_order.submission import build_draft_order_input

TEE_ID = "gid://shopify/Product/1001"
TOTE_ID = "gid://shopify/Product/1002"
SOCK_ID = "gid://shopify/Product/1003"
TEE_S_BLACK = "gid://shopify/ProductVariant/1001"
TEE_M_BLACK = "gid://shopify/ProductVariant/1005"
TEE_L_BLACK = "gid://shopify/ProductVariant/1009"
TEE_XL_BLACK = "gid://shopify/ProductVariant/1013"
TEE_S_WHITE = "gid://shopify/ProductVariant/1002"
TOTE_NATURAL = "gid://shopify/ProductVariant/2001"


def _app(backend, tmp_path, product_id=TEE_ID):
    return QuickOrderApp(
        backend,
        product_id=product_id,
        print_tickets=False,
        debug_log_path=tmp_path / "debug.log",
    )


def _run(app, scenario):
    async def runner():
        async with app.run_test() as pilot:
            await pilot.pause()
            await scenario(pilot)

    asyncio.run(runner())


def test_typing_and_enter_moves_down(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("3", "enter", "1", "2")
        await pilot.pause()

    _run(app, scenario)
    assert app.quantities.as_dict() == {TEE_S_BLACK: 3, TEE_M_BLACK: 12}
    assert app.cursor == (1, 0)


def test_enter_at_bottom_wraps_to_next_column(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("enter", "enter", "enter", "enter", "4")
        await pilot.pause()

    _run(app, scenario)
    assert app.cursor == (0, 1)
    assert app.quantities.as_dict() == {TEE_S_WHITE: 4}


def test_backspace_and_delete(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("2", "5", "backspace")
        await pilot.pause()
        assert app.quantities.get(TEE_S_BLACK) == 2
        await pilot.press("delete")
        await pilot.pause()

    _run(app, scenario)
    assert len(app.quantities) == 0


def test_sold_out_cell_ignores_input(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        # S / Navy has no stock.
        await pilot.press("right", "right", "right", "5")
        await pilot.pause()

    _run(app, scenario)
    assert app.cursor == (0, 3)
    assert len(app.quantities) == 0


def test_paste_fills_column(backend, tmp_path):
    app = _app(backend, tmp_path)
    applied = []

    async def scenario(pilot):
        applied.append(app.paste_text("1\r\n2\nabc\n4\n9"))
        await pilot.pause()

    _run(app, scenario)
    assert applied == [3]
    assert app.quantities.as_dict() == {TEE_S_BLACK: 1, TEE_M_BLACK: 2, TEE_XL_BLACK: 4}


def test_submit_creates_order_and_resets_cart(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("3")
        app.po_number = "5544"
        app.note = "rush"
        await pilot.press("ctrl+s")
        await pilot.pause()

    _run(app, scenario)
    assert len(app.quantities) == 0
    assert app.po_number == ""
    assert app.system_status == "Order Created: #D1 (draft_orders/1)"
    (order,) = backend.recent_orders(TEE_ID)
    assert order.items == ((TEE_S_BLACK, 3),)
    assert [o.name for o in app.recent_orders] == ["#D1"]


def test_oversell_blocks_submission(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        # L / Black has 2 in stock.
        await pilot.press("down", "down", "5", "ctrl+s")
        await pilot.pause()

    _run(app, scenario)
    assert app.system_status == "Not Enough Stock"
    assert app.status_is_error
    assert app.quantities.as_dict() == {TEE_L_BLACK: 5}
    assert backend.recent_orders() == []


def test_empty_cart_blocks_submission(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("ctrl+s")
        await pilot.pause()

    _run(app, scenario)
    assert app.system_status == "Cart is empty"


def test_backend_user_error_keeps_cart(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("2")
        app.discount_kind = DiscountKind.PERCENTAGE
        app.discount_raw = "150"
        await pilot.press("ctrl+s")
        await pilot.pause()

    _run(app, scenario)
    assert app.system_status == "Percentage discount can't exceed 100"
    assert app.quantities.as_dict() == {TEE_S_BLACK: 2}


def test_repeat_recent_order(backend, tmp_path):
    store = QuantityStore()
    store.set(TEE_S_BLACK, 2)
    store.set(TOTE_NATURAL, 1)
    backend.create_draft_order(build_draft_order_input(store))
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("9", "l")
        await pilot.pause()

    _run(app, scenario)
    assert app.quantities.as_dict() == {TEE_S_BLACK: 2}
    assert app.system_status == "Loaded 2 items from #D1"


def test_repeat_with_no_matching_items_keeps_cart(backend, tmp_path):
    store = QuantityStore()
    store.set(TOTE_NATURAL, 1)
    backend.create_draft_order(build_draft_order_input(store))
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("4")
        await pilot.pause()
        app.load_recent_order(backend.recent_orders()[0])
        await pilot.pause()

    _run(app, scenario)
    assert app.quantities.as_dict() == {TEE_S_BLACK: 4}
    assert app.system_status == "No matching items found for this product"


def test_incompatible_product(backend, tmp_path):
    app = _app(backend, tmp_path, product_id=SOCK_ID)

    async def scenario(pilot):
        await pilot.press("5", "ctrl+s")
        await pilot.pause()

    _run(app, scenario)
    assert app.index is None
    assert "3 options" in app.incompatible_message
    assert len(app.quantities) == 0
    assert app.system_status == "Select a compatible product first"


def test_product_picker_switches_product_and_clears_cart(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("2", "p")
        await pilot.pause()
        await pilot.press("t", "o", "t", "e", "enter")
        await pilot.pause()

    _run(app, scenario)
    assert app.product.product_id == TOTE_ID
    assert not app.index.is_matrix
    assert len(app.quantities) == 0


def test_customer_picker_and_po_field(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("c")
        await pilot.pause()
        await pilot.press("o", "k", "a", "enter")
        await pilot.pause()
        await pilot.press("o")
        await pilot.pause()
        await pilot.press("7", "7", "enter")
        await pilot.pause()

    _run(app, scenario)
    assert app.customer.display_name == "Ada Okafor"
    assert app.po_number == "77"
    assert len(app.quantities) == 0


def test_clear_cart(backend, tmp_path):
    app = _app(backend, tmp_path)

    async def scenario(pilot):
        await pilot.press("6", "x")
        await pilot.pause()

    _run(app, scenario)
    assert len(app.quantities) == 0
    assert app.system_status == "Cart cleared"
    assert (tmp_path / "debug.log").read_text().count("on_key") >= 2


def test_breakdown_opens_and_closes(backend, tmp_path):
    app = _app(backend, tmp_path)
    screens = []

    async def scenario(pilot):
        await pilot.press("2", "b")
        await pilot.pause()
        screens.append(type(app.screen).__name__)
        await pilot.press("escape")
        await pilot.pause()
        screens.append(type(app.screen).__name__)

    _run(app, scenario)
    assert screens[0] == "BreakdownModal"
    assert screens[1] != "BreakdownModal"
    assert app.quantities.get(TEE_S_BLACK) == 2


def test_breakdown_stays_open_until_dismissed(backend, tmp_path):
    app = _app(backend, tmp_path)
    seen = []

    async def scenario(pilot):
        await pilot.press("2", "b")
        await pilot.pause()
        await pilot.press("b", "3")
        await pilot.pause()
        seen.append((type(app.screen).__name__, app.screen.summary.total_items))
        await pilot.press("q")
        await pilot.pause()
        await pilot.press("down", "4")
        await pilot.pause()

    _run(app, scenario)
    assert seen == [("BreakdownModal", 2)]
    assert app.quantities.as_dict() == {TEE_S_BLACK: 2, TEE_M_BLACK: 4}
