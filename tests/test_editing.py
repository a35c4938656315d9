from decimal import Decimal

import pytest

from tracker.editing import EditBuffer, Editing, Idle, PendingUpdate, Selection
from tracker.engine import ORDERS, SALES
from tracker.models import Order, Sale
from tracker.money import parse_money


def make_order(id="o1", price="45.00"):
    return Order(id=id, order_number="O1", product_name="labubu", purchase_price=Decimal(price))


def make_sale(id="s1", customer="alex chen"):
    return Sale(id=id, customer_name=customer, product_name="labubu", selling_price=Decimal("80"))


class TestEditBuffer:
    def test_starts_idle(self):
        buf = EditBuffer()
        assert buf.state == Idle()
        assert not buf.editing

    def test_begin_copies_current_value_as_text(self):
        buf = EditBuffer()
        state = buf.begin(ORDERS, make_order(price="45.50"), "purchasePrice")
        assert state == Editing("orders", "o1", "purchase_price", "45.50")
        assert buf.editing

    def test_commit_parses_numeric_fields(self):
        buf = EditBuffer()
        buf.begin(SALES, make_sale(), "sellingPrice")
        buf.set_pending("99.95")
        update = buf.commit(SALES)
        assert update == PendingUpdate("sales", "s1", {"selling_price": Decimal("99.95")})
        assert buf.state == Idle()

    def test_commit_unparseable_number_becomes_zero(self):
        buf = EditBuffer()
        buf.begin(ORDERS, make_order(), "purchase_price")
        buf.set_pending("abc")
        update = buf.commit(ORDERS)
        assert update.changes == {"purchase_price": Decimal("0")}

    def test_commit_passes_text_fields_through(self):
        buf = EditBuffer()
        buf.begin(SALES, make_sale(), "notes")
        buf.set_pending("  meet at the station  ")
        assert buf.commit(SALES).changes == {"notes": "  meet at the station  "}

    def test_cancel_issues_nothing(self):
        buf = EditBuffer()
        buf.begin(SALES, make_sale(), "customerName")
        buf.cancel()
        assert buf.state == Idle()
        assert buf.commit(SALES) is None

    def test_second_begin_discards_first(self):
        buf = EditBuffer()
        buf.begin(SALES, make_sale("a", "alex"), "customerName")
        buf.set_pending("half-typed")
        buf.begin(SALES, make_sale("b", "priya"), "customerName")
        assert buf.state == Editing("sales", "b", "customer_name", "priya")

        update = buf.commit(SALES)
        assert update.record_id == "b"
        assert update.changes == {"customer_name": "priya"}

    def test_non_editable_field_rejected(self):
        buf = EditBuffer()
        with pytest.raises(ValueError, match="cannot be edited"):
            buf.begin(ORDERS, make_order(), "popmartLink")
        assert buf.state == Idle()

    def test_set_pending_while_idle_raises(self):
        with pytest.raises(ValueError, match="No cell"):
            EditBuffer().set_pending("x")

    def test_discard_if_on_only_matches_same_record(self):
        buf = EditBuffer()
        buf.begin(SALES, make_sale("a"), "notes")
        buf.discard_if_on("sales", "b")
        assert buf.editing
        buf.discard_if_on("sales", "a")
        assert not buf.editing


class TestParseMoney:
    @pytest.mark.parametrize("text, expected", [
        ("12.5", Decimal("12.5")),
        ("  7", Decimal("7")),
        ("3.99abc", Decimal("3.99")),
        (".5", Decimal("0.5")),
        ("-4", Decimal("-4")),
        ("abc", Decimal("0")),
        ("", Decimal("0")),
        ("$5", Decimal("0")),
    ])
    def test_lenient_parse(self, text, expected):
        assert parse_money(text) == expected


class TestSelection:
    def test_toggle(self):
        sel = Selection()
        sel.toggle("a", True)
        sel.toggle("b", True)
        sel.toggle("a", False)
        assert sel.ids == {"b"}

    def test_select_all_is_exactly_the_filtered_set(self):
        sel = Selection({"stale"})
        sel.select_all(["a", "b"], True)
        assert sel.ids == {"a", "b"}
        sel.select_all(["a", "b"], False)
        assert sel.ids == set()

    def test_state(self):
        sel = Selection()
        assert sel.state(["a", "b"]) == "none"
        sel.toggle("a", True)
        assert sel.state(["a", "b"]) == "some"
        sel.toggle("b", True)
        assert sel.state(["a", "b"]) == "all"
