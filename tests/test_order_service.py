import re

import pytest

from printhub.engine.models import PricingRule
from printhub.services.order_service import generate_order_id
from printhub.services.quote_service import PrintItem
from printhub.services.record_store import RecordNotFound

CUSTOMER = {"name": "Asha", "phone": "12345", "email": "asha@example.com"}


def test_guest_order_priced_at_regular_defaults(orders):
    order = orders.place_order([PrintItem(name="notes.pdf", pages=10, copies=2)], CUSTOMER)

    assert order["user_id"] == "guest"
    assert order["tier"] == "regular"
    assert order["status"] == "pending"
    assert order["total"] == 30.0
    assert order["files"][0]["price"] == 30.0
    assert order["files"][0]["settings"]["binding_id"] == "none"
    assert re.match(r"^PH-[0-9A-Z]+-[0-9A-Z]{4}$", order["order_id"])


def test_user_order_uses_user_tier_and_updates_stats(orders, users):
    user, _ = users.create_user(name="Asha", phone="12345", tier="student")
    order = orders.place_order([PrintItem(name="a.pdf", pages=10)], CUSTOMER, user=user)

    assert order["tier"] == "student"
    assert order["total"] == 10.0
    stored = users.get_user(user["id"])
    assert stored["orders"] == 1
    assert stored["total_spent"] == 10.0


def test_order_with_binding(orders, catalog, spiral_binding):
    binding = catalog.create_binding(spiral_binding)
    order = orders.place_order(
        [PrintItem(name="thesis.pdf", pages=10, copies=2, binding_id=binding.binding_id)], CUSTOMER,
    )
    assert order["total"] == 60.0


def test_order_without_items_rejected(orders):
    with pytest.raises(ValueError, match="no files"):
        orders.place_order([], CUSTOMER)


def test_unknown_delivery_type_rejected(orders):
    with pytest.raises(ValueError, match="delivery type"):
        orders.place_order([PrintItem(name="a.pdf", pages=1)], CUSTOMER, delivery_type="drone")


def test_empty_page_selection_rejected(orders):
    with pytest.raises(ValueError, match="selects no pages for: a.pdf"):
        orders.place_order([PrintItem(name="a.pdf", pages=3, page_range="7-9")], CUSTOMER)


def test_missing_pricing_rule_blocks_order(orders, catalog):
    catalog.create_pricing_rule(PricingRule(rule_id="bw-only", color="monochrome", duplex="single-sided",
                                            from_page=1, to_page=100, regular_price="1"))
    with pytest.raises(ValueError, match="No pricing configured for: poster.pdf"):
        orders.place_order([PrintItem(name="poster.pdf", pages=2, color="color")], CUSTOMER)


def test_genuinely_free_printing_allowed(orders, catalog):
    catalog.create_pricing_rule(PricingRule(rule_id="free", color="monochrome", duplex="single-sided",
                                            from_page=1, to_page=100))
    order = orders.place_order([PrintItem(name="flyer.pdf", pages=2)], CUSTOMER)
    assert order["total"] == 0


def test_list_orders_filters_by_owner(orders, users):
    owner, _ = users.create_user(name="Asha", phone="1")
    other, _ = users.create_user(name="Ravi", phone="2")
    admin, _ = users.create_user(name="Admin", phone="3", role="admin")
    orders.place_order([PrintItem(name="a.pdf", pages=1)], CUSTOMER, user=owner)
    orders.place_order([PrintItem(name="b.pdf", pages=1)], CUSTOMER, user=other)

    assert [o["files"][0]["name"] for o in orders.list_orders(user=owner)] == ["a.pdf"]
    assert len(orders.list_orders(user=admin)) == 2


def test_update_status(orders):
    order = orders.place_order([PrintItem(name="a.pdf", pages=1)], CUSTOMER)
    updated = orders.update_status(order["id"], "ready")

    assert updated["status"] == "ready"
    assert orders.list_orders(status="ready")[0]["id"] == order["id"]


def test_update_status_errors(orders):
    order = orders.place_order([PrintItem(name="a.pdf", pages=1)], CUSTOMER)
    with pytest.raises(ValueError, match="Unknown order status"):
        orders.update_status(order["id"], "lost")
    with pytest.raises(RecordNotFound):
        orders.update_status("missing", "ready")


def test_generate_order_id_encodes_time():
    assert generate_order_id("PH", now_ms=36 ** 2).startswith("PH-100-")
