from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from bitebite.core.errors import NotFoundError, PersistenceError, ValidationError
from bitebite.models.order import Order
from bitebite.models.order_item import OrderItem
from bitebite.services import catalog
from bitebite.services.orders import (
    CustomerInfo,
    OrderLineInput,
    calculate_total,
    create_order,
    get_order_by_id,
    list_orders,
    update_order_status,
)


def _line(menu_item_id="3", name="Grilled Salmon", quantity=2, price="24.99"):
    return OrderLineInput(menu_item_id=menu_item_id, menu_item_name=name, quantity=quantity, price=Decimal(price))


def _row_counts(db):
    return db.query(Order).count(), db.query(OrderItem).count()


def test_grilled_salmon_scenario_creates_pending_order(seeded_db):
    order = create_order(seeded_db, CustomerInfo(name="Jane Doe"), [_line()])

    assert order.id.startswith("order_")
    assert order.status == "pending"
    assert order.total_price == Decimal("49.98")
    assert len(order.items) == 1
    item = order.items[0]
    assert item.id.startswith("item_")
    assert item.order_id == order.id
    assert item.menu_item_name == "Grilled Salmon"
    assert item.price == Decimal("24.99")
    assert item.quantity == 2


def test_total_is_exact_sum_of_lines(db):
    lines = [
        _line("1", "Crispy Spring Rolls", 3, "0.10"),
        _line("2", "Truffle Mushroom Soup", 7, "19.99"),
        _line("9", "Fresh Mango Smoothie", 1, "0.01"),
    ]

    order = create_order(db, CustomerInfo(name="Sam"), lines)

    assert order.total_price == Decimal("140.24")
    assert calculate_total(lines) == Decimal("140.24")


def test_float_prices_do_not_drift(db):
    lines = [OrderLineInput(menu_item_id="1", menu_item_name="Rolls", quantity=3, price=0.1)]

    order = create_order(db, CustomerInfo(name="Sam"), lines)

    assert order.total_price == Decimal("0.30")


def test_customer_fields_are_trimmed_and_blank_optionals_dropped(db):
    customer = CustomerInfo(name="  Jane Doe ", phone="   ", address=" 12 Harbor Street ", notes="")

    order = create_order(db, customer, [_line()])

    assert order.customer_name == "Jane Doe"
    assert order.customer_phone is None
    assert order.customer_address == "12 Harbor Street"
    assert order.notes is None


def test_missing_customer_name_is_rejected(db):
    with pytest.raises(ValidationError):
        create_order(db, CustomerInfo(name="  "), [_line()])

    assert _row_counts(db) == (0, 0)


def test_empty_order_is_rejected_without_rows(db):
    with pytest.raises(ValidationError) as exc_info:
        create_order(db, CustomerInfo(name="Jane Doe"), [])

    assert exc_info.value.message == "Order must contain at least one item"
    assert _row_counts(db) == (0, 0)


@pytest.mark.parametrize(
    ("quantity", "price", "message"),
    [
        (0, "24.99", "Item quantity must be greater than 0"),
        (-1, "24.99", "Item quantity must be greater than 0"),
        (1, "0", "Item price must be greater than 0"),
        (1, "-5.00", "Item price must be greater than 0"),
    ],
)
def test_non_positive_quantity_or_price_leaves_no_partial_order(db, quantity, price, message):
    create_order(db, CustomerInfo(name="Existing"), [_line()])
    before = _row_counts(db)

    with pytest.raises(ValidationError) as exc_info:
        create_order(
            db,
            CustomerInfo(name="Jane Doe"),
            [_line("1", "Crispy Spring Rolls", 1, "8.99"), _line(quantity=quantity, price=price)],
        )

    assert exc_info.value.message == message
    assert _row_counts(db) == before


def test_line_without_name_is_rejected(db):
    with pytest.raises(ValidationError) as exc_info:
        create_order(db, CustomerInfo(name="Jane Doe"), [_line(name=" ")])

    assert "menu_item_name" in exc_info.value.message


def test_items_keep_submission_order(db):
    lines = [_line(str(n), f"Dish {n}", 1, "5.00") for n in (5, 1, 9, 2)]

    order = create_order(db, CustomerInfo(name="Jane Doe"), lines)

    assert [item.menu_item_id for item in order.items] == ["5", "1", "9", "2"]


def test_snapshot_survives_catalog_changes(seeded_db, session_factory):
    order = create_order(seeded_db, CustomerInfo(name="Jane Doe"), [_line(), _line("7", "Chocolate Lava Cake", 1, "8.99")])

    catalog.update_menu_item(seeded_db, "3", {"name": "Salmon Deluxe", "price": 31.5})
    catalog.delete_menu_item(seeded_db, "7")

    fresh = session_factory()
    try:
        reloaded = get_order_by_id(fresh, order.id)
        assert len(reloaded.items) == 2
        assert [(i.menu_item_name, i.price, i.quantity) for i in reloaded.items] == [
            ("Grilled Salmon", Decimal("24.99"), 2),
            ("Chocolate Lava Cake", Decimal("8.99"), 1),
        ]
        assert reloaded.total_price == Decimal("58.97")
    finally:
        fresh.close()


def test_get_order_by_id_unknown_raises_not_found(db):
    with pytest.raises(NotFoundError):
        get_order_by_id(db, "order_missing")


def test_list_orders_newest_first(db):
    first = create_order(db, CustomerInfo(name="First"), [_line()])
    second = create_order(db, CustomerInfo(name="Second"), [_line()])

    assert [o.id for o in list_orders(db)] == [second.id, first.id]


def test_list_orders_by_status_follows_status_updates(db):
    order = create_order(db, CustomerInfo(name="Jane Doe"), [_line()])

    assert order.id not in {o.id for o in list_orders(db, "completed")}

    update_order_status(db, order.id, "completed")

    assert order.id in {o.id for o in list_orders(db, "completed")}
    assert order.id not in {o.id for o in list_orders(db, "pending")}


def test_list_orders_rejects_unknown_status(db):
    with pytest.raises(ValidationError):
        list_orders(db, "shipped")


def test_invalid_status_leaves_stored_status_unchanged(db, session_factory):
    order = create_order(db, CustomerInfo(name="Jane Doe"), [_line()])

    with pytest.raises(ValidationError) as exc_info:
        update_order_status(db, order.id, "shipped")

    assert exc_info.value.message.startswith("Invalid status. Must be one of:")
    fresh = session_factory()
    try:
        assert get_order_by_id(fresh, order.id).status == "pending"
    finally:
        fresh.close()


def test_update_status_unknown_order_raises_not_found(db):
    with pytest.raises(NotFoundError):
        update_order_status(db, "order_missing", "confirmed")


def test_update_status_refreshes_updated_at(db):
    order = create_order(db, CustomerInfo(name="Jane Doe"), [_line()])
    created = order.updated_at

    updated = update_order_status(db, order.id, "confirmed")

    assert updated.status == "confirmed"
    assert updated.updated_at >= created


def test_persistence_failure_rolls_back(db, monkeypatch):
    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("disk full"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(PersistenceError) as exc_info:
        create_order(db, CustomerInfo(name="Jane Doe"), [_line()])

    assert exc_info.value.message == "Failed to create order"
    assert _row_counts(db) == (0, 0)


def test_reprice_policy_uses_catalog_values(seeded_db):
    order = create_order(
        seeded_db,
        CustomerInfo(name="Jane Doe"),
        [_line(name="Cheap Fish", price="1.00")],
        price_policy="reprice",
    )

    assert order.items[0].menu_item_name == "Grilled Salmon"
    assert order.items[0].price == Decimal("24.99")
    assert order.total_price == Decimal("49.98")


def test_reject_policy_refuses_divergent_price(seeded_db):
    with pytest.raises(ValidationError):
        create_order(seeded_db, CustomerInfo(name="Jane Doe"), [_line(price="1.00")], price_policy="reject")

    assert _row_counts(seeded_db) == (0, 0)


def test_reject_policy_accepts_matching_price(seeded_db):
    order = create_order(seeded_db, CustomerInfo(name="Jane Doe"), [_line()], price_policy="reject")

    assert order.total_price == Decimal("49.98")


def test_checked_policies_require_known_menu_items(seeded_db):
    with pytest.raises(ValidationError) as exc_info:
        create_order(seeded_db, CustomerInfo(name="Jane Doe"), [_line("999")], price_policy="reprice")

    assert exc_info.value.message == "Menu item not found: 999"


@pytest.mark.parametrize("price", ["24.995", "0.004"])
def test_sub_cent_price_is_rejected_not_rounded(db, price):
    with pytest.raises(ValidationError) as exc_info:
        create_order(db, CustomerInfo(name="Jane Doe"), [_line(price=price)])

    assert exc_info.value.message == "Item price must have at most 2 decimal places"
    assert _row_counts(db) == (0, 0)


def test_float_price_with_two_decimals_is_kept_exactly(db):
    lines = [OrderLineInput(menu_item_id="3", menu_item_name="Grilled Salmon", quantity=2, price=24.99)]

    order = create_order(db, CustomerInfo(name="Jane Doe"), lines)

    assert order.items[0].price == Decimal("24.99")
    assert order.total_price == Decimal("49.98")
