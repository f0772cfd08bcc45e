from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Optional

from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from bitebite.core import config
from bitebite.core.errors import NotFoundError, PersistenceError, ValidationError
from bitebite.models.menu_item import MenuItem
from bitebite.models.order import Order
from bitebite.models.order_item import OrderItem
from bitebite.services.order_status import INITIAL_STATUS, ensure_transition, parse_status

logger = logging.getLogger(__name__)
ORDERS_PREFIX = "[ORDERS]"

CENT = Decimal("0.01")


@dataclass
class CustomerInfo:
    name: str
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


@dataclass
class OrderLineInput:
    menu_item_id: str
    menu_item_name: str
    quantity: int
    price: Decimal


def new_order_id() -> str:
    return f"order_{uuid.uuid4().hex}"


def new_order_item_id() -> str:
    return f"item_{uuid.uuid4().hex}"


def _clean_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _to_money(value) -> Decimal:
    if isinstance(value, float):
        value = str(value)
    try:
        amount = Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ValidationError("Item price must be a number") from exc
    if not amount.is_finite():
        raise ValidationError("Item price must be a number")
    try:
        cents = amount.quantize(CENT)
    except InvalidOperation as exc:
        raise ValidationError("Item price is out of range") from exc
    if amount != cents:
        raise ValidationError("Item price must have at most 2 decimal places")
    return cents


def _validate_customer(customer: CustomerInfo) -> CustomerInfo:
    name = (customer.name or "").strip()
    if not name:
        raise ValidationError("Customer name is required")
    return CustomerInfo(
        name=name,
        phone=_clean_optional(customer.phone),
        address=_clean_optional(customer.address),
        notes=_clean_optional(customer.notes),
    )


def _validate_lines(items: list[OrderLineInput]) -> list[OrderLineInput]:
    if not items:
        raise ValidationError("Order must contain at least one item")

    normalized: list[OrderLineInput] = []
    for item in items:
        menu_item_id = str(item.menu_item_id or "").strip()
        menu_item_name = str(item.menu_item_name or "").strip()
        if not menu_item_id or not menu_item_name:
            raise ValidationError("Each item must have menu_item_id, menu_item_name, quantity, and price")
        if isinstance(item.quantity, bool) or not isinstance(item.quantity, int):
            raise ValidationError("Item quantity must be a whole number")
        if item.quantity <= 0:
            raise ValidationError("Item quantity must be greater than 0")
        price = _to_money(item.price)
        if price <= 0:
            raise ValidationError("Item price must be greater than 0")
        normalized.append(
            OrderLineInput(
                menu_item_id=menu_item_id,
                menu_item_name=menu_item_name,
                quantity=item.quantity,
                price=price,
            )
        )
    return normalized


def _apply_price_policy(db: Session, items: list[OrderLineInput], policy: str) -> list[OrderLineInput]:
    if policy == "trust":
        return items

    ids = {item.menu_item_id for item in items}
    catalog = {row.id: row for row in db.query(MenuItem).filter(MenuItem.id.in_(ids)).all()}

    checked: list[OrderLineInput] = []
    for item in items:
        menu_item = catalog.get(item.menu_item_id)
        if menu_item is None:
            raise ValidationError(f"Menu item not found: {item.menu_item_id}")
        catalog_price = Decimal(menu_item.price).quantize(CENT)
        if policy == "reject":
            if catalog_price != item.price:
                raise ValidationError(
                    f"Price for {item.menu_item_name} changed to {catalog_price}; please review your cart"
                )
            checked.append(item)
            continue
        if catalog_price != item.price:
            logger.info(
                "%s repriced menu_item_id=%s submitted=%s catalog=%s",
                ORDERS_PREFIX,
                item.menu_item_id,
                item.price,
                catalog_price,
            )
        checked.append(
            OrderLineInput(
                menu_item_id=item.menu_item_id,
                menu_item_name=menu_item.name,
                quantity=item.quantity,
                price=catalog_price,
            )
        )
    return checked


def calculate_total(items: list[OrderLineInput]) -> Decimal:
    total = sum((item.price * item.quantity for item in items), Decimal("0"))
    return total.quantize(CENT)


def create_order(
    db: Session,
    customer: CustomerInfo,
    items: list[OrderLineInput],
    *,
    price_policy: Optional[str] = None,
) -> Order:
    """Validate, price and persist an order with its items in one transaction.

    Either the header and every item row are committed, or nothing is.
    """
    customer = _validate_customer(customer)
    lines = _validate_lines(items)
    lines = _apply_price_policy(db, lines, price_policy or config.ORDER_PRICE_POLICY)
    total_price = calculate_total(lines)

    now = datetime.now(timezone.utc)
    order = Order(
        id=new_order_id(),
        customer_name=customer.name,
        customer_phone=customer.phone,
        customer_address=customer.address,
        notes=customer.notes,
        total_price=total_price,
        status=INITIAL_STATUS.value,
        created_at=now,
        updated_at=now,
    )
    order.items = [
        OrderItem(
            id=new_order_item_id(),
            menu_item_id=line.menu_item_id,
            menu_item_name=line.menu_item_name,
            quantity=line.quantity,
            price=line.price,
            position=position,
        )
        for position, line in enumerate(lines)
    ]

    try:
        db.add(order)
        db.flush()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s create failed customer=%s items=%s", ORDERS_PREFIX, customer.name, len(lines))
        raise PersistenceError("Failed to create order") from exc

    db.refresh(order)
    logger.info(
        "%s created order_id=%s items=%s total_price=%s",
        ORDERS_PREFIX,
        order.id,
        len(order.items),
        order.total_price,
    )
    return order


def _order_query(db: Session):
    return db.query(Order).options(selectinload(Order.items))


def get_order_by_id(db: Session, order_id: str) -> Order:
    order = _order_query(db).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def list_orders(db: Session, status: Optional[str] = None) -> list[Order]:
    query = _order_query(db)
    if status is not None:
        query = query.filter(Order.status == parse_status(status).value)
    return query.order_by(desc(Order.created_at)).all()


def update_order_status(
    db: Session,
    order_id: str,
    new_status: str,
    *,
    policy: Optional[str] = None,
) -> Order:
    target = parse_status(new_status)
    order = get_order_by_id(db, order_id)

    previous_status = parse_status(order.status)
    ensure_transition(previous_status, target, policy or config.ORDER_STATUS_POLICY)

    order.status = target.value
    order.updated_at = datetime.now(timezone.utc)
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s status update failed order_id=%s", ORDERS_PREFIX, order_id)
        raise PersistenceError("Failed to update order status") from exc

    db.refresh(order)
    logger.info(
        "%s status changed order_id=%s from=%s to=%s",
        ORDERS_PREFIX,
        order.id,
        previous_status.value,
        order.status,
    )
    return order
