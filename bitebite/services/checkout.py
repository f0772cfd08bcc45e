from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from bitebite.core.errors import OrderingError, ValidationError
from bitebite.models.order import Order
from bitebite.services.cart import Cart, CartLine
from bitebite.services.orders import CustomerInfo, OrderLineInput, create_order

logger = logging.getLogger(__name__)
CHECKOUT_PREFIX = "[CHECKOUT]"


def cart_lines_to_order_lines(lines: list[CartLine]) -> list[OrderLineInput]:
    return [
        OrderLineInput(
            menu_item_id=line.menu_item_id,
            menu_item_name=line.name,
            quantity=line.quantity,
            price=line.price,
        )
        for line in lines
    ]


def submit(
    db: Session,
    customer: CustomerInfo,
    cart: Cart,
    *,
    price_policy: Optional[str] = None,
) -> Order:
    """Turn the cart into an order and clear it once the order is committed.

    Failures propagate unchanged and leave the cart exactly as it was; no
    retry is attempted.
    """
    if cart.is_empty():
        raise ValidationError("Cart is empty")

    try:
        order = create_order(
            db,
            customer,
            cart_lines_to_order_lines(cart.lines),
            price_policy=price_policy,
        )
    except OrderingError as exc:
        logger.warning("%s failed key=%s kind=%s message=%s", CHECKOUT_PREFIX, cart.key, exc.kind, exc.message)
        raise

    try:
        cart.clear()
    except OrderingError as exc:
        # order is already committed
        logger.error(
            "%s cart clear failed key=%s order_id=%s kind=%s message=%s",
            CHECKOUT_PREFIX,
            cart.key,
            order.id,
            exc.kind,
            exc.message,
        )

    logger.info("%s completed key=%s order_id=%s", CHECKOUT_PREFIX, cart.key, order.id)
    return order
