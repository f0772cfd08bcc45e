from __future__ import annotations

from enum import Enum

from bitebite.core.errors import InvalidTransitionError, ValidationError


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


INITIAL_STATUS = OrderStatus.PENDING
TERMINAL_STATUSES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})
VALID_STATUS_VALUES = tuple(status.value for status in OrderStatus)

FORWARD_TRANSITIONS: dict[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED}),
    OrderStatus.COMPLETED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def parse_status(value: str | OrderStatus | None) -> OrderStatus:
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError as exc:
        raise ValidationError(
            f"Invalid status. Must be one of: {', '.join(VALID_STATUS_VALUES)}"
        ) from exc


def allowed_next_statuses(current: OrderStatus, policy: str = "permissive") -> frozenset[OrderStatus]:
    if policy == "forward_only":
        return FORWARD_TRANSITIONS[current] | {current}
    return frozenset(OrderStatus)


def ensure_transition(current: OrderStatus, target: OrderStatus, policy: str = "permissive") -> None:
    """Raise when ``policy`` does not allow moving from ``current`` to ``target``.

    ``permissive`` accepts any pair. ``forward_only`` follows
    ``FORWARD_TRANSITIONS``; re-asserting the current status is always fine.
    """
    if target in allowed_next_statuses(current, policy):
        return
    raise InvalidTransitionError(
        f"Cannot change order status from {current.value} to {target.value}"
    )
