from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from threading import Lock
from typing import Any, Iterator, Optional

from bitebite.services.kv_store import KeyValueStore

logger = logging.getLogger(__name__)
CART_PREFIX = "[CART]"

CART_STORAGE_KEY = "foodhub-cart"


@dataclass
class CartLine:
    menu_item_id: str
    name: str
    price: Decimal
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "menu_item_id": self.menu_item_id,
            "name": self.name,
            "price": str(self.price),
            "quantity": self.quantity,
        }


def cart_key(session_id: str) -> str:
    return f"{CART_STORAGE_KEY}:{session_id}"


def _parse_lines(raw: Optional[str]) -> list[CartLine]:
    if not raw:
        return []
    try:
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError("cart blob is not a list")
        lines = [
            CartLine(
                menu_item_id=str(entry["menu_item_id"]),
                name=str(entry["name"]),
                price=Decimal(str(entry["price"])),
                quantity=int(entry["quantity"]),
            )
            for entry in data
        ]
    except (ValueError, KeyError, TypeError, InvalidOperation):
        logger.warning("%s failed to load stored cart; starting empty", CART_PREFIX, exc_info=True)
        return []
    return [line for line in lines if line.quantity > 0]


class Cart:
    """Pre-checkout selections for one session.

    The cart is loaded once from ``store`` and every mutation writes the
    full cart back immediately, so a crash loses at most the operation in
    flight. ``total`` and ``item_count`` are always derived from the lines.
    """

    def __init__(self, store: KeyValueStore, key: str = CART_STORAGE_KEY) -> None:
        self._store = store
        self._key = key
        self._lines: list[CartLine] = _parse_lines(store.get(key))

    @property
    def key(self) -> str:
        return self._key

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines)

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self._lines), Decimal("0"))

    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def find(self, menu_item_id: str) -> Optional[CartLine]:
        for line in self._lines:
            if line.menu_item_id == menu_item_id:
                return line
        return None

    def add(self, menu_item) -> CartLine:
        """Add one unit of a catalog record (anything with id, name and price)."""
        menu_item_id = str(menu_item.id)
        line = self.find(menu_item_id)
        if line is not None:
            line.quantity += 1
        else:
            line = CartLine(
                menu_item_id=menu_item_id,
                name=menu_item.name,
                price=Decimal(str(menu_item.price)),
                quantity=1,
            )
            self._lines.append(line)
        self._persist()
        return line

    def update_quantity(self, menu_item_id: str, delta: int) -> Optional[CartLine]:
        line = self.find(menu_item_id)
        if line is None:
            return None
        new_quantity = line.quantity + delta
        if new_quantity <= 0:
            self._lines.remove(line)
            self._persist()
            return None
        line.quantity = new_quantity
        self._persist()
        return line

    def remove(self, menu_item_id: str) -> None:
        self._lines = [line for line in self._lines if line.menu_item_id != menu_item_id]
        self._persist()

    def clear(self) -> None:
        self._lines = []
        self._persist()

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": [line.to_dict() for line in self._lines],
            "total": float(self.total),
            "item_count": self.item_count,
        }

    def _persist(self) -> None:
        self._store.set(self._key, json.dumps([line.to_dict() for line in self._lines], ensure_ascii=False))


class CartSessions:
    """Serializes load-mutate-persist cycles per cart key.

    A key's lock lives only while some request holds or waits for it.
    """

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._locks: dict[str, tuple[Lock, int]] = {}
        self._guard = Lock()

    def _acquire_entry(self, key: str) -> Lock:
        with self._guard:
            lock, users = self._locks.get(key, (None, 0))
            if lock is None:
                lock = Lock()
            self._locks[key] = (lock, users + 1)
            return lock

    def _release_entry(self, key: str) -> None:
        with self._guard:
            lock, users = self._locks[key]
            if users <= 1:
                del self._locks[key]
            else:
                self._locks[key] = (lock, users - 1)

    def active_keys(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def open(self, session_id: str) -> Iterator[Cart]:
        key = cart_key(session_id)
        lock = self._acquire_entry(key)
        try:
            with lock:
                yield Cart(self.store, key)
        finally:
            self._release_entry(key)
