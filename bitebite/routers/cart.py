from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from bitebite.core.database import get_db
from bitebite.core.errors import OrderingError, to_http_exception
from bitebite.deps import get_cart_sessions
from bitebite.routers.orders import order_to_dict
from bitebite.services import catalog, checkout
from bitebite.services.cart import CartSessions
from bitebite.services.orders import CustomerInfo

router = APIRouter(prefix="/api/cart", tags=["cart"])

SessionId = Annotated[str, Path(min_length=1, max_length=128, pattern=r"^[A-Za-z0-9_-]+$")]


class CartItemAdd(BaseModel):
    model_config = ConfigDict(extra="forbid")

    menu_item_id: str


class CartQuantityChange(BaseModel):
    model_config = ConfigDict(extra="forbid")

    delta: int


class CheckoutRequest(BaseModel):
    customer_name: str
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    notes: Optional[str] = None


@router.get("/{session_id}")
def get_cart(session_id: SessionId, sessions: CartSessions = Depends(get_cart_sessions)):
    with sessions.open(session_id) as cart:
        return cart.to_dict()


@router.post("/{session_id}/items")
def add_cart_item(
    payload: CartItemAdd,
    session_id: SessionId,
    db: Session = Depends(get_db),
    sessions: CartSessions = Depends(get_cart_sessions),
):
    try:
        menu_item = catalog.get_menu_item_by_id(db, payload.menu_item_id)
        with sessions.open(session_id) as cart:
            cart.add(menu_item)
            return cart.to_dict()
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.patch("/{session_id}/items/{menu_item_id}")
def change_cart_item_quantity(
    menu_item_id: str,
    payload: CartQuantityChange,
    session_id: SessionId,
    sessions: CartSessions = Depends(get_cart_sessions),
):
    try:
        with sessions.open(session_id) as cart:
            cart.update_quantity(menu_item_id, payload.delta)
            return cart.to_dict()
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{session_id}/items/{menu_item_id}")
def remove_cart_item(
    menu_item_id: str,
    session_id: SessionId,
    sessions: CartSessions = Depends(get_cart_sessions),
):
    try:
        with sessions.open(session_id) as cart:
            cart.remove(menu_item_id)
            return cart.to_dict()
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.delete("/{session_id}")
def clear_cart(session_id: SessionId, sessions: CartSessions = Depends(get_cart_sessions)):
    try:
        with sessions.open(session_id) as cart:
            cart.clear()
            return cart.to_dict()
    except OrderingError as exc:
        raise to_http_exception(exc) from exc


@router.post("/{session_id}/checkout", status_code=201)
def checkout_cart(
    payload: CheckoutRequest,
    session_id: SessionId,
    db: Session = Depends(get_db),
    sessions: CartSessions = Depends(get_cart_sessions),
):
    customer = CustomerInfo(
        name=payload.customer_name,
        phone=payload.customer_phone,
        address=payload.customer_address,
        notes=payload.notes,
    )
    try:
        with sessions.open(session_id) as cart:
            order = checkout.submit(db, customer, cart)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return {"order_id": order.id, "order": order_to_dict(order)}
