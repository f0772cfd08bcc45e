from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from sqlalchemy.orm import Session

from bitebite.core.database import get_db
from bitebite.core.errors import OrderingError, to_http_exception
from bitebite.deps import require_admin_token
from bitebite.models.order import Order
from bitebite.models.order_item import OrderItem
from bitebite.services.orders import (
    CustomerInfo,
    OrderLineInput,
    create_order,
    get_order_by_id,
    list_orders,
    update_order_status,
)

router = APIRouter(prefix="/api", tags=["orders"])


def _order_item_to_dict(item: OrderItem) -> Dict[str, Any]:
    return {
        "id": item.id,
        "order_id": item.order_id,
        "menu_item_id": item.menu_item_id,
        "menu_item_name": item.menu_item_name,
        "quantity": item.quantity,
        "price": float(item.price),
    }


def order_to_dict(o: Order) -> Dict[str, Any]:
    return {
        "id": o.id,
        "customer_name": o.customer_name,
        "customer_phone": o.customer_phone,
        "customer_address": o.customer_address,
        "notes": o.notes,
        "total_price": float(o.total_price),
        "status": o.status,
        "created_at": o.created_at.isoformat() if o.created_at else None,
        "updated_at": o.updated_at.isoformat() if o.updated_at else None,
        "items": [_order_item_to_dict(item) for item in o.items],
    }


class OrderItemIn(BaseModel):
    menu_item_id: str
    menu_item_name: str
    quantity: int
    price: float


class OrderCreate(BaseModel):
    customer_name: str
    customer_phone: Optional[str] = None
    customer_address: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItemIn]


class OrderStatusUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: str


@router.post("/orders", status_code=201)
def create_order_endpoint(payload: OrderCreate, db: Session = Depends(get_db)):
    customer = CustomerInfo(
        name=payload.customer_name,
        phone=payload.customer_phone,
        address=payload.customer_address,
        notes=payload.notes,
    )
    items = [
        OrderLineInput(
            menu_item_id=item.menu_item_id,
            menu_item_name=item.menu_item_name,
            quantity=item.quantity,
            price=item.price,
        )
        for item in payload.items
    ]
    try:
        order = create_order(db, customer, items)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return order_to_dict(order)


@router.get("/orders", dependencies=[Depends(require_admin_token)])
def list_orders_endpoint(status: Optional[str] = None, db: Session = Depends(get_db)):
    try:
        orders = list_orders(db, status=status)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return [order_to_dict(o) for o in orders]


@router.get("/orders/status/{status}", dependencies=[Depends(require_admin_token)])
def list_orders_by_status(status: str, db: Session = Depends(get_db)):
    return list_orders_endpoint(status=status, db=db)


@router.get("/orders/{order_id}")
def get_order(order_id: str, db: Session = Depends(get_db)):
    try:
        order = get_order_by_id(db, order_id)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return order_to_dict(order)


@router.put("/orders/{order_id}/status", dependencies=[Depends(require_admin_token)])
@router.patch("/orders/{order_id}/status", dependencies=[Depends(require_admin_token)])
def update_status(order_id: str, body: OrderStatusUpdate, db: Session = Depends(get_db)):
    try:
        order = update_order_status(db, order_id, body.status)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return order_to_dict(order)
