from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from bitebite.core.database import get_db
from bitebite.core.errors import OrderingError, to_http_exception
from bitebite.deps import require_admin_token
from bitebite.models.menu_item import MENU_CATEGORIES, MenuItem
from bitebite.services import catalog

router = APIRouter(prefix="/api", tags=["menu"])


class MenuItemCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., min_length=1, max_length=120)
    description: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    category: str = Field(..., description=f"Values: {', '.join(MENU_CATEGORIES)}")
    image: str = Field(..., min_length=1)
    popular: bool = False


class MenuItemUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None
    price: Optional[float] = Field(None, gt=0)
    category: Optional[str] = None
    image: Optional[str] = None
    popular: Optional[bool] = None


def _image_url(request: Request, image: str | None) -> str | None:
    if not image or image.startswith(("http://", "https://")):
        return image
    return f"{str(request.base_url).rstrip('/')}/{image.lstrip('/')}"


def _menu_item_to_dict(request: Request, item: MenuItem) -> dict:
    return {
        "id": item.id,
        "name": item.name,
        "description": item.description,
        "price": float(item.price),
        "category": item.category,
        "image": _image_url(request, item.image),
        "popular": bool(item.popular),
        "created_at": item.created_at.isoformat() if item.created_at else None,
        "updated_at": item.updated_at.isoformat() if item.updated_at else None,
    }


@router.get("/menu")
def list_menu_items(request: Request, db: Session = Depends(get_db)):
    items = catalog.list_menu_items(db)
    return [_menu_item_to_dict(request, item) for item in items]


@router.get("/menu/popular")
def list_popular_items(request: Request, db: Session = Depends(get_db)):
    items = catalog.list_popular(db)
    return [_menu_item_to_dict(request, item) for item in items]


@router.get("/menu/search")
def search_menu_items(
    request: Request,
    q: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    try:
        items = catalog.search(db, q)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return [_menu_item_to_dict(request, item) for item in items]


@router.get("/menu/category/{category}")
def list_menu_items_by_category(category: str, request: Request, db: Session = Depends(get_db)):
    try:
        items = catalog.list_by_category(db, category)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return [_menu_item_to_dict(request, item) for item in items]


@router.get("/menu/{menu_item_id}")
def get_menu_item(menu_item_id: str, request: Request, db: Session = Depends(get_db)):
    try:
        item = catalog.get_menu_item_by_id(db, menu_item_id)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return _menu_item_to_dict(request, item)


@router.post("/menu", status_code=201, dependencies=[Depends(require_admin_token)])
def create_menu_item(payload: MenuItemCreate, request: Request, db: Session = Depends(get_db)):
    try:
        item = catalog.create_menu_item(db, catalog.MenuItemData(**payload.model_dump()))
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return _menu_item_to_dict(request, item)


@router.put("/menu/{menu_item_id}", dependencies=[Depends(require_admin_token)])
def update_menu_item(
    menu_item_id: str,
    payload: MenuItemUpdate,
    request: Request,
    db: Session = Depends(get_db),
):
    try:
        item = catalog.update_menu_item(db, menu_item_id, payload.model_dump(exclude_unset=True))
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return _menu_item_to_dict(request, item)


@router.delete("/menu/{menu_item_id}", dependencies=[Depends(require_admin_token)])
def delete_menu_item(menu_item_id: str, db: Session = Depends(get_db)):
    try:
        catalog.delete_menu_item(db, menu_item_id)
    except OrderingError as exc:
        raise to_http_exception(exc) from exc
    return {"ok": True}
