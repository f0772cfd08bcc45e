from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from bitebite.core.errors import ConflictError, NotFoundError, PersistenceError, ValidationError
from bitebite.models.menu_item import MENU_CATEGORIES, MenuItem

logger = logging.getLogger(__name__)
CATALOG_PREFIX = "[CATALOG]"


@dataclass
class MenuItemData:
    id: str
    name: str
    description: str
    price: Decimal
    category: str
    image: str
    popular: bool = False


def validate_category(category: str) -> str:
    if category not in MENU_CATEGORIES:
        raise ValidationError(f"Invalid category. Must be: {', '.join(MENU_CATEGORIES)}")
    return category


def _validate_price(price: Any) -> Decimal:
    if isinstance(price, bool) or not isinstance(price, (int, float, Decimal)):
        raise ValidationError("Price must be a positive number")
    amount = Decimal(str(price))
    if amount <= 0:
        raise ValidationError("Price must be a positive number")
    return amount


def list_menu_items(db: Session) -> list[MenuItem]:
    return db.query(MenuItem).order_by(MenuItem.category.asc(), MenuItem.name.asc()).all()


def get_menu_item_by_id(db: Session, menu_item_id: str) -> MenuItem:
    item = db.query(MenuItem).filter(MenuItem.id == menu_item_id).first()
    if not item:
        raise NotFoundError("Menu item not found")
    return item


def list_by_category(db: Session, category: str) -> list[MenuItem]:
    validate_category(category)
    return db.query(MenuItem).filter(MenuItem.category == category).order_by(MenuItem.name.asc()).all()


def list_popular(db: Session) -> list[MenuItem]:
    return (
        db.query(MenuItem)
        .filter(MenuItem.popular.is_(True))
        .order_by(MenuItem.category.asc(), MenuItem.name.asc())
        .all()
    )


def search(db: Session, term: Optional[str]) -> list[MenuItem]:
    term = (term or "").strip()
    if not term:
        raise ValidationError("Search term is required")
    pattern = f"%{term.lower()}%"
    return (
        db.query(MenuItem)
        .filter(or_(func.lower(MenuItem.name).like(pattern), func.lower(MenuItem.description).like(pattern)))
        .order_by(MenuItem.name.asc())
        .all()
    )


def create_menu_item(db: Session, data: MenuItemData) -> MenuItem:
    item = MenuItem(
        id=data.id.strip(),
        name=data.name.strip(),
        description=data.description,
        price=_validate_price(data.price),
        category=validate_category(data.category),
        image=data.image,
        popular=bool(data.popular),
    )
    if not item.id or not item.name:
        raise ValidationError("Missing required fields: id, name, description, price, category, image")

    try:
        db.add(item)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Menu item with this ID already exists") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s create failed id=%s", CATALOG_PREFIX, data.id)
        raise PersistenceError("Failed to create menu item") from exc

    db.refresh(item)
    logger.info("%s created id=%s", CATALOG_PREFIX, item.id)
    return item


def update_menu_item(db: Session, menu_item_id: str, changes: dict[str, Any]) -> MenuItem:
    """Apply an already-typed patch; ``changes`` holds only the fields the caller set."""
    if not changes:
        raise ValidationError("No valid fields to update")

    item = get_menu_item_by_id(db, menu_item_id)
    null_fields = sorted(field for field, value in changes.items() if value is None)
    if null_fields:
        raise ValidationError(f"Fields cannot be null: {', '.join(null_fields)}")
    if "category" in changes:
        validate_category(changes["category"])
    if "price" in changes:
        changes["price"] = _validate_price(changes["price"])
    if "name" in changes and not str(changes["name"] or "").strip():
        raise ValidationError("Name must not be empty")

    for field, value in changes.items():
        setattr(item, field, value)

    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s update failed id=%s", CATALOG_PREFIX, menu_item_id)
        raise PersistenceError("Failed to update menu item") from exc

    db.refresh(item)
    logger.info("%s updated id=%s fields=%s", CATALOG_PREFIX, item.id, sorted(changes))
    return item


def delete_menu_item(db: Session, menu_item_id: str) -> None:
    item = get_menu_item_by_id(db, menu_item_id)
    try:
        db.delete(item)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("%s delete failed id=%s", CATALOG_PREFIX, menu_item_id)
        raise PersistenceError("Failed to delete menu item") from exc
    logger.info("%s deleted id=%s", CATALOG_PREFIX, menu_item_id)
