from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from bitebite.models.menu_item import MenuItem

logger = logging.getLogger(__name__)
SEED_PREFIX = "[SEED]"

MENU_DATA = [
    {
        "id": "1",
        "name": "Crispy Spring Rolls",
        "description": "Hand-rolled spring rolls with fresh vegetables and sweet chili sauce",
        "price": "8.99",
        "category": "appetizer",
        "image": "/images/spring-rolls.jpg",
        "popular": True,
    },
    {
        "id": "2",
        "name": "Truffle Mushroom Soup",
        "description": "Creamy wild mushroom soup with truffle oil and herbs",
        "price": "9.99",
        "category": "appetizer",
        "image": "/images/mushroom-soup.jpg",
        "popular": False,
    },
    {
        "id": "3",
        "name": "Grilled Salmon",
        "description": "Atlantic salmon with lemon butter sauce, asparagus, and roasted potatoes",
        "price": "24.99",
        "category": "main",
        "image": "/images/grilled-salmon.jpg",
        "popular": True,
    },
    {
        "id": "4",
        "name": "Wagyu Beef Burger",
        "description": "Premium wagyu patty with aged cheddar, caramelized onions, and truffle aioli",
        "price": "18.99",
        "category": "main",
        "image": "/images/wagyu-burger.jpg",
        "popular": True,
    },
    {
        "id": "5",
        "name": "Margherita Pizza",
        "description": "Classic Italian pizza with fresh mozzarella, basil, and San Marzano tomatoes",
        "price": "16.99",
        "category": "main",
        "image": "/images/margherita-pizza.jpg",
        "popular": False,
    },
    {
        "id": "6",
        "name": "Thai Green Curry",
        "description": "Aromatic green curry with chicken, bamboo shoots, and jasmine rice",
        "price": "15.99",
        "category": "main",
        "image": "/images/green-curry.jpg",
        "popular": False,
    },
    {
        "id": "7",
        "name": "Chocolate Lava Cake",
        "description": "Warm chocolate cake with a molten center, vanilla ice cream",
        "price": "8.99",
        "category": "dessert",
        "image": "/images/lava-cake.jpg",
        "popular": True,
    },
    {
        "id": "8",
        "name": "Tiramisu",
        "description": "Classic Italian dessert with espresso-soaked ladyfingers and mascarpone",
        "price": "7.99",
        "category": "dessert",
        "image": "/images/tiramisu.jpg",
        "popular": False,
    },
    {
        "id": "9",
        "name": "Fresh Mango Smoothie",
        "description": "Blended mango with coconut milk and a hint of lime",
        "price": "6.99",
        "category": "drink",
        "image": "/images/mango-smoothie.jpg",
        "popular": False,
    },
    {
        "id": "10",
        "name": "Iced Matcha Latte",
        "description": "Premium matcha green tea with oat milk and honey",
        "price": "5.99",
        "category": "drink",
        "image": "/images/matcha-latte.jpg",
        "popular": False,
    },
]


def seed_menu(db: Session) -> int:
    existing = db.query(MenuItem).count()
    if existing:
        logger.info("%s menu already has %s items; skipping", SEED_PREFIX, existing)
        return 0

    try:
        for entry in MENU_DATA:
            db.add(MenuItem(**{**entry, "price": Decimal(entry["price"])}))
        db.commit()
    except Exception:
        db.rollback()
        logger.exception("%s failed", SEED_PREFIX)
        raise

    logger.info("%s seeded %s menu items", SEED_PREFIX, len(MENU_DATA))
    return len(MENU_DATA)
