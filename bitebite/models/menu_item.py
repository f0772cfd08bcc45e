from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Numeric, String, Text

from bitebite.core.database import Base

MENU_CATEGORIES = ("appetizer", "main", "dessert", "drink")


class MenuItem(Base):
    __tablename__ = "menu_items"
    __table_args__ = (
        CheckConstraint(
            "category IN ('appetizer', 'main', 'dessert', 'drink')",
            name="ck_menu_items_category",
        ),
        CheckConstraint("price > 0", name="ck_menu_items_price_positive"),
    )

    id = Column(String(64), primary_key=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(String(20), index=True, nullable=False)
    image = Column(String(255), nullable=False, default="")
    popular = Column(Boolean, index=True, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
