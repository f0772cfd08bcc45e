from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Numeric, String, Text
from sqlalchemy.orm import relationship

from bitebite.core.database import Base


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'preparing', 'ready', 'completed', 'cancelled')",
            name="ck_orders_status",
        ),
    )

    id = Column(String(64), primary_key=True)

    customer_name = Column(String(120), nullable=False)
    customer_phone = Column(String(30), nullable=True)
    customer_address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    # Snapshot computed at creation time; never recomputed
    total_price = Column(Numeric(10, 2), nullable=False)

    status = Column(String(20), index=True, default="pending", nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        index=True,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="OrderItem.position",
    )
