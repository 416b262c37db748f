"""
SQLAlchemy Database Models

Tables:
- users: registered accounts (bcrypt password hashes)
- menu: dishes that can be ordered
- orders / order_lines: purchases made by users, with price snapshots

The schema itself is created by bistro.migrations, not by create_all.

Author: Your Name
Version: 1.0.0
"""

import enum
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from bistro.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class OrderStatus(str, enum.Enum):
    """Order status workflow. Orders are append-only once created."""
    CREATED = "created"


class User(Base):
    """A registered customer account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    username = Column(String(50), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    display_name = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    orders = relationship("Order", back_populates="user")

    def __repr__(self):
        return f"<User #{self.id} - {self.username}>"


class MenuItem(Base):
    """
    A dish on the menu.

    Rows are created by migrations or the seed-menu command; the API only
    reads them.
    """
    __tablename__ = "menu"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(Text, nullable=True)

    def __repr__(self):
        return f"<MenuItem #{self.id} - {self.name} - {self.price}>"


class Order(Base):
    """
    A purchase request made by an authenticated user.

    Totals are always computed server-side from the stored menu prices.
    """
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True
    )
    status = Column(
        Enum(
            OrderStatus,
            native_enum=False,
            length=20,
            values_callable=lambda e: [m.value for m in e],
        ),
        default=OrderStatus.CREATED,
        nullable=False
    )
    total = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    user = relationship("User", back_populates="orders")
    lines = relationship(
        "OrderLine",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderLine.id",
    )

    def __repr__(self):
        return f"<Order #{self.id} - user {self.user_id} - {self.total}>"


class OrderLine(Base):
    """One (menu item, quantity) pair within an order."""
    __tablename__ = "order_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(
        Integer,
        ForeignKey("orders.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    menu_item_id = Column(Integer, ForeignKey("menu.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)  # price at order time
    line_total = Column(Numeric(10, 2), nullable=False)

    order = relationship("Order", back_populates="lines")
    menu_item = relationship("MenuItem")

    @property
    def item_name(self):
        return self.menu_item.name if self.menu_item is not None else None

    def __repr__(self):
        return f"<OrderLine #{self.id} - {self.quantity} x menu {self.menu_item_id}>"
