"""Products, orders and subscriptions read by finance reporting."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column, relationship

from encore.extensions import db


class Product(db.Model):
    __tablename__ = "commerce_product"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(db.String(255), nullable=False)
    # course, membership, subscription, merch, digital, lesson...
    product_type: Mapped[str | None] = mapped_column(db.String(32))
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)


class Order(db.Model):
    __tablename__ = "commerce_order"
    __table_args__ = (db.Index("ix_commerce_order_status_created_at", "status", "created_at"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int | None] = mapped_column(db.ForeignKey("user.id"), index=True)
    product_id: Mapped[int | None] = mapped_column(db.ForeignKey("commerce_product.id"))
    amount: Mapped[Decimal | None] = mapped_column(db.Numeric(12, 2))
    currency: Mapped[str | None] = mapped_column(db.String(8))
    status: Mapped[str] = mapped_column(db.String(32), nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, nullable=False)

    product: Mapped[Product | None] = relationship("Product")


class Subscription(db.Model):
    __tablename__ = "commerce_subscription"
    __table_args__ = (db.Index("ix_commerce_subscription_status", "status"),)

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int | None] = mapped_column(db.ForeignKey("user.id"), index=True)
    plan_type: Mapped[str] = mapped_column(db.String(32), nullable=False, default="monthly")
    amount: Mapped[Decimal | None] = mapped_column(db.Numeric(12, 2))
    currency: Mapped[str | None] = mapped_column(db.String(8))
    status: Mapped[str] = mapped_column(db.String(32), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(default=datetime.utcnow)
