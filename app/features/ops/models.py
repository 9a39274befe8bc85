"""
Order, Quotation, Shipment and Subscription models.
"""
from datetime import date
from decimal import Decimal
from sqlalchemy import String, ForeignKey, Numeric, Date
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, IdMixin, TimestampMixin, SoftDeleteMixin


class Order(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """
    Customer order.
    
    Attributes:
        order_number: Human-facing order reference
        owner_id: Profile responsible for the order (ownership)
        department_id: Department handling the order (manager scoping)
    """
    __tablename__ = "orders"

    order_number: Mapped[str | None] = mapped_column(String(50), unique=True)
    status: Mapped[str | None] = mapped_column(String(30), index=True)
    total: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    company_id: Mapped[str | None] = mapped_column(ForeignKey("companies.id", ondelete="SET NULL"))
    owner_id: Mapped[str | None] = mapped_column(String(26), index=True)
    department_id: Mapped[str | None] = mapped_column(String(26), index=True)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Order(id={self.id}, number={self.order_number!r})>"


class Quotation(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "quotations"

    quote_number: Mapped[str | None] = mapped_column(String(50), unique=True)
    status: Mapped[str | None] = mapped_column(String(30), index=True)
    total: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    company_id: Mapped[str | None] = mapped_column(ForeignKey("companies.id", ondelete="SET NULL"))
    valid_until: Mapped[date | None] = mapped_column(Date)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Quotation(id={self.id}, number={self.quote_number!r})>"


class Shipment(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "shipments"

    order_id: Mapped[str | None] = mapped_column(ForeignKey("orders.id", ondelete="SET NULL"), index=True)
    carrier: Mapped[str | None] = mapped_column(String(100))
    tracking_number: Mapped[str | None] = mapped_column(String(100))
    status: Mapped[str | None] = mapped_column(String(30), index=True)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Shipment(id={self.id}, tracking={self.tracking_number!r})>"


class Subscription(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """Software/service subscription owned by a team."""
    __tablename__ = "subscriptions"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    vendor: Mapped[str | None] = mapped_column(String(255))
    cost: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    billing_cycle: Mapped[str | None] = mapped_column(String(20))
    renewal_date: Mapped[date | None] = mapped_column(Date)
    owner_team_id: Mapped[str | None] = mapped_column(String(26), index=True)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Subscription(id={self.id}, name={self.name!r})>"
