"""
Contact, Company, Lead and Opportunity SQLAlchemy models.
"""
from decimal import Decimal
from sqlalchemy import String, ForeignKey, Numeric, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, IdMixin, TimestampMixin, SoftDeleteMixin


class Contact(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """
    Person the business deals with.
    
    Attributes:
        first_name: Contact's first name
        last_name: Contact's last name
        email: Contact email address
        phone: Contact phone number
        created_by: Profile that created the contact (ownership)
    """
    __tablename__ = "contacts"

    first_name: Mapped[str | None] = mapped_column(String(100))
    last_name: Mapped[str | None] = mapped_column(String(100))
    email: Mapped[str | None] = mapped_column(String(255), index=True)
    phone: Mapped[str | None] = mapped_column(String(50))
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    __table_args__ = (
        Index("ix_contacts_name", "last_name", "first_name"),
    )

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, name='{self.first_name} {self.last_name}')>"


class Company(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    website: Mapped[str | None] = mapped_column(String(255))
    industry: Mapped[str | None] = mapped_column(String(100))
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Company(id={self.id}, name={self.name!r})>"


class Lead(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """
    Sales lead.
    
    Attributes:
        owner_id: Profile the lead is assigned to (ownership)
        department_id: Department the lead belongs to (manager scoping)
    """
    __tablename__ = "leads"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str | None] = mapped_column(String(30), index=True)
    source: Mapped[str | None] = mapped_column(String(100))
    contact_id: Mapped[str | None] = mapped_column(ForeignKey("contacts.id", ondelete="SET NULL"))
    company_id: Mapped[str | None] = mapped_column(ForeignKey("companies.id", ondelete="SET NULL"))
    owner_id: Mapped[str | None] = mapped_column(String(26), index=True)
    department_id: Mapped[str | None] = mapped_column(String(26), index=True)
    notes: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Lead(id={self.id}, title={self.title!r})>"


class Opportunity(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "opportunities"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    stage: Mapped[str | None] = mapped_column(String(30), index=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    lead_id: Mapped[str | None] = mapped_column(ForeignKey("leads.id", ondelete="SET NULL"))
    company_id: Mapped[str | None] = mapped_column(ForeignKey("companies.id", ondelete="SET NULL"))
    owner_id: Mapped[str | None] = mapped_column(String(26), index=True)
    department_id: Mapped[str | None] = mapped_column(String(26), index=True)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Opportunity(id={self.id}, name={self.name!r}, stage={self.stage})>"
