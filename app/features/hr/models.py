"""
Department, Team and Employee models.
"""
from datetime import date
from sqlalchemy import String, ForeignKey, Text, Date
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, IdMixin, TimestampMixin, SoftDeleteMixin


class Department(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """Organizational unit used to scope manager visibility."""
    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(26), nullable=True)

    def __repr__(self) -> str:
        return f"<Department(id={self.id}, name={self.name!r})>"


class Team(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "teams"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    department_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    created_by: Mapped[str | None] = mapped_column(String(26), nullable=True)

    def __repr__(self) -> str:
        return f"<Team(id={self.id}, name={self.name!r})>"


class Employee(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """
    Employment record of a profile.
    
    Attributes:
        profile_id: Owning profile (employees see only their own record)
        department_id: Department the employee reports into
    """
    __tablename__ = "employees"

    profile_id: Mapped[str] = mapped_column(
        String(26), ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    department_id: Mapped[str | None] = mapped_column(
        String(26), ForeignKey("departments.id", ondelete="SET NULL"), nullable=True, index=True
    )
    job_title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    employment_type: Mapped[str | None] = mapped_column(String(30), nullable=True)
    hired_on: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_by: Mapped[str | None] = mapped_column(String(26), nullable=True)

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, profile_id={self.profile_id})>"
