"""
Task, Notification, StoredFile, Sop and VaultEntry models.
"""
from datetime import datetime
from sqlalchemy import String, Text, Integer, Boolean, BigInteger, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, IdMixin, TimestampMixin, SoftDeleteMixin


class Task(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """
    Unit of work.
    
    Attributes:
        created_by: Creating profile (ownership)
        department_id: Department the task belongs to (manager scoping)
        position: Ordering within a status column
    """
    __tablename__ = "tasks"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    priority: Mapped[str | None] = mapped_column(String(20), index=True)
    status: Mapped[str | None] = mapped_column(String(30), index=True)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    is_starred: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    department_id: Mapped[str | None] = mapped_column(String(26), index=True)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)
    updated_by: Mapped[str | None] = mapped_column(String(26))

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title={self.title!r}, status={self.status})>"


class Notification(Base, IdMixin, TimestampMixin):
    """In-app notification. Has no soft-delete column; removal is always physical."""
    __tablename__ = "notifications"

    user_id: Mapped[str] = mapped_column(String(26), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    body: Mapped[str | None] = mapped_column(Text)
    link: Mapped[str | None] = mapped_column(String(500))
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    def __repr__(self) -> str:
        return f"<Notification(id={self.id}, user_id={self.user_id})>"


class StoredFile(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "files"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    url: Mapped[str] = mapped_column(String(1000), nullable=False)
    mime_type: Mapped[str | None] = mapped_column(String(100))
    size_bytes: Mapped[int | None] = mapped_column(BigInteger)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<StoredFile(id={self.id}, name={self.name!r})>"


class Sop(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """Standard operating procedure document."""
    __tablename__ = "sops"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str | None] = mapped_column(Text)
    version: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Sop(id={self.id}, title={self.title!r})>"


class VaultEntry(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """Shared credential. The secret column holds ciphertext produced by the client."""
    __tablename__ = "password_vault"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    username: Mapped[str | None] = mapped_column(String(255))
    secret: Mapped[str | None] = mapped_column(Text)
    url: Mapped[str | None] = mapped_column(String(500))
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<VaultEntry(id={self.id}, title={self.title!r})>"
