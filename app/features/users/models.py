"""
Profile model: the internal identity behind an authenticated principal.
"""
from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, IdMixin, TimestampMixin, SoftDeleteMixin


class Profile(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """
    Internal profile linked to an external (Appwrite) identity.
    
    The profile id is what ownership columns store; user_id is the principal
    id role bindings are keyed on.
    """
    __tablename__ = "profiles"
    
    # Appwrite user ID (for linking with Appwrite authentication)
    user_id: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    
    email: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    first_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(100), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    
    department_id: Mapped[str | None] = mapped_column(
        String(26),
        ForeignKey("departments.id", ondelete="SET NULL"),
        nullable=True,
        index=True
    )
    created_by: Mapped[str | None] = mapped_column(String(26), nullable=True)
    
    department: Mapped["Department"] = relationship(  # type: ignore
        "Department",
        foreign_keys=[department_id],
        lazy="selectin"
    )
    
    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, user_id={self.user_id!r})>"
