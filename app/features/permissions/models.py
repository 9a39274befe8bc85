"""
Role, role binding and permission catalog models.

Role definitions (their permission sets and hierarchy levels) live in the
policy matrix; these tables only name the roles and bind principals to them.
"""
from datetime import datetime
from sqlalchemy import String, ForeignKey, Text, Boolean, DateTime, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database.base import Base, IdMixin, TimestampMixin, SoftDeleteMixin


class Role(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """
    Named role. The name must match a role of the policy matrix; a name the
    matrix does not know resolves to zero permissions.
    """
    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_system: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_by: Mapped[str | None] = mapped_column(String(26), nullable=True)

    bindings: Mapped[list["UserRoleBinding"]] = relationship(
        "UserRoleBinding",
        back_populates="role",
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Role(id={self.id}, name={self.name!r})>"


class UserRoleBinding(Base, IdMixin):
    """
    Association between a principal (external identity id) and a role.

    Created and revoked administratively; the access layer only reads it.
    """
    __tablename__ = "user_role_bindings"
    __table_args__ = (
        UniqueConstraint("user_id", "role_id", name="uq_user_role_bindings_user_role"),
    )

    user_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    role_id: Mapped[str] = mapped_column(
        String(26),
        ForeignKey("roles.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    created_by: Mapped[str | None] = mapped_column(String(26), nullable=True)

    role: Mapped["Role"] = relationship("Role", back_populates="bindings", lazy="selectin")

    def __repr__(self) -> str:
        return f"<UserRoleBinding(user_id={self.user_id}, role_id={self.role_id})>"


class PermissionEntry(Base, IdMixin, TimestampMixin):
    """
    Catalog row describing one "resource:action" permission.

    Informational (admin screens); enforcement always reads the policy matrix.
    """
    __tablename__ = "permissions"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False, index=True)
    resource: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    action: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<PermissionEntry(id={self.id}, name={self.name!r})>"
