"""
Candidate, Application and Interview models.
"""
from datetime import datetime
from sqlalchemy import String, ForeignKey, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database.base import Base, IdMixin, TimestampMixin, SoftDeleteMixin


class Candidate(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    """Job candidate, linked to the contact record holding their details."""
    __tablename__ = "candidates"

    contact_id: Mapped[str | None] = mapped_column(String(26), index=True)
    status: Mapped[str | None] = mapped_column(String(30), index=True)
    resume_url: Mapped[str | None] = mapped_column(String(500))
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id}, contact_id={self.contact_id})>"


class Application(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "applications"

    candidate_id: Mapped[str | None] = mapped_column(String(26), index=True)
    position: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str | None] = mapped_column(String(30), index=True)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Application(id={self.id}, position={self.position!r})>"


class Interview(Base, IdMixin, TimestampMixin, SoftDeleteMixin):
    __tablename__ = "interviews"

    application_id: Mapped[str | None] = mapped_column(
        ForeignKey("applications.id", ondelete="CASCADE"), index=True
    )
    scheduled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    interviewer_id: Mapped[str | None] = mapped_column(String(26))
    outcome: Mapped[str | None] = mapped_column(String(30))
    feedback: Mapped[str | None] = mapped_column(Text)
    created_by: Mapped[str | None] = mapped_column(String(26), index=True)

    def __repr__(self) -> str:
        return f"<Interview(id={self.id}, application_id={self.application_id})>"
