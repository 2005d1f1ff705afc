"""
DevCamper Backend — Course SQLAlchemy Model
=============================================

What:  ORM model representing the `courses` table.
Why:   A course always belongs to exactly one bootcamp; its tuition feeds the
       parent's average_cost.

Referential integrity:
    The foreign key has no ON DELETE action. Removing a bootcamp's courses is
    an explicit step of BootcampService.delete_bootcamp, performed before the
    bootcamp row itself is removed.
"""

import uuid
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.bootcamp import Bootcamp


MINIMUM_SKILLS = ("beginner", "intermediate", "advanced")


class Course(Base):
    """A course offered by a bootcamp."""

    __tablename__ = "courses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    # Free text ("8", "12 part-time"), kept as a string
    weeks: Mapped[str] = mapped_column(String(50), nullable=False)
    tuition: Mapped[int] = mapped_column(Integer, nullable=False)
    minimum_skill: Mapped[str] = mapped_column(String(20), nullable=False)
    scholarship_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    bootcamp_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("bootcamps.id"), nullable=False, index=True
    )
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    bootcamp: Mapped["Bootcamp"] = relationship(back_populates="courses")

    def __repr__(self) -> str:
        return f"<Course(id={self.id}, title='{self.title}', tuition={self.tuition})>"
