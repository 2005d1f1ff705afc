"""
DevCamper Backend — Bootcamp SQLAlchemy Model
===============================================

What:  ORM model representing the `bootcamps` table.
Who:   Used by BootcampService for CRUD, by the advanced query pipeline for
       listings, and by Alembic for schema management.

Table Design Rationale:
    - UUID primary key, owner reference (`user_id`) to the identity service
    - The GeoPoint is stored flat (longitude, latitude and address parts) and
      exposed as one `location` sub-document. It is written once from the
      geocoder result when the bootcamp is created (or its address changes)
      and never edited field by field.
    - The raw `address` submitted by the client is never persisted.
    - `careers` is a JSON list so one column holds the multi-valued enum.
    - `average_cost` is derived from the bootcamp's courses by
      CourseService.recompute_average_cost and is not writable through the API.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from sqlalchemy import JSON, Boolean, DateTime, Float, Index, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.models.course import Course


LOCATION_COLUMNS = (
    "longitude",
    "latitude",
    "formatted_address",
    "street",
    "city",
    "state",
    "zipcode",
    "country",
)


class Bootcamp(Base):
    """
    A coding bootcamp published by a user with the publisher (or admin) role.

    Lifecycle:
        1. Created: slug derived from name, address geocoded into location
        2. Updated: partial updates; name change re-derives the slug
        3. Courses added/removed: average_cost recomputed
        4. Deleted: its courses are deleted first (cascade in the service)
    """

    __tablename__ = "bootcamps"

    __hidden_columns__ = LOCATION_COLUMNS
    __document_extras__ = ("location",)
    __field_aliases__ = {
        "location.formatted_address": "formatted_address",
        "location.street": "street",
        "location.city": "city",
        "location.state": "state",
        "location.zipcode": "zipcode",
        "location.country": "country",
    }

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # unique=True backs the duplicate-name check in BootcampService
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    slug: Mapped[str] = mapped_column(String(60), nullable=False)
    description: Mapped[str] = mapped_column(String(500), nullable=False)
    website: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # ── GeoPoint ──────────────────────────────────────────────────────────
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    formatted_address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    street: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    city: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    state: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)
    zipcode: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    country: Mapped[Optional[str]] = mapped_column(String(60), nullable=True)

    careers: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    average_rating: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    average_cost: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    photo: Mapped[str] = mapped_column(String(255), nullable=False, default="no-photo.jpg")
    housing: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_assistance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    job_guarantee: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    accept_gi: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    # Deletion of children is done explicitly by BootcampService, so the ORM
    # must not try to load or orphan them when the parent row is deleted.
    courses: Mapped[List["Course"]] = relationship(
        back_populates="bootcamp",
        passive_deletes=True,
        order_by="Course.created_at",
    )

    __table_args__ = (
        Index("idx_bootcamps_created_at", created_at.desc()),
        Index("idx_bootcamps_lat_lng", "latitude", "longitude"),
    )

    @property
    def location(self) -> Optional[Dict[str, Any]]:
        """GeoJSON-style point plus the geocoder's address breakdown."""
        if self.longitude is None or self.latitude is None:
            return None
        return {
            "type": "Point",
            "coordinates": [self.longitude, self.latitude],
            "formatted_address": self.formatted_address,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zipcode": self.zipcode,
            "country": self.country,
        }

    def __repr__(self) -> str:
        return f"<Bootcamp(id={self.id}, name='{self.name}')>"
