"""
DevCamper Backend — Bootcamp Service
======================================

What:  Bootcamp CRUD, radius search and photo upload.
Who:   Called by the bootcamp routes.

Orchestration (create):
    ┌──────────┐   ┌───────────┐   ┌────────┐   ┌─────────┐   ┌─────────┐
    │  Role /  │──▶│  Unique   │──▶│  Slug  │──▶│ Geocode │──▶│ Persist │
    │  one-per │   │  name     │   │        │   │ address │   │         │
    └──────────┘   └───────────┘   └────────┘   └─────────┘   └─────────┘

    The raw address is consumed by the geocode step and never stored.

Orchestration (delete):
    authorize → delete every course of the bootcamp → delete the bootcamp

Radius search:
    zipcode → geocoder (first match) → angular radius = miles / 3963
    → lat/lng bounding box in SQL → exact great-circle check in Python
"""

import logging
import uuid
from typing import Any, Dict, Optional

from slugify import slugify
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import Actor
from app.exceptions import (
    DatabaseError,
    ForbiddenError,
    GeocodingError,
    NotFoundError,
    UploadError,
    ValidationError,
)
from app.models.bootcamp import Bootcamp
from app.models.course import Course
from app.schemas.bootcamp import BootcampCreate, BootcampUpdate
from app.services.advanced_results import Populate, advanced_results
from app.services.file_service import file_service
from app.services.geo import angular_radius, bounding_box, within_radius
from app.services.geocoder_base import Geocoder
from app.services.lookups import get_or_404
from app.services.query_parser import ResourceQuery

logger = logging.getLogger(__name__)

BOOTCAMP_POPULATE = Populate(path="courses")

# Optional columns a client may clear by sending null
_CLEARABLE_FIELDS = {"website", "phone", "email", "average_rating"}


def make_slug(name: str) -> str:
    """'Devcentral Bootcamp' → 'devcentral-bootcamp'."""
    return slugify(name, lowercase=True)


class BootcampService:
    """
    Business logic for bootcamps.

    Error Handling Strategy:
        Rule violations raise ValidationError/ForbiddenError/NotFoundError
        directly. A unique-constraint violation on flush (two requests racing
        for the same name) becomes ValidationError; other SQLAlchemy errors
        are wrapped in DatabaseError.
    """

    async def list_bootcamps(self, db: AsyncSession, query: ResourceQuery) -> Dict[str, Any]:
        return await advanced_results(db, Bootcamp, query, populate=BOOTCAMP_POPULATE)

    async def get_bootcamp(self, db: AsyncSession, bootcamp_id: str) -> Dict[str, Any]:
        bootcamp = await get_or_404(db, Bootcamp, bootcamp_id, "bootcamp")
        return bootcamp.to_document()

    async def create_bootcamp(
        self,
        db: AsyncSession,
        data: BootcampCreate,
        actor: Actor,
        geocoder: Geocoder,
    ) -> Dict[str, Any]:
        """
        Raises:
            ValidationError: publisher already owns a bootcamp or duplicate name
            GeocodingError: geocoder unreachable, or no match for the address
        """
        if not actor.is_admin:
            existing = await self._scalar(
                db, select(Bootcamp.id).where(Bootcamp.user_id == actor.id).limit(1)
            )
            if existing is not None:
                raise ValidationError(
                    message=f"The user with ID {actor.id} has already published a bootcamp",
                    context={"user_id": str(actor.id)},
                )

        await self._ensure_unique_name(db, data.name)

        bootcamp = Bootcamp(
            **data.model_dump(exclude={"address"}),
            slug=make_slug(data.name),
            user_id=actor.id,
        )
        await self._apply_location(bootcamp, data.address, geocoder)

        db.add(bootcamp)
        await self._flush(db, "create bootcamp")
        logger.info("Bootcamp %s created by %s (slug=%s)", bootcamp.id, actor.id, bootcamp.slug)
        return bootcamp.to_document()

    async def update_bootcamp(
        self,
        db: AsyncSession,
        bootcamp_id: str,
        data: BootcampUpdate,
        actor: Actor,
        geocoder: Geocoder,
    ) -> Dict[str, Any]:
        bootcamp = await get_or_404(db, Bootcamp, bootcamp_id, "bootcamp")
        self._ensure_owner(bootcamp, actor, "update")

        changes = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None or key in _CLEARABLE_FIELDS
        }
        address = changes.pop("address", None)

        new_name = changes.get("name")
        if new_name is not None and new_name != bootcamp.name:
            await self._ensure_unique_name(db, new_name, exclude_id=bootcamp.id)
            changes["slug"] = make_slug(new_name)

        for key, value in changes.items():
            setattr(bootcamp, key, value)
        if address:
            await self._apply_location(bootcamp, address, geocoder)

        await self._flush(db, "update bootcamp")
        logger.info("Bootcamp %s updated: %s", bootcamp.id, sorted(changes))
        return bootcamp.to_document()

    async def delete_bootcamp(self, db: AsyncSession, bootcamp_id: str, actor: Actor) -> None:
        bootcamp = await get_or_404(db, Bootcamp, bootcamp_id, "bootcamp")
        self._ensure_owner(bootcamp, actor, "delete")

        try:
            result = await db.execute(delete(Course).where(Course.bootcamp_id == bootcamp.id))
            await db.delete(bootcamp)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Deleting bootcamp %s failed: %s", bootcamp.id, str(e), exc_info=True)
            raise DatabaseError(context={"bootcamp_id": str(bootcamp.id)})

        logger.info("Bootcamp %s deleted with %d course(s)", bootcamp.id, result.rowcount)

    async def bootcamps_in_radius(
        self,
        db: AsyncSession,
        zipcode: str,
        distance: float,
        geocoder: Geocoder,
    ) -> Dict[str, Any]:
        """
        Every bootcamp within `distance` miles of the zipcode's location.

        Raises:
            NotFoundError: the geocoder has no match for the zipcode
        """
        matches = await geocoder.geocode(zipcode)
        if not matches:
            raise NotFoundError(
                resource="location",
                message=f"No location found for zipcode {zipcode}",
                context={"zipcode": zipcode},
            )
        lat, lng = matches[0].latitude, matches[0].longitude
        radius = angular_radius(distance)
        box = bounding_box(lat, lng, radius)

        stmt = select(Bootcamp).where(
            Bootcamp.latitude.is_not(None),
            Bootcamp.longitude.is_not(None),
            Bootcamp.latitude.between(box.min_lat, box.max_lat),
        )
        if box.min_lng is not None:
            stmt = stmt.where(Bootcamp.longitude.between(box.min_lng, box.max_lng))
        stmt = stmt.order_by(Bootcamp.created_at.desc())

        try:
            candidates = (await db.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Radius search failed: %s", str(e), exc_info=True)
            raise DatabaseError(message="Could not retrieve bootcamps. Please try again.")

        found = [b for b in candidates if within_radius(b.latitude, b.longitude, lat, lng, radius)]
        logger.debug(
            "Radius %s mi around %s (%.4f, %.4f): %d of %d candidates",
            distance, zipcode, lat, lng, len(found), len(candidates),
        )
        return {
            "success": True,
            "count": len(found),
            "data": [bootcamp.to_document() for bootcamp in found],
        }

    async def upload_photo(
        self,
        db: AsyncSession,
        bootcamp_id: str,
        actor: Actor,
        filename: Optional[str],
        content_type: Optional[str],
        content: Optional[bytes],
    ) -> str:
        """
        Validate and store a bootcamp photo; returns the stored file name.

        Raises:
            UploadError: no file, not an image, or too large
            FileStorageError: the write failed
        """
        bootcamp = await get_or_404(db, Bootcamp, bootcamp_id, "bootcamp")
        self._ensure_owner(bootcamp, actor, "update")

        if content is None:
            raise UploadError()
        file_service.validate_photo(content_type, content)

        name = file_service.photo_filename(bootcamp.id, filename)
        await file_service.store_photo(name, content)

        bootcamp.photo = name
        await self._flush(db, "update bootcamp photo")
        return name

    # ── Helpers ───────────────────────────────────────────────────────────

    @staticmethod
    def _ensure_owner(bootcamp: Bootcamp, actor: Actor, action: str) -> None:
        if bootcamp.user_id != actor.id and not actor.is_admin:
            raise ForbiddenError(
                message=f"User {actor.id} is not authorized to {action} this bootcamp",
                context={"bootcamp_id": str(bootcamp.id)},
            )

    async def _ensure_unique_name(
        self,
        db: AsyncSession,
        name: str,
        exclude_id: Optional[uuid.UUID] = None,
    ) -> None:
        stmt = select(Bootcamp.id).where(Bootcamp.name == name)
        if exclude_id is not None:
            stmt = stmt.where(Bootcamp.id != exclude_id)
        if await self._scalar(db, stmt.limit(1)) is not None:
            raise ValidationError(
                message="Duplicate field value entered",
                field="name",
                context={"name": name},
            )

    @staticmethod
    async def _apply_location(bootcamp: Bootcamp, address: str, geocoder: Geocoder) -> None:
        matches = await geocoder.geocode(address)
        if not matches:
            raise GeocodingError(
                message="Could not geocode the given address",
                context={"address": address},
            )
        loc = matches[0]
        bootcamp.longitude = loc.longitude
        bootcamp.latitude = loc.latitude
        bootcamp.formatted_address = loc.formatted_address
        bootcamp.street = loc.street
        bootcamp.city = loc.city
        bootcamp.state = loc.state
        bootcamp.zipcode = loc.zipcode
        bootcamp.country = loc.country_code

    @staticmethod
    async def _scalar(db: AsyncSession, stmt) -> Any:
        try:
            return (await db.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error: %s", str(e), exc_info=True)
            raise DatabaseError()

    @staticmethod
    async def _flush(db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            logger.warning("Integrity error during %s: %s", action, str(e.orig))
            raise ValidationError(message="Duplicate field value entered")
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", action, str(e), exc_info=True)
            raise DatabaseError(context={"action": action, "error_type": type(e).__name__})


# ── Singleton Instance ────────────────────────────────────────────────────
bootcamp_service = BootcampService()
