"""
DevCamper Backend — Course Service
====================================

What:  Course CRUD plus the parent bootcamp's average-cost recompute.
Who:   Called by the course routes (both the nested
       /bootcamps/{bootcamp_id}/courses routes and /courses).

Orchestration (every mutation):
    authorize → write → flush → recompute_average_cost(parent)

    The recompute always runs after the write has been flushed, so the sum
    it reads already includes an added course and no longer includes a
    deleted one. A failed recompute is rolled back to its savepoint; the
    course write itself stays in the request transaction.

Average cost:
    ceil(mean(tuition) / 10) * 10, computed in integers so a mean that is
    already a multiple of ten is never pushed up by float error. A bootcamp
    without courses gets average_cost = NULL.
"""

import logging
import uuid
from typing import Any, Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import Actor
from app.exceptions import DatabaseError, ForbiddenError
from app.models.bootcamp import Bootcamp
from app.models.course import Course
from app.schemas.course import CourseCreate, CourseUpdate
from app.services.advanced_results import Populate, advanced_results, serialize
from app.services.lookups import get_or_404, parse_resource_id
from app.services.query_parser import ResourceQuery

logger = logging.getLogger(__name__)

COURSE_POPULATE = Populate(path="bootcamp", fields=("name", "description"))


def round_up_to_ten(total: int, count: int) -> int:
    """ceil(total / count / 10) * 10 without floating point."""
    return -(-total // (10 * count)) * 10


class CourseService:
    """
    Business logic for courses.

    Ownership:
        A course belongs to the user who created it. Only that user or an
        admin may change or delete it; adding a course requires owning the
        parent bootcamp (or being admin).
    """

    async def list_courses(self, db: AsyncSession, query: ResourceQuery) -> Dict[str, Any]:
        return await advanced_results(db, Course, query, populate=COURSE_POPULATE)

    async def list_for_bootcamp(self, db: AsyncSession, bootcamp_id: str) -> Dict[str, Any]:
        """All courses of one bootcamp, oldest first, without pagination."""
        parent_id = parse_resource_id("bootcamp", bootcamp_id)
        try:
            result = await db.execute(
                select(Course)
                .where(Course.bootcamp_id == parent_id)
                .order_by(Course.created_at)
            )
        except SQLAlchemyError as e:
            logger.error("Listing courses of bootcamp %s failed: %s", parent_id, str(e))
            raise DatabaseError(message="Could not retrieve courses. Please try again.")
        courses = result.scalars().all()
        return {
            "success": True,
            "count": len(courses),
            "data": [course.to_document() for course in courses],
        }

    async def get_course(self, db: AsyncSession, course_id: str) -> Dict[str, Any]:
        course = await get_or_404(db, Course, course_id, "course", load=[Course.bootcamp])
        return serialize(course, populate=COURSE_POPULATE)

    async def add_course(
        self,
        db: AsyncSession,
        bootcamp_id: str,
        data: CourseCreate,
        actor: Actor,
    ) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: parent bootcamp missing
            ForbiddenError: caller neither owns the bootcamp nor is admin
        """
        bootcamp = await get_or_404(db, Bootcamp, bootcamp_id, "bootcamp")
        if bootcamp.user_id != actor.id and not actor.is_admin:
            raise ForbiddenError(
                message=f"User {actor.id} is not authorized to add a course to bootcamp {bootcamp.id}",
                context={"bootcamp_id": str(bootcamp.id)},
            )

        course = Course(**data.model_dump(), bootcamp_id=bootcamp.id, user_id=actor.id)
        db.add(course)
        await self._flush(db, "add course")
        logger.info("Course %s added to bootcamp %s", course.id, bootcamp.id)

        await self.recompute_average_cost(db, bootcamp.id)
        return course.to_document()

    async def update_course(
        self,
        db: AsyncSession,
        course_id: str,
        data: CourseUpdate,
        actor: Actor,
    ) -> Dict[str, Any]:
        course = await get_or_404(db, Course, course_id, "course")
        self._ensure_owner(course, actor, "update")

        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        for key, value in changes.items():
            setattr(course, key, value)
        await self._flush(db, "update course")

        if "tuition" in changes:
            await self.recompute_average_cost(db, course.bootcamp_id)
        return course.to_document()

    async def delete_course(self, db: AsyncSession, course_id: str, actor: Actor) -> None:
        course = await get_or_404(db, Course, course_id, "course")
        self._ensure_owner(course, actor, "delete")

        bootcamp_id = course.bootcamp_id
        await db.delete(course)
        await self._flush(db, "delete course")
        logger.info("Course %s deleted from bootcamp %s", course.id, bootcamp_id)

        await self.recompute_average_cost(db, bootcamp_id)

    async def recompute_average_cost(
        self,
        db: AsyncSession,
        bootcamp_id: uuid.UUID,
    ) -> Optional[int]:
        """
        Store the rounded-up mean tuition of the bootcamp's courses.

        Best effort: the read and the write run inside a SAVEPOINT, so a
        database failure rolls back only the average-cost update. The failure
        is logged and the course mutation that triggered it still commits.

        Returns:
            The new average cost, or None when the bootcamp has no courses
            (or the recompute failed).
        """
        try:
            async with db.begin_nested():
                total, count = (
                    await db.execute(
                        select(func.sum(Course.tuition), func.count(Course.id)).where(
                            Course.bootcamp_id == bootcamp_id
                        )
                    )
                ).one()
                average = round_up_to_ten(int(total), count) if count else None

                bootcamp = await db.get(Bootcamp, bootcamp_id)
                if bootcamp is None:
                    return None
                bootcamp.average_cost = average
                await db.flush()
        except SQLAlchemyError as e:
            logger.error(
                "Average cost recompute for bootcamp %s failed: %s",
                bootcamp_id,
                str(e),
                exc_info=True,
            )
            return None

        logger.debug("Bootcamp %s average_cost=%s (%d courses)", bootcamp_id, average, count)
        return average

    @staticmethod
    def _ensure_owner(course: Course, actor: Actor, action: str) -> None:
        if course.user_id != actor.id and not actor.is_admin:
            raise ForbiddenError(
                message=f"User {actor.id} is not authorized to {action} course {course.id}",
                context={"course_id": str(course.id)},
            )

    @staticmethod
    async def _flush(db: AsyncSession, action: str) -> None:
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error during %s: %s", action, str(e), exc_info=True)
            raise DatabaseError(context={"action": action, "error_type": type(e).__name__})


# ── Singleton Instance ────────────────────────────────────────────────────
course_service = CourseService()
