"""
DevCamper Backend — Course Route Handlers
===========================================

What:  Course endpoints, in two routers:
       - router                   /api/v1/courses
       - bootcamp_courses_router  /api/v1/bootcamps/{bootcamp_id}/courses

The nested router lists or adds courses of one bootcamp; the flat router
serves the advanced listing and single-course operations.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import Actor, get_current_actor, require_role
from app.schemas.common import ErrorResponse, ListResponse
from app.schemas.course import CourseCreate, CourseUpdate
from app.services.course_service import course_service
from app.services.query_parser import parse_resource_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/courses", tags=["Courses"])
bootcamp_courses_router = APIRouter(
    prefix="/api/v1/bootcamps/{bootcamp_id}/courses",
    tags=["Courses"],
)


# ── /api/v1/bootcamps/{bootcamp_id}/courses ───────────────────────────────


@bootcamp_courses_router.get("", summary="All courses of a bootcamp")
async def list_bootcamp_courses(
    bootcamp_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    return await course_service.list_for_bootcamp(db, bootcamp_id)


@bootcamp_courses_router.post(
    "",
    status_code=201,
    responses={
        403: {"description": "Not the bootcamp owner", "model": ErrorResponse},
        404: {"description": "Bootcamp not found", "model": ErrorResponse},
    },
    summary="Add a course to a bootcamp",
)
async def add_course(
    bootcamp_id: str,
    body: CourseCreate,
    actor: Actor = Depends(require_role("publisher", "admin")),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    data = await course_service.add_course(db, bootcamp_id, body, actor)
    return {"success": True, "data": data}


# ── /api/v1/courses ───────────────────────────────────────────────────────


@router.get(
    "",
    responses={
        200: {"description": "One page of courses", "model": ListResponse},
        400: {"description": "Bad query parameter", "model": ErrorResponse},
    },
    summary="List courses",
    description=(
        "Same query grammar as the bootcamp listing. Each course includes the "
        "name and description of its bootcamp."
    ),
)
async def list_courses(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    query = parse_resource_query(request.query_params)
    return await course_service.list_courses(db, query)


@router.get(
    "/{course_id}",
    responses={404: {"description": "Course not found", "model": ErrorResponse}},
    summary="Get a single course",
)
async def get_course(
    course_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    return {"success": True, "data": await course_service.get_course(db, course_id)}


@router.put(
    "/{course_id}",
    responses={
        403: {"description": "Not the course owner", "model": ErrorResponse},
        404: {"description": "Course not found", "model": ErrorResponse},
    },
    summary="Update a course",
)
async def update_course(
    course_id: str,
    body: CourseUpdate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    data = await course_service.update_course(db, course_id, body, actor)
    return {"success": True, "data": data}


@router.delete(
    "/{course_id}",
    responses={
        403: {"description": "Not the course owner", "model": ErrorResponse},
        404: {"description": "Course not found", "model": ErrorResponse},
    },
    summary="Delete a course",
)
async def delete_course(
    course_id: str,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    await course_service.delete_course(db, course_id, actor)
    return {"success": True, "data": {}}
