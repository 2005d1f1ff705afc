"""
DevCamper Backend — Bootcamp Route Handlers
=============================================

What:  /api/v1/bootcamps endpoints.
How:   Extract path/query/body, resolve the caller and the geocoder through
       dependencies, delegate to BootcampService, wrap in {success, data}.

Route order matters: /radius/{zipcode}/{distance} is declared before
/{bootcamp_id} so "radius" is never taken for an id.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, Path, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.dependencies import Actor, get_geocoder, require_role
from app.schemas.bootcamp import BootcampCreate, BootcampUpdate
from app.schemas.common import ErrorResponse, ListResponse
from app.services.bootcamp_service import bootcamp_service
from app.services.geocoder_base import Geocoder
from app.services.query_parser import parse_resource_query

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/bootcamps", tags=["Bootcamps"])

_publisher = require_role("publisher", "admin")


@router.get(
    "",
    responses={
        200: {"description": "One page of bootcamps", "model": ListResponse},
        400: {"description": "Bad query parameter", "model": ErrorResponse},
    },
    summary="List bootcamps",
    description=(
        "Filter with `field=value` or `field[gt|gte|lt|lte|in]=value`, project with "
        "`select=a,b`, sort with `sort=-a,b`, paginate with `page` and `limit` "
        "(defaults 1 and 25). Each bootcamp includes its courses."
    ),
)
async def list_bootcamps(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    query = parse_resource_query(request.query_params)
    return await bootcamp_service.list_bootcamps(db, query)


@router.get(
    "/radius/{zipcode}/{distance}",
    responses={404: {"description": "Zipcode not found", "model": ErrorResponse}},
    summary="Bootcamps within a distance (miles) of a zipcode",
)
async def bootcamps_in_radius(
    zipcode: str,
    distance: float = Path(ge=0, description="Radius in miles"),
    db: AsyncSession = Depends(get_db_session),
    geocoder: Geocoder = Depends(get_geocoder),
) -> Dict[str, Any]:
    return await bootcamp_service.bootcamps_in_radius(db, zipcode, distance, geocoder)


@router.get(
    "/{bootcamp_id}",
    responses={404: {"description": "Bootcamp not found", "model": ErrorResponse}},
    summary="Get a single bootcamp",
)
async def get_bootcamp(
    bootcamp_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    return {"success": True, "data": await bootcamp_service.get_bootcamp(db, bootcamp_id)}


@router.post(
    "",
    status_code=201,
    responses={
        400: {"description": "Validation failed", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        403: {"description": "Role not allowed", "model": ErrorResponse},
        503: {"description": "Geocoder unavailable or address not found", "model": ErrorResponse},
    },
    summary="Create a bootcamp",
)
async def create_bootcamp(
    body: BootcampCreate,
    actor: Actor = Depends(_publisher),
    db: AsyncSession = Depends(get_db_session),
    geocoder: Geocoder = Depends(get_geocoder),
) -> Dict[str, Any]:
    data = await bootcamp_service.create_bootcamp(db, body, actor, geocoder)
    return {"success": True, "data": data}


@router.put(
    "/{bootcamp_id}",
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Bootcamp not found", "model": ErrorResponse},
        503: {"description": "Geocoder unavailable or address not found", "model": ErrorResponse},
    },
    summary="Update a bootcamp",
)
async def update_bootcamp(
    bootcamp_id: str,
    body: BootcampUpdate,
    actor: Actor = Depends(_publisher),
    db: AsyncSession = Depends(get_db_session),
    geocoder: Geocoder = Depends(get_geocoder),
) -> Dict[str, Any]:
    data = await bootcamp_service.update_bootcamp(db, bootcamp_id, body, actor, geocoder)
    return {"success": True, "data": data}


@router.delete(
    "/{bootcamp_id}",
    responses={
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Bootcamp not found", "model": ErrorResponse},
    },
    summary="Delete a bootcamp and all of its courses",
)
async def delete_bootcamp(
    bootcamp_id: str,
    actor: Actor = Depends(_publisher),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    await bootcamp_service.delete_bootcamp(db, bootcamp_id, actor)
    return {"success": True, "data": {}}


@router.put(
    "/{bootcamp_id}/photo",
    responses={
        400: {"description": "Missing, non-image or oversized file", "model": ErrorResponse},
        403: {"description": "Not the owner", "model": ErrorResponse},
        404: {"description": "Bootcamp not found", "model": ErrorResponse},
    },
    summary="Upload a bootcamp photo",
)
async def upload_bootcamp_photo(
    bootcamp_id: str,
    file: Optional[UploadFile] = File(default=None, description="Image file"),
    actor: Actor = Depends(_publisher),
    db: AsyncSession = Depends(get_db_session),
) -> Dict[str, Any]:
    content = await file.read() if file is not None else None
    name = await bootcamp_service.upload_photo(
        db,
        bootcamp_id,
        actor,
        filename=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        content=content,
    )
    return {"success": True, "data": name}
