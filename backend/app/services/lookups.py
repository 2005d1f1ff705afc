"""
DevCamper Backend — Primary-key Lookups
=========================================

What:  Fetch one row by id or raise NotFoundError.
Why:   A malformed id and an unknown id are the same thing to an API client:
       "no such resource". Both services and routes go through here so the
       404 message is identical everywhere.
"""

import logging
import uuid
from typing import Any, Sequence, Type, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import Base
from app.exceptions import DatabaseError, NotFoundError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


def parse_resource_id(resource: str, raw_id: Union[str, uuid.UUID]) -> uuid.UUID:
    """UUID from a path parameter; malformed ids raise NotFoundError."""
    if isinstance(raw_id, uuid.UUID):
        return raw_id
    try:
        return uuid.UUID(str(raw_id))
    except ValueError:
        raise NotFoundError(resource=resource, resource_id=str(raw_id))


async def get_or_404(
    db: AsyncSession,
    model: Type[ModelT],
    raw_id: Union[str, uuid.UUID],
    resource: str,
    load: Sequence[Any] = (),
) -> ModelT:
    """
    Load `model` by primary key.

    Args:
        load: relationship attributes to eager-load with selectinload

    Raises:
        NotFoundError: malformed or unknown id
        DatabaseError: the query failed
    """
    resource_id = parse_resource_id(resource, raw_id)
    stmt = select(model).where(model.id == resource_id)
    for relation in load:
        stmt = stmt.options(selectinload(relation))

    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        logger.error("Database error fetching %s %s: %s", resource, resource_id, str(e))
        raise DatabaseError(
            message=f"Could not retrieve the {resource}. Please try again.",
            context={"resource_id": str(resource_id)},
        )

    instance = result.scalar_one_or_none()
    if instance is None:
        raise NotFoundError(resource=resource, resource_id=str(raw_id))
    return instance
