"""
DevCamper Backend — Advanced Query Pipeline
=============================================

What:  One reusable listing operation for every resource type: filter, sort,
       project, paginate and optionally inline a related resource.
Who:   GET /api/v1/bootcamps and GET /api/v1/courses.

Flow:
    ResourceQuery (query_parser)
        → WHERE / ORDER BY (sql_filters)
        → OFFSET (page-1)*limit LIMIT limit
        → documents (Base.to_document) + pagination descriptors

Pagination boundaries:
    `next`/`prev` are computed from the total number of rows of the resource,
    not from the number of rows matching the filter. A filtered listing can
    therefore advertise a `next` page that turns out empty. Clients of the
    API depend on this, so it is kept.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Type

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.database import Base
from app.exceptions import DatabaseError
from app.services.query_parser import ResourceQuery, render_filters
from app.services.sql_filters import build_order_by, build_where_clauses, validate_select

logger = logging.getLogger(__name__)

DEFAULT_SORT = (("created_at", True),)


@dataclass(frozen=True)
class Populate:
    """
    Relation to inline into each document.

    path:    relationship attribute on the listed model
    fields:  projection applied to the related documents (None = all)
    """

    path: str
    fields: Optional[Sequence[str]] = None


def compute_pagination(total: int, page: int, limit: int) -> Dict[str, Dict[str, int]]:
    """
    Build the pagination descriptor; absent pages are omitted, not null.

    >>> compute_pagination(total=5, page=2, limit=2)
    {'next': {'page': 3, 'limit': 2}, 'prev': {'page': 1, 'limit': 2}}
    """
    start_index = (page - 1) * limit
    end_index = page * limit

    pagination: Dict[str, Dict[str, int]] = {}
    if end_index < total:
        pagination["next"] = {"page": page + 1, "limit": limit}
    if start_index > 0:
        pagination["prev"] = {"page": page - 1, "limit": limit}
    return pagination


def serialize(
    row: Base,
    fields: Optional[Sequence[str]] = None,
    populate: Optional[Populate] = None,
) -> Dict[str, Any]:
    """Document for `row`, with the populated relation inlined when selected."""
    include_relation = populate is not None and (fields is None or populate.path in fields)
    own_fields = None
    if fields is not None:
        own_fields = [name for name in fields if populate is None or name != populate.path]

    document = row.to_document(own_fields)
    if include_relation:
        related = getattr(row, populate.path)
        if related is None:
            document[populate.path] = None
        elif isinstance(related, list):
            document[populate.path] = [item.to_document(populate.fields) for item in related]
        else:
            document[populate.path] = related.to_document(populate.fields)
    return document


async def advanced_results(
    db: AsyncSession,
    model: Type[Base],
    query: ResourceQuery,
    populate: Optional[Populate] = None,
) -> Dict[str, Any]:
    """
    Run a listing query.

    Returns:
        {"success": True, "count": n, "pagination": {...}, "data": [documents]}

    Raises:
        ValidationError: unknown field or malformed value in the query
        DatabaseError: the statement failed
    """
    extra = (populate.path,) if populate else ()
    fields = validate_select(model, query.select_fields, extra=extra)
    where = build_where_clauses(model, query.filters)
    order_by = build_order_by(model, query.sort_keys or DEFAULT_SORT)

    logger.debug("%s listing filter: %s", model.__tablename__, render_filters(query))

    stmt = select(model).where(*where).order_by(*order_by)
    if populate is not None and (fields is None or populate.path in fields):
        stmt = stmt.options(selectinload(getattr(model, populate.path)))
    stmt = stmt.offset(query.start_index).limit(query.limit)

    try:
        rows: List[Base] = list((await db.execute(stmt)).scalars().all())
        total = (await db.execute(select(func.count()).select_from(model))).scalar_one()
    except SQLAlchemyError as e:
        logger.error("Listing %s failed: %s", model.__tablename__, str(e), exc_info=True)
        raise DatabaseError(
            message="Could not retrieve resources. Please try again.",
            context={"model": model.__name__},
        )

    data = [serialize(row, fields, populate) for row in rows]
    return {
        "success": True,
        "count": len(data),
        "pagination": compute_pagination(total, query.page, query.limit),
        "data": data,
    }
