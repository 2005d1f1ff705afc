"""
DevCamper Backend — ComparisonExpr → SQLAlchemy Translation
=============================================================

What:  Converts parsed listing filters, sort keys and projections into
       SQLAlchemy clauses for a given model.
How:   Every field name is resolved through `Model.resolve_column()` (which
       also understands dotted aliases such as `location.city`), every raw
       value is coerced to the column's Python type, then the operator is
       applied.

List columns (JSON arrays such as `careers`):
    `eq` and `in` mean membership, as in a document store: `careers=Business`
    matches any bootcamp whose careers contain "Business". The check runs on
    the JSON text, which works the same on PostgreSQL and SQLite. Ordering
    operators and sorting are rejected: PostgreSQL `json` has no ordering.
"""

import json
import uuid
from datetime import date, datetime
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Type

from sqlalchemy import JSON, String, cast, or_
from sqlalchemy.sql.elements import ColumnElement

from app.database import Base
from app.exceptions import ValidationError
from app.services.query_parser import ComparisonExpr

_TRUE_TOKENS = {"true", "1", "yes", "on"}
_FALSE_TOKENS = {"false", "0", "no", "off"}


def _python_type(column) -> Optional[type]:
    try:
        return column.type.python_type
    except NotImplementedError:
        return None


def _is_list_column(column) -> bool:
    return isinstance(column.type, JSON)


def coerce_value(field: str, column, raw: Any) -> Any:
    """
    Convert a raw query value to the Python type of `column`.

    Raises:
        ValidationError: when the value cannot represent the column's type
    """
    target = _python_type(column)
    if target is None or raw is None:
        return raw

    try:
        if target is bool:
            if isinstance(raw, bool):
                return raw
            token = str(raw).strip().lower()
            if token in _TRUE_TOKENS:
                return True
            if token in _FALSE_TOKENS:
                return False
            raise ValueError(token)
        if target is int:
            if isinstance(raw, bool):
                raise ValueError(raw)
            return raw if isinstance(raw, int) else int(str(raw).strip())
        if target is float:
            return float(raw)
        if target is datetime:
            return raw if isinstance(raw, datetime) else datetime.fromisoformat(str(raw).strip())
        if target is date:
            return raw if isinstance(raw, date) else date.fromisoformat(str(raw).strip())
        if target is uuid.UUID:
            return raw if isinstance(raw, uuid.UUID) else uuid.UUID(str(raw).strip())
        if target is str:
            return str(raw)
    except (TypeError, ValueError):
        raise ValidationError(
            message=f"Invalid value '{raw}' for field '{field}'",
            field=field,
            context={"expected_type": target.__name__},
        )
    return raw


def _membership(column, value: Any) -> ColumnElement:
    # JSON arrays are serialized with json.dumps, so an element appears in
    # the stored text exactly as json.dumps(element)
    return cast(column, String).contains(json.dumps(value), autoescape=True)


def _resolve(model: Type[Base], field: str):
    column = model.resolve_column(field)
    if column is None:
        raise ValidationError(
            message=f"Unknown field '{field}'",
            field=field,
            context={"model": model.__name__},
        )
    return column


def _list_clause(field: str, column, expr: ComparisonExpr) -> ColumnElement:
    if expr.op == "eq":
        return _membership(column, expr.value)
    if expr.op == "in":
        return or_(*(_membership(column, candidate) for candidate in expr.value))
    raise ValidationError(
        message=f"Operator '{expr.op}' is not supported on list field '{field}'",
        field=field,
    )


def _scalar_clause(field: str, column, expr: ComparisonExpr) -> ColumnElement:
    if expr.op == "in":
        return column.in_([coerce_value(field, column, v) for v in expr.value])

    value = coerce_value(field, column, expr.value)
    if expr.op == "eq":
        return column == value
    if expr.op == "gt":
        return column > value
    if expr.op == "gte":
        return column >= value
    if expr.op == "lt":
        return column < value
    return column <= value


def build_where_clauses(
    model: Type[Base],
    filters: Mapping[str, Sequence[ComparisonExpr]],
) -> List[ColumnElement]:
    """
    Translate parsed filters into WHERE clauses (combined with AND).

    Raises:
        ValidationError: unknown field, bad value, or ordering on a list field
    """
    clauses: List[ColumnElement] = []
    for field, exprs in filters.items():
        column = _resolve(model, field)
        for expr in exprs:
            if _is_list_column(column):
                clauses.append(_list_clause(field, column, expr))
            else:
                clauses.append(_scalar_clause(field, column, expr))
    return clauses


def build_order_by(
    model: Type[Base],
    sort_keys: Iterable[Tuple[str, bool]],
) -> List[ColumnElement]:
    """`(field, descending)` pairs → ORDER BY clauses, in the given order."""
    order_by: List[ColumnElement] = []
    for field, descending in sort_keys:
        column = _resolve(model, field)
        if _is_list_column(column):
            raise ValidationError(message=f"Sorting is not supported on list field '{field}'", field=field)
        order_by.append(column.desc() if descending else column.asc())
    return order_by


def validate_select(
    model: Type[Base],
    fields: Optional[Sequence[str]],
    extra: Sequence[str] = (),
) -> Optional[List[str]]:
    """
    Check a `select` projection against the model's document fields.

    `extra` names fields that are valid without being model columns, such
    as a populated relation.
    """
    if fields is None:
        return None
    allowed = set(model.document_fields()) | set(extra)
    unknown = [name for name in fields if name not in allowed]
    if unknown:
        raise ValidationError(
            message=f"Unknown field(s) in select: {', '.join(unknown)}",
            field="select",
            context={"unknown": unknown},
        )
    return list(fields)
