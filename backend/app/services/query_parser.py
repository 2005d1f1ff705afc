"""
DevCamper Backend — Listing Query Parser
==========================================

What:  Turns raw listing query parameters into a typed ResourceQuery.
Why:   The HTTP layer only knows strings and bracketed keys; the persistence
       layer only knows column expressions. This module is the typed middle:
       it knows neither SQL nor FastAPI.
Who:   Called by the listing routes; its output feeds app.services.sql_filters
       and app.services.advanced_results.

Accepted forms (per field):
    careers=Web Development            → eq
    careers=A&careers=B                → in (A, B)
    average_cost[lte]=10000            → lte
    average_cost[$lte]=10000           → lte (already prefixed, left as is)
    {"average_cost": {"gt": "100"}}    → gt (nested mapping)
    careers[in]=A,B                    → in (A, B)

Reserved keys `select`, `sort`, `page`, `limit` never become filters.

Values are kept exactly as received; converting them to column types is the
job of the translation step.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from app.exceptions import ValidationError

# ── Grammar constants ─────────────────────────────────────────────────────
OPERATORS = ("eq", "gt", "gte", "lt", "lte", "in")
OPERATOR_MARKER = "$"
RESERVED_KEYS = frozenset({"select", "sort", "page", "limit"})

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25

# `field[op]` or `field[$op]`; the field part may contain dots (location.city)
_BRACKET_KEY = re.compile(r"^(?P<field>[^\[\]]+)\[(?P<op>[^\[\]]*)\]$")


@dataclass(frozen=True)
class ComparisonExpr:
    """
    One comparison against a field.

    `op` is one of OPERATORS; for `in` the value is a tuple of candidates,
    for every other operator it is a single raw value.
    """

    op: str
    value: Any


@dataclass
class ResourceQuery:
    """Request-scoped description of one listing call."""

    filters: Dict[str, List[ComparisonExpr]] = field(default_factory=dict)
    select_fields: Optional[List[str]] = None
    sort_keys: List[Tuple[str, bool]] = field(default_factory=list)
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def end_index(self) -> int:
        return self.page * self.limit


def normalize_operator(token: str) -> str:
    """
    Reduce `gt`, `$gt` or `$$gt` to the bare operator name.

    Stripping every marker is what makes parsing an already-translated filter
    a no-op instead of producing `$$gt`.

    Raises:
        ValidationError: for tokens outside OPERATORS
    """
    name = token.strip().lstrip(OPERATOR_MARKER).lower()
    if name not in OPERATORS:
        raise ValidationError(
            message=f"Unsupported query operator '{token}'",
            context={"operator": token, "allowed": list(OPERATORS)},
        )
    return name


def _split_list(raw: Any) -> List[Any]:
    """Comma separated strings and lists both become a flat list of values."""
    if isinstance(raw, (list, tuple, set)):
        items: List[Any] = []
        for item in raw:
            items.extend(_split_list(item))
        return items
    if isinstance(raw, str):
        return [part.strip() for part in raw.split(",") if part.strip()]
    return [raw]


def _positive_int(raw: Optional[Any], default: int) -> int:
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        return default
    return value if value >= 1 else default


def _iter_params(params: Any) -> Iterable[Tuple[str, Any]]:
    # Starlette's QueryParams keeps repeated keys only through multi_items()
    if hasattr(params, "multi_items"):
        return params.multi_items()
    if isinstance(params, Mapping):
        return params.items()
    return params


class _FilterBuilder:
    """Accumulates comparisons per field; one expression per operator."""

    def __init__(self) -> None:
        self._equals: Dict[str, List[Any]] = {}
        self._ops: Dict[str, Dict[str, Any]] = {}

    def add(self, field_name: str, op: str, value: Any) -> None:
        if op == "eq":
            if isinstance(value, (list, tuple, set)):
                self._equals.setdefault(field_name, []).extend(value)
            else:
                self._equals.setdefault(field_name, []).append(value)
        elif op == "in":
            candidates = self._ops.setdefault(field_name, {}).setdefault("in", [])
            if isinstance(value, (list, tuple, set)):
                candidates.extend(value)
            else:
                candidates.extend(_split_list(value))
        else:
            self._ops.setdefault(field_name, {})[op] = value

    def build(self) -> Dict[str, List[ComparisonExpr]]:
        filters: Dict[str, List[ComparisonExpr]] = {}
        for field_name in list(self._equals) + [f for f in self._ops if f not in self._equals]:
            exprs: List[ComparisonExpr] = []
            equals = self._equals.get(field_name, [])
            ops = dict(self._ops.get(field_name, {}))
            if len(equals) == 1:
                exprs.append(ComparisonExpr("eq", equals[0]))
            elif equals:
                ops.setdefault("in", [])
                ops["in"] = list(equals) + ops["in"]
            for op in OPERATORS:
                if op in ops:
                    value = tuple(ops[op]) if op == "in" else ops[op]
                    exprs.append(ComparisonExpr(op, value))
            filters[field_name] = exprs
        return filters


def parse_resource_query(params: Any) -> ResourceQuery:
    """
    Build a ResourceQuery from query parameters.

    Args:
        params: Starlette QueryParams, a mapping (values may be strings, lists
                or nested operator mappings), or an iterable of (key, value)
                pairs with repeated keys.

    Returns:
        ResourceQuery with page/limit defaulted to 1/25 when missing,
        non-numeric or below 1.

    Raises:
        ValidationError: unknown operator in a bracketed key or nested mapping
    """
    builder = _FilterBuilder()
    select_parts: List[str] = []
    sort_parts: List[str] = []
    page_raw: Optional[Any] = None
    limit_raw: Optional[Any] = None

    for key, value in _iter_params(params):
        if key == "select":
            select_parts.extend(_split_list(value))
            continue
        if key == "sort":
            sort_parts.extend(_split_list(value))
            continue
        if key == "page":
            page_raw = value[-1] if isinstance(value, (list, tuple)) and value else value
            continue
        if key == "limit":
            limit_raw = value[-1] if isinstance(value, (list, tuple)) and value else value
            continue

        match = _BRACKET_KEY.match(key)
        if match:
            builder.add(match.group("field"), normalize_operator(match.group("op")), value)
        elif isinstance(value, Mapping):
            for op_token, op_value in value.items():
                builder.add(key, normalize_operator(op_token), op_value)
        else:
            builder.add(key, "eq", value)

    sort_keys: List[Tuple[str, bool]] = []
    for part in sort_parts:
        descending = part.startswith("-")
        name = part[1:].strip() if descending else part
        if name:
            sort_keys.append((name, descending))

    return ResourceQuery(
        filters=builder.build(),
        select_fields=select_parts or None,
        sort_keys=sort_keys,
        page=_positive_int(page_raw, DEFAULT_PAGE),
        limit=_positive_int(limit_raw, DEFAULT_LIMIT),
    )


def render_filters(query: ResourceQuery) -> Dict[str, Any]:
    """
    Render the filters in operator-prefixed document-store form.

    A lone equality renders as the bare value; everything else as
    `{"$op": value}`. Feeding the result back into parse_resource_query
    yields the same filters.
    """
    rendered: Dict[str, Any] = {}
    for field_name, exprs in query.filters.items():
        if len(exprs) == 1 and exprs[0].op == "eq":
            rendered[field_name] = exprs[0].value
            continue
        rendered[field_name] = {
            f"{OPERATOR_MARKER}{expr.op}": list(expr.value) if expr.op == "in" else expr.value
            for expr in exprs
        }
    return rendered
