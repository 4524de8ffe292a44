# entity_facets/query/filters.py
"""Translate declarative filter trees into SQLAlchemy WHERE conditions."""

from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import and_, literal_column, not_, or_, true
from sqlalchemy.sql.elements import ColumnElement

from entity_facets.core.exceptions import InvalidQueryError
from entity_facets.metadata.catalog import EntityMetadata
from entity_facets.query.schemas import SubquerySlot

LOGICAL_OPERATORS = ("$and", "$or", "$not")


def _in(column, value):
    if isinstance(value, SubquerySlot):
        return column.op("IN")(literal_column(f"({value.marker})"))
    return column.in_(_as_list(value))


def _not_in(column, value):
    return column.not_in(_as_list(value))


def _between(column, value):
    bounds = _as_list(value)
    if len(bounds) != 2:
        raise InvalidQueryError("$between expects exactly two bounds")
    return column.between(bounds[0], bounds[1])


def _null(column, value):
    return column.is_(None) if value else column.is_not(None)


def _not_null(column, value):
    return column.is_not(None) if value else column.is_(None)


OPERATORS: Dict[str, Callable[[Any, Any], ColumnElement]] = {
    "$eq": lambda column, value: column.is_(None) if value is None else column == value,
    "$ne": lambda column, value: column.is_not(None) if value is None else column != value,
    "$in": _in,
    "$notIn": _not_in,
    "$lt": lambda column, value: column < value,
    "$lte": lambda column, value: column <= value,
    "$gt": lambda column, value: column > value,
    "$gte": lambda column, value: column >= value,
    "$between": _between,
    "$null": _null,
    "$notNull": _not_null,
    "$contains": lambda column, value: column.contains(value, autoescape=True),
    "$notContains": lambda column, value: not_(column.contains(value, autoescape=True)),
    "$containsi": lambda column, value: column.icontains(value, autoescape=True),
    "$startsWith": lambda column, value: column.startswith(value, autoescape=True),
    "$endsWith": lambda column, value: column.endswith(value, autoescape=True),
}


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, (list, tuple, set)):
        return list(value)
    return [value]


def build_conditions(metadata: EntityMetadata, table, filters: Optional[Dict[str, Any]]) -> Optional[ColumnElement]:
    """
    Build a single WHERE condition for a filter tree.

    Args:
        metadata: Entity metadata used to resolve logical attribute names
        table: Table or alias the columns are taken from
        filters: attribute -> value | {operator: value}, plus $and / $or / $not

    Returns:
        The combined condition, or None for an empty filter tree
    """
    if not filters:
        return None

    conditions = []
    for key, value in filters.items():
        if key == "$and":
            parts = [c for c in (build_conditions(metadata, table, f) for f in _as_list(value)) if c is not None]
            if parts:
                conditions.append(and_(*parts))
        elif key == "$or":
            parts = [c for c in (build_conditions(metadata, table, f) for f in _as_list(value)) if c is not None]
            if parts:
                conditions.append(or_(*parts))
        elif key == "$not":
            part = build_conditions(metadata, table, value)
            if part is not None:
                conditions.append(not_(part))
        else:
            conditions.append(_build_attribute_condition(metadata, table, key, value))

    if not conditions:
        return None
    if len(conditions) == 1:
        return conditions[0]
    return and_(*conditions)


def _build_attribute_condition(metadata: EntityMetadata, table, key: str, value: Any) -> ColumnElement:
    column_key = metadata.get_column_key(key)
    if column_key is None:
        raise InvalidQueryError(f"Unknown filter attribute '{key}' for {metadata.uid}")
    column = table.c[column_key]

    if not isinstance(value, dict):
        # Bare values compare for equality, lists for membership
        if isinstance(value, (list, tuple, set)):
            return column.in_(list(value))
        return OPERATORS["$eq"](column, value)

    parts = []
    for operator, operand in value.items():
        if operator in LOGICAL_OPERATORS:
            if operator == "$not":
                nested = build_conditions(metadata, table, {"$not": {key: operand}})
            else:
                nested = build_conditions(metadata, table, {operator: [{key: o} for o in _as_list(operand)]})
            if nested is not None:
                parts.append(nested)
            continue
        handler = OPERATORS.get(operator)
        if handler is None:
            raise InvalidQueryError(f"Unsupported filter operator '{operator}' on '{key}'")
        parts.append(handler(column, operand))

    if not parts:
        return true()
    if len(parts) == 1:
        return parts[0]
    return and_(*parts)
