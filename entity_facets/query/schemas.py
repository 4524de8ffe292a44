"""
Query building schemas and types.

This module defines the declarative query spec accepted by the QueryBuilder and the
compiled, positional SQL representations the facet engine renders and splices.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy.sql.elements import ColumnElement

from entity_facets.core.exceptions import QueryTemplateError, UnsupportedDialectError

SELECT_SLOT = "{{select}}"
GROUP_BY_SLOT = "{{groupBy}}"

# Placeholder token written by each supported positional paramstyle
PARAMSTYLE_PLACEHOLDERS = {
    "qmark": "?",
    "format": "%s",
}

SelectItem = Union[str, ColumnElement]
SortSpec = Union[str, Sequence[Any], Dict[str, str], None]


@dataclass
class QuerySpec:
    """Declarative description of a query over one entity type."""

    select: Optional[List[SelectItem]] = None
    filters: Optional[Dict[str, Any]] = None
    group_by: Optional[List[SelectItem]] = None
    populate: Optional[List[str]] = None
    order_by: SortSpec = None
    offset: Optional[int] = None
    limit: Optional[int] = None


@dataclass(frozen=True)
class SubquerySlot:
    """Filter value standing in for a subquery spliced in after compilation."""

    marker: str = "__subquery__"


def get_placeholder(paramstyle: str) -> str:
    """Get the positional placeholder token for a DBAPI paramstyle."""
    placeholder = PARAMSTYLE_PLACEHOLDERS.get(paramstyle)
    if placeholder is None:
        raise UnsupportedDialectError(f"Unsupported parameter style: {paramstyle}")
    return placeholder


def replace_once(sql: str, old: str, new: str) -> str:
    """Replace a fragment that must occur exactly once in compiled SQL."""
    occurrences = sql.count(old)
    if occurrences != 1:
        raise QueryTemplateError(f"Expected exactly one '{old}' in compiled SQL, found {occurrences}")
    return sql.replace(old, new, 1)


@dataclass
class CompiledSql:
    """SQL text with its positional parameters in textual order."""

    sql: str
    parameters: List[Any] = field(default_factory=list)
    paramstyle: str = "qmark"

    def replace_fragment(self, old: str, new: str) -> "CompiledSql":
        """Rewrite a fragment that carries no placeholders."""
        return replace(self, sql=replace_once(self.sql, old, new))

    def splice(self, marker: str, fragment: "CompiledSql") -> "CompiledSql":
        """
        Replace a marker with another compiled fragment.

        The fragment's parameters are inserted at the marker's position among this
        statement's placeholders so the combined list stays in textual order.
        """
        placeholder = get_placeholder(self.paramstyle)
        head, _, tail = replace_once(self.sql, marker, "\0").partition("\0")
        index = head.count(placeholder)
        parameters = self.parameters[:index] + list(fragment.parameters) + self.parameters[index:]
        return CompiledSql(sql=head + fragment.sql + tail, parameters=parameters, paramstyle=self.paramstyle)


@dataclass
class SqlTemplate:
    """Compiled base query with slots for the select list and the group-by clause."""

    sql: str
    parameters: List[Any] = field(default_factory=list)
    paramstyle: str = "qmark"

    def render(self, select: str, group_by: str = "") -> CompiledSql:
        """
        Fill the slots.

        Select expressions and group-by clauses carry no placeholders, so the
        template's parameter list binds unchanged.
        """
        sql = self.sql.replace(SELECT_SLOT, select, 1).replace(GROUP_BY_SLOT, group_by, 1)
        return CompiledSql(sql=sql, parameters=list(self.parameters), paramstyle=self.paramstyle)
