# entity_facets/facets/group_by.py
"""Group-by counting and paginated fetching of one representative row per group."""

import logging
from typing import Any, Dict, List, Optional, Union

from entity_facets.facets.filters import get_group_by_array
from entity_facets.metadata.catalog import EntityMetadata
from entity_facets.query.builder import QueryBuilder
from entity_facets.query.schemas import CompiledSql, SortSpec, SubquerySlot

logger = logging.getLogger(__name__)

INNER_ALIAS = "t0"
OUTER_ALIAS = "t1"

GroupByKeys = Union[str, List[str]]


async def count_groups(
    query_builder: QueryBuilder,
    metadata: EntityMetadata,
    group_by: GroupByKeys,
    filters: Optional[Dict[str, Any]],
) -> Optional[int]:
    """Count the distinct group-key combinations under the filters."""
    query = query_builder.create_query(metadata.uid).init(
        filters=filters, group_by=get_group_by_array(metadata, group_by)
    )
    result = await query.count().execute()
    if result is None:
        logger.debug(f"Group count for {metadata.uid} returned no result")
        return None
    return len(result)


def build_group_subquery(
    query_builder: QueryBuilder,
    metadata: EntityMetadata,
    group_by: GroupByKeys,
    filters: Optional[Dict[str, Any]],
) -> CompiledSql:
    """
    Compile a subquery selecting the minimum id of every group.

    The builder compiles `SELECT t0.id ... GROUP BY ...`, which is rewritten to
    `SELECT min(t0.id) AS id ...`.
    """
    query = query_builder.create_query(metadata.uid, alias=INNER_ALIAS)
    id_column = query.column(metadata.primary_key)

    compiled = query.init(
        select=[metadata.primary_key],
        filters=filters,
        group_by=get_group_by_array(metadata, group_by),
    ).compile_sql()

    id_sql = query_builder.compile_expression(id_column)
    return compiled.replace_fragment(
        f"SELECT {id_sql}", f"SELECT min({id_sql}) AS {query_builder.quote(id_column.name)}"
    )


def build_full_query(
    query_builder: QueryBuilder,
    metadata: EntityMetadata,
    subquery: CompiledSql,
    fields: Optional[List[str]] = None,
    populate: Optional[List[str]] = None,
    sort: SortSpec = None,
    start: Optional[int] = None,
    limit: Optional[int] = None,
) -> CompiledSql:
    """
    Compile the paginated outer query restricted to the subquery's ids.

    The outer table uses its own alias so the spliced subquery's alias does not
    collide with it; the subquery's parameters are bound where it appears.
    """
    slot = SubquerySlot()
    outer = (
        query_builder.create_query(metadata.uid, alias=OUTER_ALIAS)
        .init(
            select=fields,
            filters={metadata.primary_key: {"$in": slot}},
            populate=populate,
            order_by=sort,
            offset=start,
            limit=limit,
        )
        .compile_sql()
    )
    return outer.splice(slot.marker, subquery)


def remap_rows(metadata: EntityMetadata, rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Rename physical column keys to logical attribute names."""
    items = []
    for row in rows or []:
        items.append({metadata.column_to_attribute.get(key, key): value for key, value in row.items()})
    return items
