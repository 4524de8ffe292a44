# entity_facets/facets/filters.py
"""Filter normalization and group-by key resolution."""

from typing import Any, Dict, List, Optional, Union

from entity_facets.core.config import DEFAULT_PUBLICATION_ATTRIBUTE
from entity_facets.metadata.catalog import EntityMetadata

PUBLICATION_STATE_LIVE = "live"


def update_filters(
    metadata: EntityMetadata,
    filters: Optional[Dict[str, Any]],
    publication_state: Optional[str],
    publication_attribute: str = DEFAULT_PUBLICATION_ATTRIBUTE,
) -> Dict[str, Any]:
    """
    Restrict filters to live records unless another publication state is asked for.

    Only entities that declare the publication attribute are affected. The caller's
    filter dict is copied, not modified.
    """
    filters = dict(filters or {})

    if not publication_state or publication_state == PUBLICATION_STATE_LIVE:
        if metadata.get_attribute(publication_attribute):
            filters[publication_attribute] = {"$notNull": True}

    return filters


def get_group_by_array(metadata: EntityMetadata, group_by: Union[str, List[str], None]) -> List[str]:
    """Map group-by keys to physical columns; unknown keys (raw SQL) pass through."""
    if group_by is None:
        return []
    if not isinstance(group_by, (list, tuple)):
        group_by = [group_by]

    items = []
    for key in group_by:
        attribute = metadata.get_attribute(key)
        items.append(attribute.column_name if attribute else key)
    return items
