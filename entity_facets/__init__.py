"""
Faceted aggregation over a generic relational entity store.

Main Components:
- MetadataCatalog: logical attribute metadata for registered entity types
- QueryBuilder: declarative query specs compiled to positional SQL
- FacetService: run_filters, run_group_by and run_group_by_count entry points
"""

from .core.config import Settings, get_settings
from .facets.service import FacetContext, FacetService
from .metadata.catalog import AttributeMeta, EntityMetadata, MetadataCatalog
from .query.builder import QueryBuilder
from .query.executor import EngineSqlExecutor, SqlExecutor

__all__ = [
    "Settings",
    "get_settings",
    "FacetContext",
    "FacetService",
    "AttributeMeta",
    "EntityMetadata",
    "MetadataCatalog",
    "QueryBuilder",
    "EngineSqlExecutor",
    "SqlExecutor",
]
