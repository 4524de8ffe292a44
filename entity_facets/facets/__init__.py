"""
Facet module.

Main Components:
- Classifier: attribute -> facet kind, effective facet configuration
- Templater / query builder: one filtered template, one statement per facet
- Executor / normalizer: concurrent batch execution, uniform facet results
- Group-by: group counts and representative rows per group
- FacetService: the public entry points
"""

from .schemas import FacetConfig, FacetItem, FacetResult, ListFacetResult, RangeFacetResult
from .service import FacetContext, FacetService

__all__ = [
    "FacetConfig",
    "FacetItem",
    "FacetResult",
    "ListFacetResult",
    "RangeFacetResult",
    "FacetContext",
    "FacetService",
]
