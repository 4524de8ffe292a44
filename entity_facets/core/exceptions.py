# entity_facets/core/exceptions.py
"""Exceptions raised by the facet engine."""

from typing import List, Optional


class FacetError(Exception):
    """Base class for facet engine errors."""

    pass


class UnknownEntityError(FacetError):
    """The entity type is not registered in the metadata catalog."""

    def __init__(self, uid: str, available: Optional[List[str]] = None):
        super().__init__(f"Unknown entity type: {uid}")
        self.uid = uid
        self.available = available or []


class InvalidQueryError(FacetError):
    """A filter, selection or sort references something the query builder cannot compile."""

    pass


class QueryTemplateError(FacetError):
    """A compiled statement did not contain the marker a rewrite expected."""

    pass


class UnsupportedDialectError(FacetError):
    """The database dialect does not use a positional parameter style."""

    pass
