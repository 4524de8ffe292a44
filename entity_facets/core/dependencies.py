# entity_facets/core/dependencies.py
"""FastAPI dependencies for the facet engine."""

from typing import Annotated

from fastapi import Depends, Request

from entity_facets.facets.service import FacetContext, FacetService


def get_facet_context(request: Request) -> FacetContext:
    """Get the facet context configured by create_app."""
    return request.app.state.facet_context


def get_facet_service(context: FacetContext = Depends(get_facet_context)) -> FacetService:
    """Get a facet service bound to the application's context."""
    return FacetService(context)


FacetServiceDep = Annotated[FacetService, Depends(get_facet_service)]
