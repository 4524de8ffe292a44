"""FastAPI application factory for hosts that serve the facet engine over HTTP."""

import logging
from typing import Optional

from fastapi import FastAPI
from sqlalchemy.engine import Engine

from entity_facets.core.config import Settings, get_settings
from entity_facets.core.database import create_database_engine
from entity_facets.facets.router import router as facet_router
from entity_facets.facets.service import FacetContext
from entity_facets.logging.exception_handlers import register_exception_handlers
from entity_facets.metadata.catalog import MetadataCatalog


def create_app(
    catalog: Optional[MetadataCatalog] = None,
    engine: Optional[Engine] = None,
    settings: Optional[Settings] = None,
    context: Optional[FacetContext] = None,
) -> FastAPI:
    """
    Create the API application.

    Either a ready FacetContext or the catalog of entity types to serve must be
    given; the engine defaults to one built from DATABASE_URL.
    """
    settings = settings or (context.settings if context else get_settings())
    logging.getLogger("entity_facets").setLevel(settings.log_level)

    if context is None:
        if catalog is None:
            raise ValueError("create_app needs a MetadataCatalog or a FacetContext")
        context = FacetContext.from_engine(catalog, engine or create_database_engine(settings.database_url), settings)

    app = FastAPI(docs_url="/api/docs", redoc_url="/api/redoc", openapi_url="/api/openapi.json")
    app.state.facet_context = context

    register_exception_handlers(app)
    app.include_router(facet_router, prefix="/api")

    return app
