# entity_facets/core/database.py
"""Database engine configuration."""

from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from entity_facets.core.config import get_settings


def create_database_engine(database_url: Optional[str] = None) -> Engine:
    """Create an engine for the entity store.

    SQLite connections are shared with the threadpool that runs facet queries,
    so the same-thread check is turned off for them.
    """
    url = database_url or get_settings().database_url
    return create_engine(
        url,
        connect_args={"check_same_thread": False} if url.startswith("sqlite") else {},
    )
