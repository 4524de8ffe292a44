# entity_facets/core/config.py
"""Runtime configuration loaded from the environment (and an optional .env file)."""

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

DEFAULT_MAX_VALUES = 256
DEFAULT_PUBLICATION_ATTRIBUTE = "publishedAt"


@dataclass(frozen=True)
class Settings:
    """Facet engine settings."""

    database_url: str = "sqlite:///./entity_facets.db"
    # List facets with more distinct values than this are dropped
    max_facet_values: int = DEFAULT_MAX_VALUES
    publication_attribute: str = DEFAULT_PUBLICATION_ATTRIBUTE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        return cls(
            database_url=os.getenv("DATABASE_URL", cls.database_url),
            max_facet_values=int(os.getenv("FACETS_MAX_VALUES", str(DEFAULT_MAX_VALUES))),
            publication_attribute=os.getenv("FACETS_PUBLICATION_ATTRIBUTE", DEFAULT_PUBLICATION_ATTRIBUTE),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
        )


@lru_cache()
def get_settings() -> Settings:
    """Get the process-wide settings instance."""
    return Settings.from_env()
