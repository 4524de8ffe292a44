# entity_facets/metadata/catalog.py
"""
Entity metadata catalog built from SQLAlchemy declarative models.

Maps logical attribute names (mapper attribute keys) to physical column names and
declared scalar types, and keeps the reverse column -> attribute map used to remap
raw result rows.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Type

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    Integer,
    LargeBinary,
    Numeric,
    String,
    Table,
    Time,
)
from sqlalchemy.inspection import inspect

from entity_facets.core.exceptions import UnknownEntityError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttributeMeta:
    """A logical attribute of an entity type."""

    name: str
    column_name: str
    type: str
    primary_key: bool = False
    # Key of the column in Table.c; differs from column_name when the model renames it
    column_key: Optional[str] = None


@dataclass
class EntityMetadata:
    """Attribute metadata for one entity type."""

    uid: str
    table: Table
    attributes: Dict[str, AttributeMeta] = field(default_factory=dict)
    column_to_attribute: Dict[str, str] = field(default_factory=dict)

    @property
    def primary_key(self) -> str:
        """Logical name of the identity attribute."""
        for attribute in self.attributes.values():
            if attribute.primary_key:
                return attribute.name
        return "id"

    def get_attribute(self, name: str) -> Optional[AttributeMeta]:
        return self.attributes.get(name)

    def get_column_key(self, name: str) -> Optional[str]:
        """Key under which the column for a logical or physical name is found in Table.c."""
        attribute = self.attributes.get(name) or self.attributes.get(self.column_to_attribute.get(name, ""))
        if attribute is None:
            return None
        return attribute.column_key or attribute.column_name


def get_declared_type(column_type: Any) -> str:
    """Convert a SQLAlchemy column type to a declared scalar type name."""
    # Order matters: Enum subclasses String, Float subclasses Numeric, BigInteger subclasses Integer
    if isinstance(column_type, Boolean):
        return "boolean"
    elif isinstance(column_type, Enum):
        return "enumeration"
    elif isinstance(column_type, BigInteger):
        return "biginteger"
    elif isinstance(column_type, Integer):
        return "integer"
    elif isinstance(column_type, Float):
        return "float"
    elif isinstance(column_type, Numeric):
        return "decimal"
    elif isinstance(column_type, String):
        return "string"
    elif isinstance(column_type, DateTime):
        return "datetime"
    elif isinstance(column_type, Date):
        return "date"
    elif isinstance(column_type, Time):
        return "time"
    elif isinstance(column_type, JSON):
        return "json"
    elif isinstance(column_type, LargeBinary):
        return "binary"
    else:
        return "unknown"


class MetadataCatalog:
    """Registry of entity types available to the facet engine."""

    def __init__(self):
        self._entities: Dict[str, EntityMetadata] = {}

    def register(
        self,
        uid: str,
        model: Type[Any],
        type_overrides: Optional[Dict[str, str]] = None,
    ) -> EntityMetadata:
        """
        Register a declarative model under an entity type identifier.

        Args:
            uid: Entity type identifier used by callers
            model: SQLAlchemy mapped class
            type_overrides: Optional logical name -> declared type replacements

        Returns:
            The metadata built for the model
        """
        mapper = inspect(model)
        overrides = type_overrides or {}

        metadata = EntityMetadata(uid=uid, table=mapper.local_table)
        for attr in mapper.column_attrs:
            column = attr.columns[0]
            # Skip attributes mapped to expressions rather than table columns
            if getattr(column, "table", None) is not mapper.local_table:
                continue
            attribute = AttributeMeta(
                name=attr.key,
                column_name=column.name,
                type=overrides.get(attr.key, get_declared_type(column.type)),
                primary_key=bool(column.primary_key),
                column_key=column.key,
            )
            metadata.attributes[attribute.name] = attribute
            metadata.column_to_attribute[attribute.column_name] = attribute.name

        self._entities[uid] = metadata
        logger.debug(f"Registered entity {uid} with attributes {list(metadata.attributes)}")
        return metadata

    def get(self, uid: str) -> EntityMetadata:
        """Get metadata for an entity type, raising UnknownEntityError if missing."""
        metadata = self._entities.get(uid)
        if metadata is None:
            raise UnknownEntityError(uid, self.get_available_entities())
        return metadata

    def get_available_entities(self) -> List[str]:
        """Get all registered entity type identifiers."""
        return list(self._entities.keys())
