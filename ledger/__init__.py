"""Arc ledger storage, schema migration and run history."""

from .errors import ArcNotFoundError, ArcStoreError, ConfigurationError
from .schema import (
    DEFAULT_COLUMNS,
    REQUIRED_COLUMNS,
    add_lifecycle_columns,
    remove_lifecycle_columns,
)
from .store import ArcStore, InMemoryArcStore, JsonArcStore

__all__ = [
    "ArcNotFoundError",
    "ArcStore",
    "ArcStoreError",
    "ConfigurationError",
    "DEFAULT_COLUMNS",
    "InMemoryArcStore",
    "JsonArcStore",
    "REQUIRED_COLUMNS",
    "add_lifecycle_columns",
    "remove_lifecycle_columns",
]
