"""Centralized model definitions for Docs Catalog.

- documents: catalog document metadata and the prebuilt index file format
- config: runtime settings
"""

from docs_catalog.models.config import *
from docs_catalog.models.documents import *

__all__ = [
    # Document models
    "DocumentInfo",
    "IndexFileEntry",
    "IndexFile",
    "RepositoryContentItem",
    # Config models
    "CatalogSettings",
    "RepositoryConfig",
    "DEFAULT_CONFIG_PATH",
]
