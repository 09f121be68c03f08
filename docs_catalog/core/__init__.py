"""Core catalog functionality: parsing, indexing and the two catalog backends."""

from docs_catalog.core.cache import IndexCache, MemoryIndexCache, RedisIndexCache
from docs_catalog.core.catalog import DocumentCatalog, create_cache, create_catalog
from docs_catalog.core.exceptions import (
    CatalogError,
    DocumentNotFoundError,
    SourceUnavailableError,
)
from docs_catalog.core.filesystem import FileSystemDocumentCatalog
from docs_catalog.core.frontmatter import FrontMatter, parse_front_matter
from docs_catalog.core.remote import GitHubDocumentCatalog
from docs_catalog.core.utils import generate_document_id

__all__ = [
    "DocumentCatalog",
    "FileSystemDocumentCatalog",
    "GitHubDocumentCatalog",
    "create_catalog",
    "create_cache",
    "IndexCache",
    "MemoryIndexCache",
    "RedisIndexCache",
    "CatalogError",
    "DocumentNotFoundError",
    "SourceUnavailableError",
    "FrontMatter",
    "parse_front_matter",
    "generate_document_id",
]
