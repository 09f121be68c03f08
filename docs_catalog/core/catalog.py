"""Catalog contract and configuration-driven construction."""

import logging
from typing import Protocol, runtime_checkable

import httpx

from docs_catalog.core.cache import IndexCache, MemoryIndexCache, RedisIndexCache
from docs_catalog.core.filesystem import FileSystemDocumentCatalog
from docs_catalog.core.remote import GitHubDocumentCatalog
from docs_catalog.models.config import CatalogSettings
from docs_catalog.models.documents import DocumentInfo

logger = logging.getLogger(__name__)


@runtime_checkable
class DocumentCatalog(Protocol):
    """Read-only access to guidelines, recommendations and ADRs."""

    source: str

    async def list_documents(self) -> list[DocumentInfo]:
        """All documents, sorted by category then title."""
        ...

    async def search(self, query: str | None) -> list[DocumentInfo]:
        """Case-insensitive substring search; blank queries match nothing."""
        ...

    async def search_by_tag(self, tag: str | None) -> list[DocumentInfo]:
        """Documents carrying ``tag`` (case-insensitive)."""
        ...

    async def get_content(self, document_id: str) -> str:
        """Raw Markdown of a document; raises ``DocumentNotFoundError``."""
        ...


async def create_cache(settings: CatalogSettings) -> IndexCache:
    """Build the index cache selected by ``settings.cache_backend``."""
    if settings.cache_backend == "redis":
        cache = RedisIndexCache(settings.redis_url)
        await cache.initialize()
        return cache
    return MemoryIndexCache()


def create_catalog(
    settings: CatalogSettings,
    cache: IndexCache | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> DocumentCatalog:
    """Local catalog when ``docs_path`` is an existing directory, else GitHub."""
    if settings.uses_local_docs:
        logger.info(f"Serving documents from {settings.docs_path}")
        return FileSystemDocumentCatalog(settings.docs_path)

    if settings.docs_path is not None:
        logger.warning(
            f"Document path {settings.docs_path} does not exist, using GitHub instead"
        )

    repository = settings.repository
    logger.info(
        f"Serving documents from GitHub {repository.owner}/{repository.repo}"
        f"@{repository.branch}"
    )
    return GitHubDocumentCatalog(
        owner=repository.owner,
        repo=repository.repo,
        branch=repository.branch,
        docs_path=repository.docs_path,
        cache=cache,
        http_client=http_client,
        token=settings.github_token,
        api_base_url=repository.api_base_url,
        raw_base_url=repository.raw_base_url,
        index_file=repository.index_file,
        cache_ttl=settings.cache_ttl_seconds,
        request_timeout=settings.request_timeout,
    )
