"""MCP tools exposing a document catalog."""

import logging

from docs_catalog.core.catalog import DocumentCatalog
from docs_catalog.core.utils import top_level_category
from docs_catalog.models.documents import DocumentInfo

logger = logging.getLogger(__name__)


def serialize_documents(documents: list[DocumentInfo]) -> list[dict]:
    """Convert documents to JSON-ready dicts with ``relativePath`` keys."""
    return [document.model_dump(mode="json", by_alias=True) for document in documents]


class DocsTools:
    """Collection of MCP tools backed by a single catalog instance."""

    def __init__(self, catalog: DocumentCatalog):
        """Initialize tools with the catalog chosen at startup."""
        self.catalog = catalog

    async def list_docs(self) -> list[dict]:
        """List all documents with id, title, category, path and tags."""
        documents = await self.catalog.list_documents()
        logger.info(f"Listed {len(documents)} documents")
        return serialize_documents(documents)

    async def list_docs_by_type(self, category: str) -> list[dict]:
        """List documents whose top-level category matches (e.g. 'adrs').

        Args:
            category: Top-level category name, compared case-insensitively

        Returns:
            Serialized documents in index order
        """
        wanted = (category or "").strip().casefold()
        documents = [
            document
            for document in await self.catalog.list_documents()
            if top_level_category(document).casefold() == wanted
        ]
        logger.info(f"Listed {len(documents)} documents in category '{category}'")
        return serialize_documents(documents)

    async def search_docs(self, query: str) -> list[dict]:
        """Search documents by title, id and path (case-insensitive)."""
        documents = await self.catalog.search(query)
        logger.info(f"Search '{query}' matched {len(documents)} documents")
        return serialize_documents(documents)

    async def search_docs_by_tag(self, tag: str) -> list[dict]:
        """Find documents carrying a tag."""
        documents = await self.catalog.search_by_tag(tag)
        logger.info(f"Tag '{tag}' matched {len(documents)} documents")
        return serialize_documents(documents)

    async def get_doc(self, id: str) -> str:
        """Return the full Markdown content of a document.

        Raises:
            DocumentNotFoundError: If no document has this id
        """
        content = await self.catalog.get_content(id)
        logger.info(f"Retrieved document '{id}' ({len(content)} chars)")
        return content
