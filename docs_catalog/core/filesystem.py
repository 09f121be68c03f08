"""Document catalog backed by a local directory of Markdown files."""

import asyncio
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import ValidationError

from docs_catalog.core.exceptions import DocumentNotFoundError, SourceUnavailableError
from docs_catalog.core.frontmatter import extract_heading_title, parse_front_matter
from docs_catalog.core.lazy import LazyValue
from docs_catalog.core.utils import (
    category_from_path,
    filter_by_tag,
    find_document,
    generate_document_id,
    is_markdown_name,
    matches_metadata,
    normalize_query,
    resolve_title,
    sort_documents,
)
from docs_catalog.models.documents import DocumentInfo, IndexFile

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION_NAME = "docs"
INDEX_FILE_NAME = "index.json"
MAX_SEARCH_RESULTS = 50

PACKAGE_DIR = Path(__file__).resolve().parent.parent


def _contains_markdown(directory: Path) -> bool:
    return any(
        path.is_file() and is_markdown_name(path.name) for path in directory.rglob("*")
    )


def find_collection_upwards(
    start_dir: Path, collection_name: str = DEFAULT_COLLECTION_NAME
) -> Path | None:
    """Walk up from ``start_dir`` looking for a collection holding Markdown files."""
    for directory in (start_dir, *start_dir.parents):
        candidate = directory / collection_name
        if candidate.is_dir() and _contains_markdown(candidate):
            return candidate
    return None


def resolve_default_root(
    start_dirs: Iterable[Path] | None = None,
    collection_name: str = DEFAULT_COLLECTION_NAME,
) -> Path:
    """Locate the document collection when no explicit root is configured.

    Candidates are tried in order: the working directory, then the package's
    installation directory. The fallback may not exist, in which case the
    catalog is simply empty.
    """
    if start_dirs is None:
        start_dirs = (Path.cwd(), PACKAGE_DIR)

    for start in start_dirs:
        found = find_collection_upwards(Path(start).resolve(), collection_name)
        if found is not None:
            logger.debug(f"Resolved document root: {found}")
            return found

    return PACKAGE_DIR / collection_name


def _read_text(path: Path) -> str:
    return path.read_text(encoding="utf-8", errors="replace")


class FileSystemDocumentCatalog:
    """Serves Markdown documents from a local folder structure.

    The index is built on first use and kept for the lifetime of the
    catalog; document content is always read fresh from disk.
    """

    source = "filesystem"

    def __init__(
        self,
        root: Path | str | None = None,
        collection_name: str = DEFAULT_COLLECTION_NAME,
    ):
        self.root = (
            Path(root) if root is not None else resolve_default_root(None, collection_name)
        )
        self._documents: LazyValue[list[DocumentInfo]] = LazyValue(self._scan)

    def __repr__(self) -> str:
        return f"FileSystemDocumentCatalog(root='{self.root}')"

    async def list_documents(self) -> list[DocumentInfo]:
        return await self._index()

    async def search(self, query: str | None) -> list[DocumentInfo]:
        """Match title, id, path or full content; first 50 hits in index order."""
        needle = normalize_query(query)
        if needle is None:
            return []

        documents = await self._index()
        return await asyncio.to_thread(self._search, documents, needle)

    async def search_by_tag(self, tag: str | None) -> list[DocumentInfo]:
        return filter_by_tag(await self._index(), tag)

    async def get_content(self, document_id: str) -> str:
        document = find_document(await self._index(), document_id)
        if document is None:
            raise DocumentNotFoundError(document_id, source=str(self.root))

        path = self.root / document.relative_path
        try:
            return await asyncio.to_thread(_read_text, path)
        except OSError as e:
            raise SourceUnavailableError(
                f"Cannot read document '{document_id}' from {path}: {e}"
            ) from e

    async def _index(self) -> list[DocumentInfo]:
        if self._documents.is_computed:
            return self._documents.value
        return await asyncio.to_thread(lambda: self._documents.value)

    def _search(self, documents: list[DocumentInfo], needle: str) -> list[DocumentInfo]:
        results = []
        for document in documents:
            if matches_metadata(document, needle) or self._content_contains(
                document, needle
            ):
                results.append(document)
                if len(results) >= MAX_SEARCH_RESULTS:
                    break
        return results

    def _content_contains(self, document: DocumentInfo, needle: str) -> bool:
        try:
            content = _read_text(self.root / document.relative_path)
        except OSError as e:
            logger.debug(f"Skipping unreadable document {document.relative_path}: {e}")
            return False
        return needle in content.casefold()

    def _scan(self) -> list[DocumentInfo]:
        if not self.root.is_dir():
            logger.info(f"Document root {self.root} does not exist, catalog is empty")
            return []

        documents = self._load_index_file()
        if documents:
            logger.info(
                f"Loaded {len(documents)} documents from {self.root / INDEX_FILE_NAME}"
            )
            return documents

        documents = sort_documents(
            self._build_document(path)
            for path in self.root.rglob("*")
            if path.is_file() and is_markdown_name(path.name)
        )
        logger.info(f"Indexed {len(documents)} documents under {self.root}")
        return documents

    def _load_index_file(self) -> list[DocumentInfo]:
        index_path = self.root / INDEX_FILE_NAME
        if not index_path.is_file():
            return []

        try:
            index = IndexFile.model_validate_json(index_path.read_bytes())
        except (OSError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable index file {index_path}: {e}")
            return []
        return sort_documents(index.to_documents())

    def _build_document(self, path: Path) -> DocumentInfo:
        relative = path.relative_to(self.root)
        relative_path = str(relative)
        try:
            content = _read_text(path)
        except OSError as e:
            logger.warning(f"Could not read {path}, indexing by file name: {e}")
            content = ""
        front_matter = parse_front_matter(content)
        title = resolve_title(
            front_matter.title, extract_heading_title(content), relative_path
        )
        return DocumentInfo(
            id=generate_document_id(relative_path),
            title=title,
            category=category_from_path(relative.as_posix()),
            relative_path=relative_path,
            tags=front_matter.tags,
        )
