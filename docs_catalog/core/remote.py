"""Document catalog backed by a GitHub repository."""

import asyncio
import logging
import os
from collections.abc import AsyncIterator
from urllib.parse import quote

import httpx

from docs_catalog import __version__
from docs_catalog.core.cache import DEFAULT_SLIDING_EXPIRATION, IndexCache, MemoryIndexCache
from docs_catalog.core.exceptions import DocumentNotFoundError, SourceUnavailableError
from docs_catalog.core.frontmatter import extract_heading_title, parse_front_matter
from docs_catalog.core.utils import (
    category_from_path,
    filter_by_tag,
    find_document,
    generate_document_id,
    matches_metadata,
    normalize_query,
    resolve_title,
    sort_documents,
)
from docs_catalog.models.documents import DocumentInfo, IndexFile, RepositoryContentItem

logger = logging.getLogger(__name__)

USER_AGENT = f"docs-catalog/{__version__}"
TOKEN_ENV_VAR = "GITHUB_TOKEN"


class GitHubDocumentCatalog:
    """Serves Markdown documents straight from a GitHub repository.

    The index comes from the repository's prebuilt ``index.json`` when it is
    available. Otherwise the docs folder is walked through the contents API
    and every Markdown file is fetched once to read its front matter. Either
    way the result is cached with a sliding expiration, so a flaky index file
    does not force a traversal on every call.

    Document content is never cached: ``get_content`` always hits the raw
    content host.
    """

    source = "github"

    def __init__(
        self,
        owner: str = "nikneem",
        repo: str = "hexmaster-design-guidelines",
        branch: str = "main",
        docs_path: str = "docs",
        cache: IndexCache | None = None,
        http_client: httpx.AsyncClient | None = None,
        token: str | None = None,
        api_base_url: str = "https://api.github.com",
        raw_base_url: str = "https://raw.githubusercontent.com",
        index_file: str = "index.json",
        cache_ttl: float = DEFAULT_SLIDING_EXPIRATION,
        request_timeout: float = 30.0,
    ):
        self.owner = owner
        self.repo = repo
        self.branch = branch
        self.docs_path = docs_path.strip("/")
        self.index_file = index_file
        self.api_base_url = api_base_url.rstrip("/")
        self.raw_base_url = raw_base_url.rstrip("/")
        self.cache_ttl = cache_ttl
        self.cache = cache if cache is not None else MemoryIndexCache()

        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=request_timeout, follow_redirects=True
        )
        self._build_lock = asyncio.Lock()

        self.headers = {"User-Agent": USER_AGENT}
        token = token if token is not None else os.getenv(TOKEN_ENV_VAR)
        if token and token.strip():
            self.headers["Authorization"] = f"Bearer {token.strip()}"

    def __repr__(self) -> str:
        return f"GitHubDocumentCatalog(repository='{self.owner}/{self.repo}@{self.branch}')"

    async def __aenter__(self) -> "GitHubDocumentCatalog":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the HTTP client if this catalog created it."""
        if self._owns_client:
            await self._http.aclose()

    @property
    def cache_key(self) -> str:
        return f"docs-index:{self.owner}/{self.repo}@{self.branch}"

    # Catalog operations

    async def list_documents(self) -> list[DocumentInfo]:
        return await self._get_index()

    async def search(self, query: str | None) -> list[DocumentInfo]:
        """Match title, id or path; content is not fetched for searching."""
        needle = normalize_query(query)
        if needle is None:
            return []
        documents = await self._get_index()
        return [d for d in documents if matches_metadata(d, needle)]

    async def search_by_tag(self, tag: str | None) -> list[DocumentInfo]:
        if normalize_query(tag) is None:
            return []
        return filter_by_tag(await self._get_index(), tag)

    async def get_content(self, document_id: str) -> str:
        document = find_document(await self._get_index(), document_id)
        if document is None:
            raise DocumentNotFoundError(
                document_id, source=f"GitHub repository {self.owner}/{self.repo}"
            )
        return await self._fetch_text(self._raw_url(document.relative_path))

    # Index construction

    async def _get_index(self) -> list[DocumentInfo]:
        documents = await self.cache.get(self.cache_key)
        if documents is not None:
            logger.debug(f"Index cache hit for {self.cache_key}")
            return documents

        async with self._build_lock:
            # Another task may have built the index while we waited
            documents = await self.cache.get(self.cache_key)
            if documents is not None:
                return documents

            documents = await self._load_index_file()
            if documents:
                logger.info(
                    f"Loaded {len(documents)} documents from {self.index_file} "
                    f"in {self.owner}/{self.repo}"
                )
            else:
                documents = await self._traverse_repository()
                logger.info(
                    f"Indexed {len(documents)} documents by traversing "
                    f"{self.owner}/{self.repo}/{self.docs_path}"
                )

            await self.cache.set(self.cache_key, documents, self.cache_ttl)
            return documents

    async def _load_index_file(self) -> list[DocumentInfo]:
        """Fetch the prebuilt index; any failure means "use traversal"."""
        url = self._raw_url(self.index_file)
        try:
            response = await self._http.get(url, headers=self.headers)
            response.raise_for_status()
            if not response.content.strip():
                logger.warning(f"Index file {url} is empty, traversing repository")
                return []
            index = IndexFile.model_validate_json(response.content)
        except Exception as e:
            logger.warning(f"Index file {url} unavailable, traversing repository: {e}")
            return []
        return sort_documents(index.to_documents())

    async def _traverse_repository(self) -> list[DocumentInfo]:
        documents = []
        async for item in self._iter_markdown_files():
            documents.append(await self._build_document(item))
        return sort_documents(documents)

    async def _iter_markdown_files(self) -> AsyncIterator[RepositoryContentItem]:
        """Depth-first walk of the docs folder using an explicit stack."""
        stack = [self.docs_path]
        while stack:
            path = stack.pop()
            subdirectories = []
            for item in await self._list_directory(path):
                if item.is_dir:
                    subdirectories.append(item.path)
                elif item.is_markdown_file:
                    yield item
            # Reversed so directories are visited in listing order
            stack.extend(reversed(subdirectories))

    async def _list_directory(self, path: str) -> list[RepositoryContentItem]:
        """List one directory, following ``Link: rel="next"`` pagination."""
        url: str | None = self._contents_url(path)
        params: dict | None = {"ref": self.branch}
        headers = {**self.headers, "Accept": "application/vnd.github+json"}
        items = []

        while url:
            try:
                response = await self._http.get(url, params=params, headers=headers)
                response.raise_for_status()
                payload = response.json()
                # A path that names a single file comes back as one object
                entries = payload if isinstance(payload, list) else [payload]
                page = [RepositoryContentItem.model_validate(entry) for entry in entries]
            except httpx.HTTPStatusError as e:
                raise SourceUnavailableError(
                    f"Listing '{path}' failed with HTTP {e.response.status_code}",
                    url=str(e.request.url),
                    status_code=e.response.status_code,
                ) from e
            except httpx.HTTPError as e:
                raise SourceUnavailableError(
                    f"Cannot list '{path}': {e}", url=url
                ) from e
            except ValueError as e:
                raise SourceUnavailableError(
                    f"Invalid listing for '{path}': {e}", url=url
                ) from e

            items.extend(page)

            url = response.links.get("next", {}).get("url")
            params = None

        return items

    async def _build_document(self, item: RepositoryContentItem) -> DocumentInfo:
        relative_path = self._relative_to_docs(item.path)
        try:
            raw = await self._fetch_text(self._raw_url(relative_path))
        except SourceUnavailableError as e:
            logger.debug(f"No metadata for {relative_path}, content fetch failed: {e}")
            raw = ""

        front_matter = parse_front_matter(raw)
        title = resolve_title(
            front_matter.title, extract_heading_title(raw), relative_path
        )
        return DocumentInfo(
            id=generate_document_id(relative_path),
            title=title,
            category=category_from_path(relative_path),
            relative_path=relative_path,
            tags=front_matter.tags,
        )

    # HTTP helpers

    async def _fetch_text(self, url: str) -> str:
        try:
            response = await self._http.get(url, headers=self.headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise SourceUnavailableError(
                f"Fetching {url} failed with HTTP {e.response.status_code}",
                url=url,
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise SourceUnavailableError(f"Cannot fetch {url}: {e}", url=url) from e
        return response.text

    def _relative_to_docs(self, path: str) -> str:
        prefix = f"{self.docs_path}/" if self.docs_path else ""
        if prefix and path.startswith(prefix):
            return path[len(prefix) :]
        return path

    def _raw_url(self, relative_path: str) -> str:
        parts = [self.docs_path, relative_path.replace("\\", "/").lstrip("/")]
        path = "/".join(part for part in parts if part)
        return (
            f"{self.raw_base_url}/{self.owner}/{self.repo}/{self.branch}/"
            f"{quote(path, safe='/')}"
        )

    def _contents_url(self, path: str) -> str:
        return (
            f"{self.api_base_url}/repos/{self.owner}/{self.repo}/contents/"
            f"{quote(path, safe='/')}"
        )
