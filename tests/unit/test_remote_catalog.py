"""
Unit tests for the GitHub document catalog.

GitHub is replaced by an in-memory repository served through
``httpx.MockTransport``.
"""

import asyncio
import json

import httpx
import pytest

from docs_catalog.core.cache import MemoryIndexCache
from docs_catalog.core.catalog import DocumentCatalog
from docs_catalog.core.exceptions import DocumentNotFoundError, SourceUnavailableError
from docs_catalog.core.remote import USER_AGENT, GitHubDocumentCatalog

OWNER = "octo"
REPO = "guides"
BRANCH = "main"

RAW_PREFIX = f"/{OWNER}/{REPO}/{BRANCH}/"
API_PREFIX = f"/repos/{OWNER}/{REPO}/contents/"

INDEX_JSON = json.dumps(
    {
        "version": "1.0",
        "generated": "2025-11-19T00:00:00Z",
        "documents": [
            {
                "id": "zeta",
                "title": "Zeta",
                "category": "b",
                "relativePath": "b/zeta.md",
            },
            {
                "ID": "alpha",
                "Title": "Alpha",
                "Category": "a",
                "RELATIVEPATH": "a/alpha.md",
                "Tags": ["x", "y"],
            },
        ],
    }
)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class FakeGitHub:
    """Serves a repository's contents listing and raw files."""

    def __init__(self, files: dict[str, str], index: str | None = None):
        self.files = files
        self.index = index
        self.index_error = False
        self.listing_status = 200
        self.listing_payload: list | None = None
        self.broken_files: set[str] = set()
        self.page_size: int | None = None
        self.requests: list[httpx.Request] = []

    def count(self, host: str, path: str | None = None) -> int:
        return sum(
            1
            for request in self.requests
            if request.url.host == host and (path is None or request.url.path == path)
        )

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "raw.githubusercontent.com":
            return self._raw(request)
        if request.url.host == "api.github.com":
            return self._listing(request)
        return httpx.Response(404)

    def _raw(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path[len(RAW_PREFIX) :]
        if path == "docs/index.json":
            if self.index_error:
                raise httpx.ConnectError("index host unreachable", request=request)
            if self.index is None:
                return httpx.Response(404, text="404: Not Found")
            return httpx.Response(200, text=self.index)
        if path in self.broken_files:
            return httpx.Response(500)
        if path in self.files:
            return httpx.Response(200, text=self.files[path])
        return httpx.Response(404, text="404: Not Found")

    def _children(self, directory: str) -> list[dict]:
        entries: dict[str, dict] = {}
        for path in self.files:
            if not path.startswith(directory + "/"):
                continue
            rest = path[len(directory) + 1 :]
            name, _, remainder = rest.partition("/")
            child_path = f"{directory}/{name}"
            entries[name] = {
                "name": name,
                "path": child_path,
                "type": "dir" if remainder else "file",
            }
        return list(entries.values())

    def _listing(self, request: httpx.Request) -> httpx.Response:
        if self.listing_status != 200:
            return httpx.Response(self.listing_status, json={"message": "unavailable"})
        if self.listing_payload is not None:
            return httpx.Response(200, json=self.listing_payload)

        directory = request.url.path[len(API_PREFIX) :]
        entries = self._children(directory)
        if not entries:
            return httpx.Response(404, json={"message": "Not Found"})

        if self.page_size is None:
            return httpx.Response(200, json=entries)

        page = int(request.url.params.get("page", "1"))
        start = (page - 1) * self.page_size
        chunk = entries[start : start + self.page_size]
        headers = {}
        if start + self.page_size < len(entries):
            next_url = request.url.copy_set_param("page", str(page + 1))
            headers["Link"] = f'<{next_url}>; rel="next"'
        return httpx.Response(200, json=chunk, headers=headers)


FILES = {
    "docs/a/doc1.md": "# First Doc\nhello",
    "docs/b/doc2.md": '---\ntitle: "Second"\ntags:\n  - x\n  - y\n---\nbody',
    "docs/b/nested/Third_Doc.md": "no heading",
    "docs/readme.txt": "not markdown",
}


def make_catalog(fake: FakeGitHub, cache=None, token: str | None = "") -> GitHubDocumentCatalog:
    client = httpx.AsyncClient(transport=httpx.MockTransport(fake.handler))
    return GitHubDocumentCatalog(
        owner=OWNER,
        repo=REPO,
        branch=BRANCH,
        cache=cache if cache is not None else MemoryIndexCache(),
        http_client=client,
        token=token,
    )


class TestIndexFile:
    """Test the prebuilt index fast path."""

    @pytest.mark.asyncio
    async def test_loads_index_file(self):
        """Test index.json is used directly, sorted, without traversal."""
        fake = FakeGitHub(FILES, index=INDEX_JSON)
        catalog = make_catalog(fake)

        documents = await catalog.list_documents()

        assert [d.id for d in documents] == ["alpha", "zeta"]
        assert documents[0].tags == ("x", "y")
        assert documents[1].tags == ()
        assert fake.count("api.github.com") == 0
        assert fake.count("raw.githubusercontent.com") == 1

    def test_satisfies_catalog_protocol(self):
        assert isinstance(make_catalog(FakeGitHub(FILES)), DocumentCatalog)

    @pytest.mark.asyncio
    async def test_cached_within_window(self):
        """Test a second listing within the window reuses the cached index."""
        fake = FakeGitHub(FILES, index=INDEX_JSON)
        clock = FakeClock()
        catalog = make_catalog(fake, cache=MemoryIndexCache(clock=clock))

        first = await catalog.list_documents()
        clock.now += 599
        second = await catalog.list_documents()

        assert second is first
        assert fake.count("raw.githubusercontent.com", RAW_PREFIX + "docs/index.json") == 1

    @pytest.mark.asyncio
    async def test_refetched_after_window(self):
        """Test an idle window expiry triggers a fresh index fetch."""
        fake = FakeGitHub(FILES, index=INDEX_JSON)
        clock = FakeClock()
        catalog = make_catalog(fake, cache=MemoryIndexCache(clock=clock))

        await catalog.list_documents()
        clock.now += 600
        await catalog.list_documents()

        assert fake.count("raw.githubusercontent.com", RAW_PREFIX + "docs/index.json") == 2

    @pytest.mark.asyncio
    async def test_concurrent_first_access_builds_once(self):
        """Test racing first calls share one index fetch."""
        fake = FakeGitHub(FILES, index=INDEX_JSON)
        catalog = make_catalog(fake)

        first, second = await asyncio.gather(
            catalog.list_documents(), catalog.list_documents()
        )

        assert first is second
        assert fake.count("raw.githubusercontent.com") == 1


class TestTraversalFallback:
    """Test directory traversal when the index file is unusable."""

    @pytest.mark.asyncio
    async def test_missing_index_uses_traversal(self):
        """Test a 404 index falls back to walking the contents API."""
        fake = FakeGitHub(FILES)
        catalog = make_catalog(fake)

        documents = await catalog.list_documents()

        assert [(d.id, d.category, d.title) for d in documents] == [
            ("doc1", "a", "First Doc"),
            ("doc2", "b", "Second"),
            ("third-doc", "b/nested", "Third_Doc"),
        ]
        assert documents[1].tags == ("x", "y")
        assert documents[2].relative_path == "b/nested/Third_Doc.md"

    @pytest.mark.asyncio
    async def test_transport_error_on_index_uses_traversal(self):
        """Test a network failure on the index file is swallowed."""
        fake = FakeGitHub(FILES, index=INDEX_JSON)
        fake.index_error = True
        catalog = make_catalog(fake)

        documents = await catalog.list_documents()

        assert [d.id for d in documents] == ["doc1", "doc2", "third-doc"]

    @pytest.mark.asyncio
    async def test_invalid_or_empty_index_uses_traversal(self):
        """Test unparsable and empty index files are ignored."""
        for index in ("{broken", "", json.dumps({"version": "1", "documents": []})):
            fake = FakeGitHub(FILES, index=index)
            catalog = make_catalog(fake)

            documents = await catalog.list_documents()

            assert [d.id for d in documents] == ["doc1", "doc2", "third-doc"]

    @pytest.mark.asyncio
    async def test_traversal_result_is_cached(self):
        """Test a traversed index is not rebuilt on the next call."""
        fake = FakeGitHub(FILES)
        catalog = make_catalog(fake)

        await catalog.list_documents()
        requests_after_first = len(fake.requests)
        await catalog.search("doc")

        assert len(fake.requests) == requests_after_first

    @pytest.mark.asyncio
    async def test_follows_pagination(self):
        """Test listing pages are followed through the Link header."""
        files = {f"docs/doc{number}.md": f"# Doc {number}" for number in range(5)}
        fake = FakeGitHub(files)
        fake.page_size = 2
        catalog = make_catalog(fake)

        documents = await catalog.list_documents()

        assert [d.id for d in documents] == [f"doc{number}" for number in range(5)]
        assert fake.count("api.github.com") == 3

    @pytest.mark.asyncio
    async def test_failed_file_fetch_degrades(self):
        """Test a file whose content cannot be fetched keeps its file-name title."""
        fake = FakeGitHub(FILES)
        fake.broken_files.add("docs/b/doc2.md")
        catalog = make_catalog(fake)

        documents = await catalog.list_documents()
        doc2 = next(d for d in documents if d.id == "doc2")

        assert doc2.title == "doc2"
        assert doc2.tags == ()

    @pytest.mark.asyncio
    async def test_listing_failure_propagates(self):
        """Test a failing listing surfaces as SourceUnavailableError."""
        fake = FakeGitHub(FILES)
        fake.listing_status = 503
        catalog = make_catalog(fake)

        with pytest.raises(SourceUnavailableError) as exc_info:
            await catalog.list_documents()
        assert exc_info.value.status_code == 503

        with pytest.raises(SourceUnavailableError):
            await catalog.search_by_tag("x")

    @pytest.mark.asyncio
    async def test_malformed_listing_entry(self):
        """Test a listing entry that is not an object is a source failure."""
        fake = FakeGitHub(FILES)
        fake.listing_payload = ["doc1.md"]
        catalog = make_catalog(fake)

        with pytest.raises(SourceUnavailableError) as exc_info:
            await catalog.list_documents()

        assert "Invalid listing" in exc_info.value.message


class TestRemoteOperations:
    """Test search, tag search and content retrieval."""

    @pytest.mark.asyncio
    async def test_search_matches_metadata_only(self):
        """Test search ignores document bodies."""
        fake = FakeGitHub(FILES)
        catalog = make_catalog(fake)

        assert [d.id for d in await catalog.search("SECOND")] == ["doc2"]
        assert [d.id for d in await catalog.search("nested")] == ["third-doc"]
        assert await catalog.search("hello") == []

    @pytest.mark.asyncio
    async def test_blank_queries(self):
        """Test blank queries return nothing without touching the network."""
        fake = FakeGitHub(FILES)
        catalog = make_catalog(fake)

        assert await catalog.search("") == []
        assert await catalog.search("  ") == []
        assert await catalog.search(None) == []
        assert await catalog.search_by_tag(" ") == []
        assert fake.requests == []

    @pytest.mark.asyncio
    async def test_search_by_tag(self):
        fake = FakeGitHub(FILES)
        catalog = make_catalog(fake)

        assert [d.id for d in await catalog.search_by_tag("Y")] == ["doc2"]

    @pytest.mark.asyncio
    async def test_get_content_is_never_cached(self):
        """Test every content request goes to the raw host."""
        fake = FakeGitHub(FILES, index=INDEX_JSON)
        fake.files["docs/a/alpha.md"] = "# Alpha"
        catalog = make_catalog(fake)

        assert await catalog.get_content("ALPHA") == "# Alpha"
        assert await catalog.get_content("alpha") == "# Alpha"
        assert fake.count("raw.githubusercontent.com", RAW_PREFIX + "docs/a/alpha.md") == 2

    @pytest.mark.asyncio
    async def test_get_content_unknown_id(self):
        """Test unknown ids raise DocumentNotFoundError."""
        fake = FakeGitHub(FILES)
        catalog = make_catalog(fake)

        with pytest.raises(DocumentNotFoundError):
            await catalog.get_content("nonexistent-id")

    @pytest.mark.asyncio
    async def test_get_content_transport_failure(self):
        """Test a failed content fetch is distinct from NotFound."""
        fake = FakeGitHub(FILES, index=INDEX_JSON)
        catalog = make_catalog(fake)

        with pytest.raises(SourceUnavailableError) as exc_info:
            await catalog.get_content("zeta")
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_every_listed_document_has_content(self):
        fake = FakeGitHub(FILES)
        catalog = make_catalog(fake)

        for document in await catalog.list_documents():
            assert await catalog.get_content(document.id)


class TestRequestHeaders:
    """Test authentication and user agent headers."""

    @pytest.mark.asyncio
    async def test_token_from_environment(self, monkeypatch):
        """Test GITHUB_TOKEN is sent as a bearer token."""
        monkeypatch.setenv("GITHUB_TOKEN", "secret-token")
        fake = FakeGitHub(FILES, index=INDEX_JSON)
        catalog = make_catalog(fake, token=None)

        await catalog.list_documents()

        request = fake.requests[0]
        assert request.headers["Authorization"] == "Bearer secret-token"
        assert request.headers["User-Agent"] == USER_AGENT

    @pytest.mark.asyncio
    async def test_no_token(self, monkeypatch):
        """Test no Authorization header without a token."""
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        fake = FakeGitHub(FILES)
        catalog = make_catalog(fake, token=None)

        await catalog.list_documents()

        assert all("Authorization" not in r.headers for r in fake.requests)
        assert all(r.headers["User-Agent"] == USER_AGENT for r in fake.requests)

    @pytest.mark.asyncio
    async def test_listing_uses_branch(self):
        fake = FakeGitHub(FILES)
        catalog = make_catalog(fake)

        await catalog.list_documents()

        listing = [r for r in fake.requests if r.url.host == "api.github.com"]
        assert all(r.url.params["ref"] == BRANCH for r in listing)

    @pytest.mark.asyncio
    async def test_cache_key_includes_branch(self):
        catalog = make_catalog(FakeGitHub(FILES))

        assert catalog.cache_key == f"docs-index:{OWNER}/{REPO}@{BRANCH}"
