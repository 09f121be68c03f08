"""
Unit tests for catalog helper functions.
"""

import threading

import pytest

from docs_catalog.core.lazy import LazyValue
from docs_catalog.core.utils import (
    category_from_path,
    filter_by_tag,
    find_document,
    generate_document_id,
    matches_metadata,
    normalize_query,
    resolve_title,
    sort_documents,
    top_level_category,
)
from docs_catalog.models.documents import DocumentInfo


def make_document(id, title, category="", tags=()):
    return DocumentInfo(
        id=id,
        title=title,
        category=category,
        relative_path=f"{category}/{id}.md" if category else f"{id}.md",
        tags=tags,
    )


class TestGenerateDocumentId:
    """Test id derivation from relative paths."""

    def test_lowercases_and_hyphenates(self):
        """Test spaces and underscores become hyphens."""
        assert generate_document_id("adr/0001 Use_Python.md") == "0001-use-python"

    def test_only_file_name_matters(self):
        """Test the directory does not contribute to the id."""
        assert generate_document_id("a/b/Doc.md") == "doc"
        assert generate_document_id("Doc.md") == "doc"

    def test_windows_separators(self):
        """Test backslash paths give the same id as forward-slash paths."""
        assert generate_document_id("adr\\Some_Doc.md") == generate_document_id(
            "adr/Some_Doc.md"
        )

    def test_is_deterministic(self):
        """Test repeated calls agree."""
        path = "recommendations/Unit Testing.md"
        assert generate_document_id(path) == generate_document_id(path)


class TestPathHelpers:
    """Test category and title helpers."""

    def test_category_from_nested_path(self):
        assert category_from_path("adr/legacy/doc.md") == "adr/legacy"

    def test_category_at_root(self):
        assert category_from_path("doc.md") == ""

    def test_category_normalizes_backslashes(self):
        assert category_from_path("adr\\legacy\\doc.md") == "adr/legacy"

    def test_title_chain(self):
        """Test front matter beats heading beats file name."""
        assert resolve_title("Custom", "Heading One", "a/x.md") == "Custom"
        assert resolve_title(None, "Heading One", "a/x.md") == "Heading One"
        assert resolve_title(None, None, "a/my_doc-name.md") == "my_doc-name"


class TestOrderingAndMatching:
    """Test sorting, searching and tag filtering helpers."""

    def test_sort_is_case_insensitive(self):
        """Test category then title ordering ignores case."""
        documents = [
            make_document("c", "zeta", "B"),
            make_document("b", "Beta", "a"),
            make_document("a", "alpha", "a"),
        ]
        result = sort_documents(documents)

        assert [d.id for d in result] == ["a", "b", "c"]

    def test_normalize_query(self):
        """Test blank queries normalize to None."""
        assert normalize_query(None) is None
        assert normalize_query("") is None
        assert normalize_query("   ") is None
        assert normalize_query("  Foo ") == "foo"

    def test_matches_metadata(self):
        """Test title, id and path are all searched."""
        document = make_document("0001-adopt", "Adopt Framework", "adr")

        assert matches_metadata(document, "framework")
        assert matches_metadata(document, "0001")
        assert matches_metadata(document, "adr/")
        assert not matches_metadata(document, "missing")

    def test_filter_by_tag(self):
        """Test tag matching is exact and case-insensitive."""
        documents = [
            make_document("a", "A", tags=("Python", "adr")),
            make_document("b", "B", tags=("pythonic",)),
        ]

        assert [d.id for d in filter_by_tag(documents, "python")] == ["a"]
        assert filter_by_tag(documents, "  ") == []

    def test_find_document_first_match_wins(self):
        """Test colliding ids resolve to the first document in order."""
        first = make_document("dup", "First", "a")
        second = make_document("dup", "Second", "b")

        assert find_document([first, second], "DUP") is first
        assert find_document([first, second], "other") is None

    def test_top_level_category(self):
        assert top_level_category(make_document("x", "X", "adr/legacy")) == "adr"
        assert top_level_category(make_document("x", "X")) == ""


class TestLazyValue:
    """Test the compute-once cell."""

    def test_computes_once(self):
        """Test the factory runs on first access only."""
        calls = []
        cell = LazyValue(lambda: calls.append(1) or len(calls))

        assert not cell.is_computed
        assert cell.value == 1
        assert cell.value == 1
        assert calls == [1]
        assert cell.is_computed

    def test_failed_factory_retries(self):
        """Test an exception leaves the cell empty."""
        attempts = []

        def factory():
            attempts.append(1)
            if len(attempts) == 1:
                raise RuntimeError("first call fails")
            return "ok"

        cell = LazyValue(factory)
        with pytest.raises(RuntimeError):
            cell.value

        assert cell.value == "ok"

    def test_concurrent_first_access(self):
        """Test racing threads share one computation."""
        calls = []
        barrier = threading.Barrier(4)

        def factory():
            calls.append(1)
            return object()

        cell = LazyValue(factory)
        results = []

        def worker():
            barrier.wait()
            results.append(cell.value)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(calls) == 1
        assert all(result is results[0] for result in results)
