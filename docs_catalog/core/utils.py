"""Helpers shared by the catalog implementations."""

from collections.abc import Iterable
from pathlib import PurePosixPath

from docs_catalog.models.documents import DocumentInfo

MARKDOWN_SUFFIX = ".md"


def _file_name(relative_path: str) -> str:
    # Accept both separators so ids agree across local and remote catalogs
    return PurePosixPath(relative_path.replace("\\", "/")).name


def file_stem(relative_path: str) -> str:
    """File name of a relative path without its extension."""
    return PurePosixPath(_file_name(relative_path)).stem


def generate_document_id(relative_path: str) -> str:
    """Derive a stable, URL-safe id from a document's relative path.

    Only the file name matters: ``adr/0001 Use_Python.md`` becomes
    ``0001-use-python``. Distinct paths may collide; lookups then resolve to
    the first document in index order.
    """
    return file_stem(relative_path).replace(" ", "-").replace("_", "-").lower()


def category_from_path(relative_path: str) -> str:
    """Directory part of a relative path, forward-slash normalized."""
    parent = PurePosixPath(relative_path.replace("\\", "/")).parent
    return "" if str(parent) == "." else str(parent)


def resolve_title(
    front_matter_title: str | None, heading_title: str | None, relative_path: str
) -> str:
    """Pick the front-matter title, then the heading, then the file name."""
    return front_matter_title or heading_title or file_stem(relative_path)


def is_markdown_name(name: str) -> bool:
    return name.lower().endswith(MARKDOWN_SUFFIX)


def sort_documents(documents: Iterable[DocumentInfo]) -> list[DocumentInfo]:
    """Order documents by category then title, case-insensitively."""
    return sorted(
        documents, key=lambda d: (d.category.casefold(), d.title.casefold())
    )


def normalize_query(query: str | None) -> str | None:
    """Trimmed, case-folded query; ``None`` for empty or whitespace input."""
    if query is None or not query.strip():
        return None
    return query.strip().casefold()


def matches_metadata(document: DocumentInfo, needle: str) -> bool:
    """Check a case-folded needle against title, id and relative path."""
    return (
        needle in document.title.casefold()
        or needle in document.id.casefold()
        or needle in document.relative_path.casefold()
    )


def filter_by_tag(documents: Iterable[DocumentInfo], tag: str | None) -> list[DocumentInfo]:
    """Documents carrying ``tag`` (case-insensitive); empty tag matches nothing."""
    needle = normalize_query(tag)
    if needle is None:
        return []
    return [d for d in documents if any(t.casefold() == needle for t in d.tags)]


def find_document(
    documents: Iterable[DocumentInfo], document_id: str
) -> DocumentInfo | None:
    """First document whose id equals ``document_id`` case-insensitively."""
    wanted = (document_id or "").casefold()
    for document in documents:
        if document.id.casefold() == wanted:
            return document
    return None


def top_level_category(document: DocumentInfo) -> str:
    """First segment of a document's category (``adr/legacy`` -> ``adr``)."""
    return document.category.split("/", 1)[0]
