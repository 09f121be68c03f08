"""Exceptions raised by document catalogs."""


class CatalogError(Exception):
    """Base class for catalog failures."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DocumentNotFoundError(CatalogError, LookupError):
    """Raised when no document in the current index has the requested id."""

    def __init__(self, document_id: str, source: str = "catalog"):
        self.document_id = document_id
        super().__init__(f"Document '{document_id}' not found in {source}")


class SourceUnavailableError(CatalogError):
    """Raised when the remote document source cannot be read."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ):
        self.url = url
        self.status_code = status_code
        super().__init__(message)
