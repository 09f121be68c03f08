"""Document-related domain models."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _lowercase_keys(data: Any) -> Any:
    """Lower-case the keys of a mapping so field names match case-insensitively."""
    if isinstance(data, dict):
        return {str(key).lower(): value for key, value in data.items()}
    return data


class DocumentInfo(BaseModel):
    """Lightweight metadata for one catalog document."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    title: str
    category: str = ""
    relative_path: str = Field(alias="relativePath")
    tags: tuple[str, ...] = Field(default_factory=tuple)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v):
        """Treat a missing or null tag list as empty."""
        if v is None:
            return ()
        return v


class IndexFileEntry(BaseModel):
    """One document entry of a prebuilt index file."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    category: str = ""
    relative_path: str = Field(alias="relativepath")
    tags: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data):
        return _lowercase_keys(data)

    @field_validator("tags", mode="before")
    @classmethod
    def validate_tags(cls, v):
        if v is None:
            return []
        return v

    def to_document(self) -> DocumentInfo:
        """Convert the entry to the catalog's document shape."""
        return DocumentInfo(
            id=self.id,
            title=self.title,
            category=self.category or "",
            relative_path=self.relative_path,
            tags=tuple(self.tags),
        )


class IndexFile(BaseModel):
    """Prebuilt ``index.json`` listing every document of a collection."""

    version: str | None = None
    generated: str | None = None
    documents: list[IndexFileEntry] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data):
        return _lowercase_keys(data)

    def to_documents(self) -> list[DocumentInfo]:
        return [entry.to_document() for entry in self.documents]


class RepositoryContentItem(BaseModel):
    """An entry returned by the GitHub contents API."""

    name: str = ""
    path: str = ""
    type: str = ""

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data):
        return _lowercase_keys(data)

    @property
    def is_dir(self) -> bool:
        return self.type.lower() == "dir"

    @property
    def is_markdown_file(self) -> bool:
        return self.type.lower() == "file" and self.name.lower().endswith(".md")


__all__ = ["DocumentInfo", "IndexFileEntry", "IndexFile", "RepositoryContentItem"]
