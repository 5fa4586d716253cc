"""Search Contract v1.

Defines the canonical types exchanged with the UI collaborator:
  - Configuration snapshot (RepositoryRef, ConfigSnapshot)
  - Search request and response (SearchQuery, MatchResult, SearchResponse)
  - Message envelopes (search, searchResults, openResult)

All models serialize with camelCase aliases (model_dump(by_alias=True)),
matching the message shapes the webview sends and expects.
"""

from __future__ import annotations

import os
from typing import Annotated, Literal, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

FILE_MATCH_PREFIX = "[File] "


class _WireModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class RepositoryRef(_WireModel):
    """One configured repository root. Identity is root_path."""

    name: str = Field(description="Display name, unique among configured repositories")
    root_path: str = Field(
        validation_alias=AliasChoices("rootPath", "path", "root_path"),
        serialization_alias="rootPath",
        description="Absolute path of the repository root",
    )
    exclude_patterns: list[str] | None = Field(
        default=None,
        description="Repository-specific exclusion patterns; when empty the global list applies",
    )

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("repository name must not be empty")
        return v.strip()

    @field_validator("root_path")
    @classmethod
    def _root_is_absolute(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("repository path must not be empty")
        if not os.path.isabs(v):
            raise ValueError(f"repository path must be absolute: {v}")
        return v


class ConfigSnapshot(_WireModel):
    """Read-only view of the configuration taken at the start of a search."""

    repositories: tuple[RepositoryRef, ...] = Field(default_factory=tuple)
    exclude_patterns: tuple[str, ...] = Field(
        default_factory=tuple, description="Global exclusion patterns"
    )

    def find(self, root_path: str) -> RepositoryRef | None:
        for repo in self.repositories:
            if repo.root_path == root_path:
                return repo
        return None


# ---------------------------------------------------------------------------
# Search request / response
# ---------------------------------------------------------------------------


class SearchQuery(_WireModel):
    term: str = Field(default="", description="Raw search term; trimmed before use")
    repository_path: str | None = Field(
        default=None, description="Restrict the search to the repository with this root"
    )


class MatchResult(_WireModel):
    """One content or filename match.

    A filename match has line_number 1 and line_content "[File] <name>".
    """

    repository_name: str
    repository_path: str
    file_path: str = Field(description="Absolute path of the matched file")
    line_number: int = Field(ge=1, description="1-based line number")
    line_content: str
    match_context: str = Field(
        default="",
        description="Matched line for content matches, root-relative path for filename matches",
    )

    @property
    def identity_key(self) -> str:
        """Deduplication key: file path, line number and line content."""
        return f"{self.file_path}:{self.line_number}:{self.line_content}"

    @property
    def is_file_name_match(self) -> bool:
        return self.line_number == 1 and self.line_content.startswith(FILE_MATCH_PREFIX)


class SearchResponse(_WireModel):
    term: str = Field(default="")
    results: list[MatchResult] = Field(
        default_factory=list,
        description="Content matches first, then filename matches not already present",
    )


# ---------------------------------------------------------------------------
# Message envelopes
# ---------------------------------------------------------------------------


class SearchRequestMessage(_WireModel):
    type: Literal["search"] = "search"
    payload: SearchQuery


class SearchResultsMessage(_WireModel):
    type: Literal["searchResults"] = "searchResults"
    payload: SearchResponse


class OpenResultMessage(_WireModel):
    type: Literal["openResult"] = "openResult"
    payload: MatchResult


IncomingMessage = Annotated[
    Union[SearchRequestMessage, OpenResultMessage],
    Field(discriminator="type"),
]

incoming_message_adapter: TypeAdapter[SearchRequestMessage | OpenResultMessage] = TypeAdapter(
    IncomingMessage
)
