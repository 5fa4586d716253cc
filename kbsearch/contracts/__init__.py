from kbsearch.contracts.search_v1 import (
    FILE_MATCH_PREFIX,
    ConfigSnapshot,
    MatchResult,
    OpenResultMessage,
    RepositoryRef,
    SearchQuery,
    SearchRequestMessage,
    SearchResponse,
    SearchResultsMessage,
)

__all__ = [
    "FILE_MATCH_PREFIX",
    "ConfigSnapshot",
    "MatchResult",
    "OpenResultMessage",
    "RepositoryRef",
    "SearchQuery",
    "SearchRequestMessage",
    "SearchResponse",
    "SearchResultsMessage",
]
