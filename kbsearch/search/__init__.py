"""Repository search: exclusion rules, content strategies, filename matching, merge."""

from kbsearch.search.excludes import is_excluded, is_path_excluded, resolve_exclude_patterns
from kbsearch.search.interface import ContentSearcher
from kbsearch.search.merge import merge_results
from kbsearch.search.orchestrator import SearchOrchestrator

__all__ = [
    "ContentSearcher",
    "SearchOrchestrator",
    "is_excluded",
    "is_path_excluded",
    "merge_results",
    "resolve_exclude_patterns",
]
