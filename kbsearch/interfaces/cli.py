"""Command-line interface: one-shot search and repository browsing."""

from __future__ import annotations

import json
import os

from kbsearch.contracts.search_v1 import MatchResult, SearchQuery, SearchResponse
from kbsearch.core.config import config
from kbsearch.core.errors import KBSearchError
from kbsearch.core.repositories import RepositoryRegistry
from kbsearch.search.orchestrator import SearchOrchestrator
from kbsearch.services.browser import list_children, list_repository_roots


def load_registry() -> RepositoryRegistry:
    return RepositoryRegistry.from_settings_file(
        config.settings_file, default_patterns=config.exclude_patterns
    )


def format_response(response: SearchResponse) -> str:
    """Results grouped by repository, one line per match."""
    if not response.results:
        return f"No results for {response.term!r}"
    grouped: dict[str, list[MatchResult]] = {}
    for item in response.results:
        grouped.setdefault(item.repository_name, []).append(item)
    lines: list[str] = []
    for repo_name, items in grouped.items():
        lines.append(f"{repo_name} ({len(items)})")
        for item in items:
            relative = os.path.relpath(item.file_path, item.repository_path)
            lines.append(f"  {relative}:{item.line_number}: {item.line_content}")
    return "\n".join(lines)


async def run_search(
    term: str,
    repository_path: str | None = None,
    as_json: bool = False,
    registry: RepositoryRegistry | None = None,
) -> int:
    if not (term or "").strip():
        print("Error: search term must not be empty")
        return 2
    try:
        registry = registry or load_registry()
    except KBSearchError as e:
        print(f"Error: {e}")
        return 2

    orchestrator = SearchOrchestrator.from_config(registry.snapshot)
    response = await orchestrator.search(SearchQuery(term=term, repository_path=repository_path))
    if as_json:
        print(json.dumps(response.model_dump(by_alias=True), indent=2))
    else:
        print(format_response(response))
    return 0


def run_browse(
    repository_name: str | None = None,
    subdirectory: str = "",
    registry: RepositoryRegistry | None = None,
) -> int:
    try:
        registry = registry or load_registry()
    except KBSearchError as e:
        print(f"Error: {e}")
        return 2

    snapshot = registry.snapshot()
    if not repository_name:
        for repo in list_repository_roots(snapshot):
            print(f"{repo.name}\t{repo.root_path}")
        return 0

    repository = next((r for r in snapshot.repositories if r.name == repository_name), None)
    if repository is None:
        print(f"Error: unknown repository {repository_name!r}")
        return 2
    directory = os.path.join(repository.root_path, subdirectory) if subdirectory else repository.root_path
    try:
        items = list_children(repository, directory, registry.exclude_patterns_for(repository))
    except OSError as e:
        print(f"Error: cannot list {directory}: {e}")
        return 1
    for item in items:
        suffix = "/" if item.kind == "directory" else ""
        print(f"{item.relative_path}{suffix}")
    return 0
