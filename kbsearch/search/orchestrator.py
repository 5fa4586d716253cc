"""Search orchestrator: target selection, strategy selection, parallel scan, merge.

Pipeline:
  1. Trim the term (empty -> empty response, no I/O)
  2. Snapshot configuration and pick target repositories
  3. Pick one content strategy for the whole query (ripgrep or fallback)
  4. Run filename matching and content search per repository, bounded
  5. Merge content matches with filename matches in configuration order
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence

from kbsearch.contracts.search_v1 import (
    ConfigSnapshot,
    MatchResult,
    RepositoryRef,
    SearchQuery,
    SearchResponse,
)
from kbsearch.core.config import Config, config
from kbsearch.core.logger import logger
from kbsearch.search.backends.fallback import FallbackScanner
from kbsearch.search.backends.ripgrep import RipgrepSearcher
from kbsearch.search.cancel import StopToken
from kbsearch.search.constants import StopReason
from kbsearch.search.excludes import resolve_exclude_patterns
from kbsearch.search.filenames import FileNameMatcher
from kbsearch.search.interface import ContentSearcher
from kbsearch.search.merge import merge_results

SnapshotProvider = Callable[[], ConfigSnapshot]
RepositorySearch = Callable[..., Awaitable[list[MatchResult]]]


def select_targets(snapshot: ConfigSnapshot, repository_path: str | None) -> list[RepositoryRef]:
    """All repositories in configuration order, or the single one rooted at repository_path."""
    if not repository_path:
        return list(snapshot.repositories)
    return [r for r in snapshot.repositories if r.root_path == repository_path]


class SearchOrchestrator:
    """One-shot, full-rescan search across the configured repositories."""

    def __init__(
        self,
        snapshot_provider: SnapshotProvider,
        external: ContentSearcher,
        fallback: ContentSearcher | None = None,
        file_names: FileNameMatcher | None = None,
        max_concurrency: int = 4,
        timeout_seconds: float | None = None,
    ):
        self._snapshot_provider = snapshot_provider
        self._external = external
        self._fallback = fallback or FallbackScanner()
        self._file_names = file_names or FileNameMatcher()
        self._max_concurrency = max(1, max_concurrency)
        # Zero or negative means no deadline.
        self._timeout_seconds = timeout_seconds if timeout_seconds and timeout_seconds > 0 else None

    @classmethod
    def from_config(
        cls, snapshot_provider: SnapshotProvider, cfg: Config = config
    ) -> "SearchOrchestrator":
        return cls(
            snapshot_provider=snapshot_provider,
            external=RipgrepSearcher.from_config(cfg),
            max_concurrency=cfg.max_concurrency,
            timeout_seconds=cfg.search_timeout_seconds,
        )

    def select_content_searcher(self) -> ContentSearcher:
        if self._external.is_available():
            return self._external
        return self._fallback

    async def _run_per_repository(
        self,
        search_fn: RepositorySearch,
        term: str,
        targets: Sequence[RepositoryRef],
        pattern_sets: Sequence[tuple[str, ...]],
        stop: StopToken,
        semaphore: asyncio.Semaphore,
    ) -> list[MatchResult]:
        """Run search_fn for every target; results concatenated in target order."""

        async def _one(repository: RepositoryRef, patterns: tuple[str, ...]) -> list[MatchResult]:
            async with semaphore:
                return await search_fn(term, repository, patterns, stop)

        outcomes = await asyncio.gather(
            *(_one(r, p) for r, p in zip(targets, pattern_sets)),
            return_exceptions=True,
        )
        combined: list[MatchResult] = []
        for repository, outcome in zip(targets, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(
                    f"Search failed for repository {repository.name}", exception=outcome
                )
                continue
            combined.extend(outcome)
        return combined

    async def search(self, query: SearchQuery) -> SearchResponse:
        term = query.term.strip()
        if not term:
            return SearchResponse(term="", results=[])

        snapshot = self._snapshot_provider()
        targets = select_targets(snapshot, query.repository_path)
        if not targets:
            return SearchResponse(term=term, results=[])

        pattern_sets = [resolve_exclude_patterns(r, snapshot.exclude_patterns) for r in targets]
        content_searcher = self.select_content_searcher()
        started = logger.search_started(term, [r.name for r in targets])
        logger.strategy_selected(content_searcher.get_strategy())

        stop = StopToken(self._timeout_seconds)
        semaphore = asyncio.Semaphore(self._max_concurrency)
        try:
            file_name_matches, content_matches = await asyncio.gather(
                self._run_per_repository(
                    self._file_names.search, term, targets, pattern_sets, stop, semaphore
                ),
                self._run_per_repository(
                    content_searcher.search, term, targets, pattern_sets, stop, semaphore
                ),
            )
        except asyncio.CancelledError:
            stop.cancel(StopReason.CANCELLED)
            raise

        if stop.reason == StopReason.TIMEOUT:
            logger.warning(
                f"Search for {term!r} hit the {self._timeout_seconds}s limit; results are partial"
            )

        results = merge_results(content_matches, file_name_matches)
        logger.search_finished(
            term, len(content_matches), len(file_name_matches), len(results), started=started
        )
        return SearchResponse(term=term, results=results)
