"""Filename matching: case-insensitive substring test on file names only."""

import asyncio
from collections.abc import Sequence

from kbsearch.contracts.search_v1 import FILE_MATCH_PREFIX, MatchResult, RepositoryRef
from kbsearch.search.cancel import StopToken
from kbsearch.search.walker import walk_files


def match_file_names(
    term: str,
    repository: RepositoryRef,
    exclude_patterns: Sequence[str],
    stop: StopToken | None = None,
) -> list[MatchResult]:
    needle = term.lower()
    results: list[MatchResult] = []
    for walked in walk_files(repository.root_path, exclude_patterns, stop):
        if needle not in walked.name.lower():
            continue
        results.append(
            MatchResult(
                repository_name=repository.name,
                repository_path=repository.root_path,
                file_path=walked.path,
                line_number=1,
                line_content=f"{FILE_MATCH_PREFIX}{walked.name}",
                match_context=walked.relative_path,
            )
        )
    return results


class FileNameMatcher:
    """Independent walk of one repository reporting files whose name contains the term."""

    async def search(
        self,
        term: str,
        repository: RepositoryRef,
        exclude_patterns: Sequence[str],
        stop: StopToken | None = None,
    ) -> list[MatchResult]:
        return await asyncio.to_thread(
            match_file_names, term, repository, exclude_patterns, stop
        )
