"""Pure-Python content search: walk the repository and test every line."""

import asyncio
import logging
import os
import re
from collections.abc import Sequence

from kbsearch.contracts.search_v1 import MatchResult, RepositoryRef
from kbsearch.search.cancel import StopToken
from kbsearch.search.constants import BINARY_EXTENSIONS, ContentStrategy
from kbsearch.search.interface import ContentSearcher
from kbsearch.search.walker import walk_files

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"\r?\n")


def is_likely_text_file(path: str) -> bool:
    return os.path.splitext(path)[1].lower() not in BINARY_EXTENSIONS


def read_text(path: str) -> str | None:
    """Strict UTF-8 read, dropping a leading BOM; None for unreadable or non-text files."""
    try:
        with open(path, encoding="utf-8-sig", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return None


def scan_repository(
    term: str,
    repository: RepositoryRef,
    exclude_patterns: Sequence[str],
    stop: StopToken | None = None,
) -> list[MatchResult]:
    """Blocking scan of one repository. Runs in a worker thread."""
    regex = re.compile(re.escape(term), re.IGNORECASE)
    results: list[MatchResult] = []
    for walked in walk_files(repository.root_path, exclude_patterns, stop):
        if not is_likely_text_file(walked.name):
            continue
        content = read_text(walked.path)
        if content is None:
            continue
        for index, line in enumerate(_LINE_SPLIT.split(content)):
            if not regex.search(line):
                continue
            stripped = line.strip()
            results.append(
                MatchResult(
                    repository_name=repository.name,
                    repository_path=repository.root_path,
                    file_path=walked.path,
                    line_number=index + 1,
                    line_content=stripped,
                    match_context=stripped,
                )
            )
    return results


class FallbackScanner(ContentSearcher):
    """Always available; used for the whole query when ripgrep is missing."""

    def get_strategy(self) -> ContentStrategy:
        return ContentStrategy.FALLBACK

    def is_available(self) -> bool:
        return True

    async def search(
        self,
        term: str,
        repository: RepositoryRef,
        exclude_patterns: Sequence[str],
        stop: StopToken | None = None,
    ) -> list[MatchResult]:
        return await asyncio.to_thread(
            scan_repository, term, repository, exclude_patterns, stop
        )
