"""Merge content matches with filename matches, deduplicating by identity key."""

import logging
from collections.abc import Iterable

from kbsearch.contracts.search_v1 import MatchResult

logger = logging.getLogger(__name__)


def merge_results(
    content_matches: Iterable[MatchResult],
    file_name_matches: Iterable[MatchResult],
) -> list[MatchResult]:
    """Content matches in order, then filename matches whose key is not yet present.

    Content wins on key collision. The first occurrence of a key is kept, so
    nested repository roots that report the same file twice yield one entry.
    Merging the output again with either input returns the same list.
    """
    merged: list[MatchResult] = []
    seen: set[str] = set()
    dropped = 0
    for source in (content_matches, file_name_matches):
        for item in source:
            key = item.identity_key
            if key in seen:
                dropped += 1
                continue
            merged.append(item)
            seen.add(key)
    if dropped:
        logger.debug("Merge dropped %s duplicate matches", dropped)
    return merged
