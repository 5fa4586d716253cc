"""Path exclusion rules shared by search and the file browser.

A pattern is one of three shapes:
  - wildcard (contains ``*``): matches whole segments or runs of segments
  - path-shaped (contains ``/``): exact, prefix-with-slash or suffix-with-slash
  - plain: equal to one path segment

Plain patterns compare segments exactly, so ``.git`` hides ``.git/config``
but never ``.gitignore``.
"""

import re
from collections.abc import Iterable, Sequence
from functools import lru_cache

from kbsearch.contracts.search_v1 import RepositoryRef

_WILDCARD_META = re.compile(r"[.+?^${}()|\[\]\\]")


def _normalize(value: str) -> str:
    return value.replace("\\", "/")


@lru_cache(maxsize=512)
def _compile_wildcard(pattern: str) -> re.Pattern[str]:
    escaped = _WILDCARD_META.sub(lambda m: "\\" + m.group(0), pattern).replace("*", ".*")
    return re.compile(f"(^|/){escaped}($|/)")


def is_excluded(relative_path: str, pattern: str) -> bool:
    """Return True if ``pattern`` hides the repository-relative ``relative_path``."""
    path = _normalize(relative_path)
    normalized = _normalize(pattern).strip()
    if not normalized:
        return False

    if "*" in normalized:
        return _compile_wildcard(normalized).search(path) is not None

    if "/" in normalized:
        return (
            path == normalized
            or path.startswith(f"{normalized}/")
            or path.endswith(f"/{normalized}")
        )

    segments = [s for s in path.split("/") if s]
    return normalized in segments


def is_path_excluded(relative_path: str, patterns: Iterable[str]) -> bool:
    return any(is_excluded(relative_path, p) for p in patterns)


def resolve_exclude_patterns(
    repository: RepositoryRef, global_patterns: Sequence[str]
) -> tuple[str, ...]:
    """Effective pattern set: repository patterns when non-empty, else the global list."""
    own = [p for p in (repository.exclude_patterns or []) if p]
    if own:
        return tuple(own)
    return tuple(p for p in global_patterns if p)
