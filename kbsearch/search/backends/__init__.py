"""Content search strategies: ripgrep and the pure-Python fallback scanner."""

from kbsearch.search.backends.fallback import FallbackScanner
from kbsearch.search.backends.ripgrep import RipgrepSearcher

__all__ = ["FallbackScanner", "RipgrepSearcher"]
