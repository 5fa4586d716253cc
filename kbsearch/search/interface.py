"""Standard interface for content searchers used by the orchestrator.

Exactly two implementations exist: ripgrep (external tool) and the fallback
scanner. The orchestrator picks one per query and never mixes them.
"""

from abc import ABC, abstractmethod
from collections.abc import Sequence

from kbsearch.contracts.search_v1 import MatchResult, RepositoryRef
from kbsearch.search.cancel import StopToken
from kbsearch.search.constants import ContentStrategy


class ContentSearcher(ABC):
    """Base class for content search strategies."""

    @abstractmethod
    def get_strategy(self) -> ContentStrategy:
        """Strategy identifier, used for logging."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether this strategy can run on this host."""

    @abstractmethod
    async def search(
        self,
        term: str,
        repository: RepositoryRef,
        exclude_patterns: Sequence[str],
        stop: StopToken | None = None,
    ) -> list[MatchResult]:
        """Search file contents of one repository.

        Must not raise for I/O or tool failures; those yield fewer (or no) results.
        """
