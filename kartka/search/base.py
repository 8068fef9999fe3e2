from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from kartka.search.models import SearchMatch, SearchResult

MatchCallback = Callable[[SearchMatch], None]


class BaseTextSearcher(ABC):
    """Contract for adapters around external text-search utilities."""

    @abstractmethod
    def search(
        self,
        query: str,
        directory: Path,
        on_match: MatchCallback | None = None,
    ) -> SearchResult:
        """Search all files under directory for query, case-insensitively.

        Args:
            query: Pattern handed to the utility unchanged.
            directory: Directory to search; used as the working directory.
            on_match: Called for every match as soon as the utility reports it.

        Returns:
            SearchResult carrying the utility's own exit status.

        Raises:
            SearchError: if the utility cannot be started.
        """
