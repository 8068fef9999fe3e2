from urllib.parse import quote

from kartka.config.settings import Settings
from kartka.logging.logger import Log
from kartka.processor.index_directory import IndexDirectory
from kartka.processor.naming import remote_key_from_entry
from kartka.search.base import BaseTextSearcher, MatchCallback
from kartka.search.factory import TextSearcherFactory
from kartka.search.models import NO_MATCH_EXIT_CODE, SearchResult


class SearchDispatcher:
    """Hands a query to the external search utility, scoped to the index directory."""

    def __init__(
        self,
        searcher: BaseTextSearcher,
        index: IndexDirectory,
        preview_url_template: str | None = None,
    ) -> None:
        self._searcher = searcher
        self._index = index
        self._preview_url_template = preview_url_template

    def search(self, query: str, on_match: MatchCallback | None = None) -> SearchResult:
        """Empty queries and empty indexes short-circuit to a no-match result."""
        if not query.strip():
            Log.info("Empty query, nothing to search")
            return SearchResult(exit_code=NO_MATCH_EXIT_CODE)
        if not self._index.entry_names():
            Log.info(f"Index directory {self._index.path} has no entries")
            return SearchResult(exit_code=NO_MATCH_EXIT_CODE)
        return self._searcher.search(query, self._index.path, on_match)

    def preview_links(self, result: SearchResult) -> list[str]:
        """One preview URL per matched document, built from preview_url_template."""
        if not self._preview_url_template:
            raise ValueError("preview_url_template is not configured")
        links = []
        for entry_name in result.entry_names:
            try:
                key = remote_key_from_entry(entry_name)
            except ValueError:
                Log.debug(f"Ignoring match in non-entry file {entry_name}")
                continue
            links.append(self._preview_url_template.format(key=quote(key)))
        return links


def build_search_dispatcher(settings: Settings) -> SearchDispatcher:
    return SearchDispatcher(
        TextSearcherFactory.create(settings),
        IndexDirectory(settings.index_dir),
        preview_url_template=settings.preview_url_template,
    )
