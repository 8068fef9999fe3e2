from kartka.config.settings import Settings
from kartka.search.base import BaseTextSearcher
from kartka.search.grep_adapter import GrepAdapter
from kartka.search.ripgrep_adapter import RipgrepAdapter


class TextSearcherFactory:
    """Creates the configured text-search adapter."""

    ADAPTERS: dict[str, tuple[type[BaseTextSearcher], str]] = {
        "ripgrep": (RipgrepAdapter, "rg"),
        "grep": (GrepAdapter, "grep"),
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseTextSearcher:
        engine = settings.search_engine.lower()
        entry = cls.ADAPTERS.get(engine)
        if entry is None:
            raise ValueError(
                f"Unknown search engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        adapter_cls, default_binary = entry
        return adapter_cls(settings.search_binary or default_binary)  # type: ignore[call-arg]
