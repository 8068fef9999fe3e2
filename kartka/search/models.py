from dataclasses import dataclass, field

MATCH_EXIT_CODE = 0
NO_MATCH_EXIT_CODE = 1


@dataclass(frozen=True)
class SearchMatch:
    """One matching line, with its index entry name relative to the index directory."""

    path: str
    line_number: int | None
    text: str


@dataclass
class SearchResult:
    exit_code: int
    matches: list[SearchMatch] = field(default_factory=list)

    @property
    def entry_names(self) -> list[str]:
        """Matched index entries, de-duplicated, in first-seen order."""
        return list(dict.fromkeys(match.path for match in self.matches))
