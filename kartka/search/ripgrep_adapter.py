import json
from pathlib import Path, PurePosixPath

from kartka.search.base import BaseTextSearcher, MatchCallback
from kartka.search.models import SearchMatch, SearchResult
from kartka.search.process import run_streaming


def parse_json_line(line: str) -> SearchMatch | None:
    """Turn one line of `rg --json` output into a match, ignoring other message types."""
    try:
        message = json.loads(line)
    except json.JSONDecodeError:
        return None
    if message.get("type") != "match":
        return None
    data = message.get("data", {})
    path = data.get("path", {}).get("text")
    if path is None:
        return None
    text = data.get("lines", {}).get("text", "")
    return SearchMatch(
        path=PurePosixPath(path).as_posix(),
        line_number=data.get("line_number"),
        text=text.rstrip("\r\n"),
    )


class RipgrepAdapter(BaseTextSearcher):
    """Searches with ripgrep (`rg`), reading its JSON output."""

    def __init__(self, binary: str = "rg") -> None:
        self._binary = binary

    def search(
        self,
        query: str,
        directory: Path,
        on_match: MatchCallback | None = None,
    ) -> SearchResult:
        cmd = [self._binary, "--json", "--ignore-case", "--regexp", query, "."]
        return run_streaming(cmd, directory, parse_json_line, on_match)
