from pathlib import Path, PurePosixPath

from kartka.search.base import BaseTextSearcher, MatchCallback
from kartka.search.models import SearchMatch, SearchResult
from kartka.search.process import run_streaming


def parse_null_separated_line(line: str) -> SearchMatch | None:
    """Parse `grep -nZ` output: `<path>\\0<line number>:<text>`."""
    path, sep, rest = line.partition("\0")
    if not sep:
        return None
    number, sep, text = rest.partition(":")
    if not sep or not number.isdigit():
        return None
    return SearchMatch(
        path=PurePosixPath(path).as_posix(),
        line_number=int(number),
        text=text.rstrip("\r\n"),
    )


class GrepAdapter(BaseTextSearcher):
    """Searches with GNU grep, for machines without ripgrep."""

    def __init__(self, binary: str = "grep") -> None:
        self._binary = binary

    def search(
        self,
        query: str,
        directory: Path,
        on_match: MatchCallback | None = None,
    ) -> SearchResult:
        # no path operand: with --recursive grep searches the working directory
        cmd = [
            self._binary,
            "--recursive",
            "--ignore-case",
            "--line-number",
            "--with-filename",
            "--null",
            "--binary-files=without-match",
            "--exclude=.*",
            "--regexp",
            query,
        ]
        return run_streaming(cmd, directory, parse_null_separated_line, on_match)
