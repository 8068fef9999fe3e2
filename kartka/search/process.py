import subprocess
from collections.abc import Callable
from pathlib import Path

from kartka.logging.logger import Log
from kartka.search.base import MatchCallback
from kartka.search.exceptions import SearchError
from kartka.search.models import SearchMatch, SearchResult


def run_streaming(
    cmd: list[str],
    cwd: Path,
    parse_line: Callable[[str], SearchMatch | None],
    on_match: MatchCallback | None = None,
) -> SearchResult:
    """Run a search command, parsing stdout line by line while it runs.

    stderr is inherited so the utility's own diagnostics reach the user.
    """
    Log.debug(f"Running: {' '.join(cmd)} (cwd={cwd})")
    result = SearchResult(exit_code=0)
    try:
        proc = subprocess.Popen(
            cmd,
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            text=True,
            errors="replace",
        )
    except FileNotFoundError as exc:
        raise SearchError(f"search utility not found: {cmd[0]}") from exc
    with proc:
        assert proc.stdout is not None
        for line in proc.stdout:
            match = parse_line(line)
            if match is None:
                continue
            result.matches.append(match)
            if on_match is not None:
                on_match(match)
    result.exit_code = proc.returncode
    return result
