import os
import tempfile
from pathlib import Path

from kartka.processor.exceptions import IndexWriteError
from kartka.processor.naming import INDEX_ENTRY_SUFFIX, is_hidden


class IndexDirectory:
    """Flat directory of plain-text index entries.

    Entries are written through a hidden temp file and renamed into place,
    so a reader never sees a partial entry.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def ensure_writable(self) -> None:
        """Raises IndexWriteError unless entries can be created in the directory."""
        if not self._path.is_dir():
            raise IndexWriteError(f"index directory does not exist: {self._path}")
        if not os.access(self._path, os.W_OK | os.X_OK):
            raise IndexWriteError(f"index directory is not writable: {self._path}")

    def entry_path(self, name: str) -> Path:
        return self._path / name

    def has_entry(self, name: str) -> bool:
        return self.entry_path(name).is_file()

    def entry_names(self) -> list[str]:
        try:
            return sorted(
                path.name
                for path in self._path.iterdir()
                if path.is_file()
                and path.name.endswith(INDEX_ENTRY_SUFFIX)
                and not is_hidden(path.name)
            )
        except OSError as exc:
            raise IndexWriteError(f"cannot list index directory {self._path}: {exc}") from exc

    def write_entry(self, name: str, text: str) -> Path:
        target = self.entry_path(name)
        tmp_path: Path | None = None
        try:
            fd, tmp_name = tempfile.mkstemp(prefix=f".{name}.", suffix=".tmp", dir=self._path)
            tmp_path = Path(tmp_name)
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_path, target)
        except OSError as exc:
            raise IndexWriteError(f"could not write index entry {target}: {exc}") from exc
        finally:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
        return target

    def read_entry(self, name: str) -> str:
        return self.entry_path(name).read_text(encoding="utf-8")

    def remove_entry(self, name: str) -> None:
        try:
            self.entry_path(name).unlink(missing_ok=True)
        except OSError as exc:
            raise IndexWriteError(f"could not remove index entry {name}: {exc}") from exc
