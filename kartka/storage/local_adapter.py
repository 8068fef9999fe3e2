import os
import shutil
import tempfile
from pathlib import Path

from kartka.storage.base import BaseObjectStore
from kartka.storage.exceptions import StorageError


def _copy_atomic(source: Path, target: Path) -> None:
    """Copy into a hidden sibling temp file, then rename into place."""
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".part", dir=target.parent)
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        shutil.copyfile(source, tmp_path)
        os.replace(tmp_path, target)
    finally:
        tmp_path.unlink(missing_ok=True)


class LocalDirectoryAdapter(BaseObjectStore):
    """Uses a local directory as the bucket, e.g. a folder synced by a desktop client."""

    def __init__(self, root: Path, *, recursive: bool = False) -> None:
        self._root = root
        self._recursive = recursive

    def upload(self, local_path: Path, key: str) -> None:
        try:
            _copy_atomic(local_path, self._resolve(key))
        except OSError as exc:
            raise StorageError(f"upload of {local_path} to {key} failed: {exc}") from exc

    def list_keys(self) -> list[str]:
        if not self._root.is_dir():
            raise StorageError(f"storage directory does not exist: {self._root}")
        pattern = "**/*" if self._recursive else "*"
        try:
            return sorted(
                path.relative_to(self._root).as_posix()
                for path in self._root.glob(pattern)
                if path.is_file() and not path.name.startswith(".")
            )
        except OSError as exc:
            raise StorageError(f"listing {self._root} failed: {exc}") from exc

    def download(self, key: str, local_path: Path) -> None:
        source = self._resolve(key)
        if not source.is_file():
            raise StorageError(f"blob not found: {key}")
        try:
            _copy_atomic(source, local_path)
        except OSError as exc:
            raise StorageError(f"download of {key} failed: {exc}") from exc

    def _resolve(self, key: str) -> Path:
        path = (self._root / key).resolve()
        if not path.is_relative_to(self._root.resolve()):
            raise StorageError(f"key escapes storage directory: {key}")
        return path
