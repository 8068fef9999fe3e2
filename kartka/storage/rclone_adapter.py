import json
import subprocess
from pathlib import Path

from kartka.logging.logger import Log
from kartka.storage.base import BaseObjectStore
from kartka.storage.exceptions import StorageError


class RcloneAdapter(BaseObjectStore):
    """Remote storage through the rclone command line client.

    `remote` is anything rclone accepts as a destination, e.g. "dropbox:"
    or "dropbox:archive/letters".
    """

    def __init__(
        self,
        *,
        remote: str,
        binary: str = "rclone",
        timeout_seconds: int = 300,
        recursive: bool = False,
    ) -> None:
        self._remote = remote
        self._binary = binary
        self._timeout_seconds = timeout_seconds
        self._recursive = recursive

    def upload(self, local_path: Path, key: str) -> None:
        target = self._remote_path(key)
        self._run(["copyto", str(local_path), target])
        remote_size = self._remote_size(key)
        local_size = local_path.stat().st_size
        if remote_size != local_size:
            raise StorageError(
                f"upload verification failed for {key}: "
                f"remote size {remote_size}, local size {local_size}"
            )
        Log.debug(f"Uploaded {local_path} to {target} ({local_size} bytes)")

    def list_keys(self) -> list[str]:
        args = ["lsf", "--files-only"]
        if self._recursive:
            args.append("--recursive")
        output = self._run([*args, self._remote])
        return sorted(
            line.strip()
            for line in output.splitlines()
            if line.strip() and not Path(line.strip()).name.startswith(".")
        )

    def download(self, key: str, local_path: Path) -> None:
        self._run(["copyto", self._remote_path(key), str(local_path)])
        if not local_path.is_file():
            raise StorageError(f"download of {key} produced no file at {local_path}")

    def _remote_size(self, key: str) -> int | None:
        output = self._run(["lsjson", "--files-only", self._remote_path(key)])
        try:
            entries = json.loads(output or "[]")
        except json.JSONDecodeError as exc:
            raise StorageError(f"unexpected rclone lsjson output for {key}: {exc}") from exc
        if not entries:
            return None
        return int(entries[0].get("Size", -1))

    def _remote_path(self, key: str) -> str:
        if self._remote.endswith((":", "/")):
            return f"{self._remote}{key}"
        return f"{self._remote}/{key}"

    def _run(self, args: list[str]) -> str:
        cmd = [self._binary, *args]
        Log.debug(f"Running: {' '.join(cmd)}")
        try:
            completed = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self._timeout_seconds,
                check=False,
            )
        except FileNotFoundError as exc:
            raise StorageError(f"rclone binary not found: {self._binary}") from exc
        except subprocess.TimeoutExpired as exc:
            raise StorageError(
                f"rclone {args[0]} timed out after {self._timeout_seconds}s"
            ) from exc
        if completed.returncode != 0:
            raise StorageError(
                f"rclone {args[0]} failed with exit code {completed.returncode}: "
                f"{completed.stderr.strip()}"
            )
        return completed.stdout
