from abc import ABC, abstractmethod
from pathlib import Path


class BaseObjectStore(ABC):
    """Contract for remote storage adapters holding the original documents.

    Writes are atomic from the caller's point of view: when a call returns
    the blob or local file is complete, when it raises StorageError nothing
    usable was written.
    """

    @abstractmethod
    def upload(self, local_path: Path, key: str) -> None:
        """Upload a local file under the given remote key.

        Raises:
            StorageError: on any failure, including a post-upload size mismatch.
        """

    @abstractmethod
    def list_keys(self) -> list[str]:
        """Return the keys of all blobs in the store.

        Raises:
            StorageError: if the listing cannot be obtained.
        """

    @abstractmethod
    def download(self, key: str, local_path: Path) -> None:
        """Download the blob stored under key to local_path.

        Raises:
            StorageError: on any failure.
        """
