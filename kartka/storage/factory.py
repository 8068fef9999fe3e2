from kartka.config.settings import Settings
from kartka.storage.base import BaseObjectStore
from kartka.storage.local_adapter import LocalDirectoryAdapter
from kartka.storage.rclone_adapter import RcloneAdapter
from kartka.storage.s3_adapter import S3Adapter


class ObjectStoreFactory:
    """Creates the configured remote storage adapter."""

    BACKENDS = ("rclone", "s3", "local")

    @classmethod
    def create(cls, settings: Settings) -> BaseObjectStore:
        backend = settings.storage_backend.lower()
        if backend == "rclone":
            return RcloneAdapter(
                remote=settings.rclone_remote,
                binary=settings.rclone_binary,
                timeout_seconds=settings.storage_timeout_seconds,
                recursive=settings.remote_recursive,
            )
        if backend == "s3":
            return S3Adapter(
                bucket=settings.s3_bucket,
                prefix=settings.s3_prefix,
                region_name=settings.s3_region,
                endpoint_url=settings.s3_endpoint_url,
                recursive=settings.remote_recursive,
            )
        if backend == "local":
            if settings.local_remote_dir is None:
                raise ValueError("local_remote_dir is required for storage_backend=local")
            return LocalDirectoryAdapter(
                settings.local_remote_dir, recursive=settings.remote_recursive
            )
        raise ValueError(
            f"Unknown storage backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )
