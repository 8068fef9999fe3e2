import os
import tempfile
from pathlib import Path
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from kartka.logging.logger import Log
from kartka.storage.base import BaseObjectStore
from kartka.storage.exceptions import StorageError


class S3Adapter(BaseObjectStore):
    """Remote storage in an S3 (or S3-compatible) bucket via boto3.

    Credentials come from the usual boto3 chain (env, shared config, IAM role).
    """

    def __init__(
        self,
        *,
        bucket: str,
        prefix: str = "",
        region_name: str = "us-east-1",
        endpoint_url: str | None = None,
        recursive: bool = False,
        client: Any = None,
    ) -> None:
        if not bucket:
            raise ValueError("s3_bucket is required for storage_backend=s3")
        self._bucket = bucket
        self._prefix = prefix.strip("/") + "/" if prefix.strip("/") else ""
        self._recursive = recursive
        self._client = client or boto3.client(
            "s3",
            region_name=region_name,
            endpoint_url=endpoint_url,
            config=Config(signature_version="s3v4", retries={"max_attempts": 3}),
        )

    def upload(self, local_path: Path, key: str) -> None:
        object_key = self._prefix + key
        try:
            self._client.upload_file(str(local_path), self._bucket, object_key)
            head = self._client.head_object(Bucket=self._bucket, Key=object_key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 upload of {key} failed: {exc}") from exc
        local_size = local_path.stat().st_size
        if head.get("ContentLength") != local_size:
            raise StorageError(
                f"upload verification failed for {key}: "
                f"remote size {head.get('ContentLength')}, local size {local_size}"
            )
        Log.debug(f"Uploaded {local_path} to s3://{self._bucket}/{object_key}")

    def list_keys(self) -> list[str]:
        params = {"Bucket": self._bucket, "Prefix": self._prefix}
        if not self._recursive:
            params["Delimiter"] = "/"
        keys: list[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(**params):
                for item in page.get("Contents", []):
                    key = item["Key"][len(self._prefix):]
                    if key and not key.endswith("/") and not Path(key).name.startswith("."):
                        keys.append(key)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 listing of {self._bucket} failed: {exc}") from exc
        return sorted(keys)

    def download(self, key: str, local_path: Path) -> None:
        local_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{local_path.name}.", suffix=".part", dir=local_path.parent
        )
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            self._client.download_file(self._bucket, self._prefix + key, str(tmp_path))
            os.replace(tmp_path, local_path)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"S3 download of {key} failed: {exc}") from exc
        finally:
            tmp_path.unlink(missing_ok=True)
