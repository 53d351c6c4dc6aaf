"""
Object storage for uploaded documents.

Two backends share the same three operations (upload / get_public_url / remove):
  - LocalBucket: files under STORAGE_DIR/<bucket>, served by the app under /storage
  - S3Bucket: any S3-compatible endpoint through boto3
"""
from __future__ import annotations

import logging
import re
import time
from functools import lru_cache
from pathlib import Path, PurePosixPath

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from stk_community import config

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Upload / remove failed on the storage side."""
    pass


def build_storage_path(display_name: str, original_filename: str, now_ms: int | None = None) -> str:
    """
    "{epoch-millis}_{name}.{ext}": whitespace runs become "_",
    anything outside [A-Za-z0-9_.-] is dropped, the extension comes from the uploaded file.
    """
    ts = int(time.time() * 1000) if now_ms is None else now_ms
    safe_name = re.sub(r"\s+", "_", display_name.strip())
    safe_name = re.sub(r"[^A-Za-z0-9_.\-]", "", safe_name) or "document"

    ext = ""
    if "." in original_filename:
        ext = re.sub(r"[^A-Za-z0-9]", "", original_filename.rsplit(".", 1)[1])
    return f"{ts}_{safe_name}.{ext}" if ext else f"{ts}_{safe_name}"


def _check_key(path: str) -> str:
    key = PurePosixPath(path)
    if key.is_absolute() or ".." in key.parts or not path:
        raise StorageError(f"Invalid object path: {path!r}")
    return str(key)


class LocalBucket:
    def __init__(self, root: Path, bucket: str, public_url: str):
        self.bucket = bucket
        self.root = Path(root) / bucket
        self.public_url = public_url.rstrip("/")

    def upload(self, path: str, data: bytes, content_type: str | None = None) -> str:
        key = _check_key(path)
        target = self.root / key
        if target.exists():
            raise StorageError(f"The resource already exists: {key}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise StorageError(str(e)) from e
        logger.info("Stored %s (%d bytes) in bucket %s", key, len(data), self.bucket)
        return key

    def get_public_url(self, path: str) -> str:
        return f"{self.public_url}/{self.bucket}/{_check_key(path)}"

    def remove(self, paths: list[str]) -> None:
        for path in paths:
            target = self.root / _check_key(path)
            try:
                target.unlink(missing_ok=True)
            except OSError as e:
                raise StorageError(str(e)) from e


class S3Bucket:
    def __init__(self, bucket: str, endpoint_url: str | None = None, region: str | None = None,
                 public_url: str | None = None):
        self.bucket = bucket
        self.endpoint_url = endpoint_url
        self.region = region
        self.public_url = public_url.rstrip("/") if public_url else None
        if config.AWS_ACCESS_KEY_ID and config.AWS_SECRET_ACCESS_KEY:
            self._client = boto3.client(
                "s3",
                endpoint_url=endpoint_url,
                region_name=region,
                aws_access_key_id=config.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=config.AWS_SECRET_ACCESS_KEY,
            )
        else:
            # IAM role / default credential chain
            self._client = boto3.client("s3", endpoint_url=endpoint_url, region_name=region)

    def upload(self, path: str, data: bytes, content_type: str | None = None) -> str:
        key = _check_key(path)
        extra = {"ContentType": content_type} if content_type else {}
        try:
            # conditional write: an existing key is never replaced
            self._client.put_object(Bucket=self.bucket, Key=key, Body=data, IfNoneMatch="*", **extra)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "PreconditionFailed":
                raise StorageError(f"The resource already exists: {key}") from e
            raise StorageError(str(e)) from e
        except BotoCoreError as e:
            raise StorageError(str(e)) from e
        logger.info("Uploaded %s (%d bytes) to s3://%s", key, len(data), self.bucket)
        return key

    def get_public_url(self, path: str) -> str:
        key = _check_key(path)
        if self.public_url:
            return f"{self.public_url}/{self.bucket}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket}/{key}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"

    def remove(self, paths: list[str]) -> None:
        objects = [{"Key": _check_key(p)} for p in paths]
        if not objects:
            return
        try:
            resp = self._client.delete_objects(Bucket=self.bucket, Delete={"Objects": objects})
        except (BotoCoreError, ClientError) as e:
            raise StorageError(str(e)) from e
        # per-key failures come back in the response body, not as an exception
        errors = resp.get("Errors") or []
        if errors:
            first = errors[0]
            raise StorageError(f"{first.get('Key')}: {first.get('Message') or first.get('Code')}")


@lru_cache()
def get_bucket() -> LocalBucket | S3Bucket:
    """FastAPI dependency; tests override it with a bucket in a temp dir."""
    if config.STORAGE_BACKEND == "s3":
        return S3Bucket(
            config.STORAGE_BUCKET,
            endpoint_url=config.S3_ENDPOINT_URL,
            region=config.S3_REGION,
            public_url=config.STORAGE_PUBLIC_URL if config.STORAGE_PUBLIC_URL.startswith("http") else None,
        )
    return LocalBucket(config.STORAGE_DIR, config.STORAGE_BUCKET, config.STORAGE_PUBLIC_URL)
