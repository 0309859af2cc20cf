import os
import logging
import boto3
from io import BytesIO

from utils.urls import make_public_url

logger = logging.getLogger(__name__)


class StorageBackend:
    public_base_url = ""

    def put_bytes(self, data, key, content_type=None, cache_control=None):
        raise NotImplementedError

    def get_url(self, key):
        raise NotImplementedError

    def get_file(self, key):
        """Returns file content as bytes-like object (BytesIO)."""
        raise NotImplementedError

    def delete(self, key):
        raise NotImplementedError

    def exists(self, key):
        raise NotImplementedError

    def public_url(self, key):
        """Edge-proxy URL for public/ keys, backend URL for everything else."""
        return make_public_url(key, self.public_base_url, fallback=self.get_url)


def _as_bytes(data):
    if isinstance(data, str):
        return data.encode("utf-8")
    if hasattr(data, "read"):
        data.seek(0)
        body = data.read()
        data.seek(0)
        return body
    return bytes(data)


class LocalStorage(StorageBackend):
    def __init__(self, base_dir, base_url, public_base_url="", url_path="storage"):
        self.base_dir = os.path.abspath(base_dir)
        self.base_url = base_url.rstrip("/")
        self.url_path = url_path.strip("/")
        self.public_base_url = public_base_url
        os.makedirs(self.base_dir, exist_ok=True)

    def _get_abs_path(self, key):
        if not key or os.path.isabs(key) or ".." in key.replace("\\", "/").split("/"):
            raise ValueError(f"Invalid storage key (path traversal): {key!r}")
        abs_path = os.path.abspath(os.path.join(self.base_dir, key))
        if os.path.commonpath([abs_path, self.base_dir]) != self.base_dir:
            raise ValueError(f"Invalid storage key (path traversal): {key!r}")
        return abs_path

    def put_bytes(self, data, key, content_type=None, cache_control=None):
        abs_path = self._get_abs_path(key)
        os.makedirs(os.path.dirname(abs_path), exist_ok=True)
        with open(abs_path, 'wb') as f:
            f.write(_as_bytes(data))
        return key

    def get_url(self, key):
        base = f"{self.base_url}/{self.url_path}" if self.url_path else self.base_url
        return f"{base}/{key}".replace("\\", "/")

    def get_file(self, key):
        abs_path = self._get_abs_path(key)
        with open(abs_path, 'rb') as f:
            return BytesIO(f.read())

    def delete(self, key):
        abs_path = self._get_abs_path(key)
        if os.path.exists(abs_path):
            os.remove(abs_path)

    def exists(self, key):
        return os.path.exists(self._get_abs_path(key))


class S3Storage(StorageBackend):
    def __init__(self, bucket_name, region, access_key, secret_key, prefix="", public_base_url=""):
        self.s3 = boto3.client(
            's3',
            region_name=region,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key
        )
        self.bucket = bucket_name
        self.region = region
        self.prefix = prefix
        self.public_base_url = public_base_url

    def _get_s3_key(self, key):
        if self.prefix:
            return f"{self.prefix.rstrip('/')}/{key.lstrip('/')}"
        return key

    def put_bytes(self, data, key, content_type=None, cache_control=None):
        extra = {}
        if cache_control:
            extra["CacheControl"] = cache_control

        self.s3.put_object(
            Bucket=self.bucket,
            Key=self._get_s3_key(key),
            Body=_as_bytes(data),
            ContentType=content_type or "application/octet-stream",
            **extra,
        )
        return key

    def get_url(self, key):
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{self._get_s3_key(key)}"

    def get_file(self, key):
        obj = self.s3.get_object(Bucket=self.bucket, Key=self._get_s3_key(key))
        return BytesIO(obj['Body'].read())

    def delete(self, key):
        self.s3.delete_object(Bucket=self.bucket, Key=self._get_s3_key(key))

    def exists(self, key):
        from botocore.exceptions import ClientError
        try:
            self.s3.head_object(Bucket=self.bucket, Key=self._get_s3_key(key))
            return True
        except ClientError:
            return False


def get_storage():
    """Factory to return the configured storage backend."""
    from config import (
        STORAGE_BACKEND, S3_BUCKET, AWS_REGION, INSTANCE_DIR, BASE_URL, S3_PREFIX,
        PUBLIC_ASSET_BASE_URL,
    )

    if STORAGE_BACKEND == 's3':
        access_key = os.environ.get('AWS_ACCESS_KEY_ID')
        secret_key = os.environ.get('AWS_SECRET_ACCESS_KEY')

        if not access_key or not secret_key:
            logger.warning("[Storage] S3 backend selected but AWS credentials missing from environment.")

        return S3Storage(
            S3_BUCKET, AWS_REGION, access_key, secret_key,
            prefix=S3_PREFIX, public_base_url=PUBLIC_ASSET_BASE_URL,
        )

    return LocalStorage(os.path.join(INSTANCE_DIR, "storage"), BASE_URL, public_base_url=PUBLIC_ASSET_BASE_URL)
