"""Object store gateways for published PMTiles archives."""

from __future__ import annotations

import datetime
import logging
import urllib.parse
from typing import TYPE_CHECKING, Any, Protocol

import boto3
from botocore import exceptions as botocore_exceptions

from pmtiles_publisher import models
from pmtiles_publisher.core import exceptions

if TYPE_CHECKING:
    import pathlib
    from collections.abc import Iterator

    from pmtiles_publisher.core import config

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
_MISSING_KEY_CODES = frozenset({"NoSuchKey", "404", "NotFound"})


def build_public_url(
    bucket: str,
    region: str,
    key: str,
    base_url: str | None = None,
) -> str:
    """Return the public URL of an object.

    Uses the virtual-hosted S3 URL unless base_url overrides it.
    """
    quoted = urllib.parse.quote(key)
    if base_url:
        return f"{base_url.rstrip('/')}/{quoted}"

    return f"https://{bucket}.s3.{region}.amazonaws.com/{quoted}"


class ObjectStoreProtocol(Protocol):
    """Protocol interface for publishing, listing and deleting artifacts.

    Implementations do not retry. Putting an existing key overwrites it,
    and deleting a missing key succeeds.
    """

    def put(
        self,
        key: str,
        source_path: pathlib.Path,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None: ...

    def iter_objects(
        self,
        suffix: str,
    ) -> Iterator[models.PublishedArtifact]: ...

    def delete(self, key: str) -> None: ...

    def public_url(self, key: str) -> str: ...


class InMemoryObjectStore(ObjectStoreProtocol):
    """Simple in-memory store for tests and local development.

    Objects are kept in a dictionary. Data is lost when the process exits.
    """

    def __init__(self, base_url: str = "memory://pmtiles") -> None:
        """Initialize an empty in-memory store.

        Args:
            base_url: Prefix used to build public URLs.
        """
        self.base_url = base_url
        self.objects: dict[str, tuple[bytes, datetime.datetime]] = {}

    def put(
        self,
        key: str,
        source_path: pathlib.Path,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None:
        """Copy the file's bytes under key, replacing any existing object."""
        self.objects[key] = (
            source_path.read_bytes(),
            datetime.datetime.now(tz=datetime.UTC),
        )

    def iter_objects(
        self,
        suffix: str,
    ) -> Iterator[models.PublishedArtifact]:
        """Yield stored objects whose key ends with suffix."""
        for key, (data, modified) in sorted(self.objects.items()):
            if key.endswith(suffix):
                yield models.PublishedArtifact(
                    key=key,
                    url=self.public_url(key),
                    size=len(data),
                    last_modified=modified,
                )

    def delete(self, key: str) -> None:
        """Remove key if present."""
        self.objects.pop(key, None)

    def public_url(self, key: str) -> str:
        return f"{self.base_url.rstrip('/')}/{urllib.parse.quote(key)}"


class S3ObjectStore(ObjectStoreProtocol):
    """S3-backed store for published artifacts.

    All botocore failures are wrapped in StoreError so the pipeline can
    report infrastructure problems separately from invalid data.

    Attributes:
        client: boto3 S3 client.
        bucket: Bucket every object lives in.
        region: Bucket region, used for public URLs.
        public_base_url: Optional override for public URLs.
    """

    def __init__(
        self,
        client: Any,
        bucket: str,
        region: str,
        public_base_url: str | None = None,
    ) -> None:
        self.client = client
        self.bucket = bucket
        self.region = region
        self.public_base_url = public_base_url

    @classmethod
    def from_settings(cls, settings: config.Settings) -> S3ObjectStore:
        """Create the S3 client once from process-wide settings.

        Explicit credentials are only passed when configured; otherwise
        boto3 resolves them from its default chain.
        """
        kwargs: dict[str, Any] = {"region_name": settings.aws_region}
        if settings.aws_access_key_id and settings.aws_secret_access_key:
            kwargs["aws_access_key_id"] = settings.aws_access_key_id
            kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
        if settings.aws_endpoint_url:
            kwargs["endpoint_url"] = settings.aws_endpoint_url

        return cls(
            client=boto3.client("s3", **kwargs),
            bucket=settings.aws_bucket_name,
            region=settings.aws_region,
            public_base_url=settings.public_base_url,
        )

    def put(
        self,
        key: str,
        source_path: pathlib.Path,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> None:
        """Upload a local file's bytes under key.

        Raises:
            StoreError: If the upload fails.
        """
        try:
            with source_path.open("rb") as body:
                self.client.put_object(
                    Bucket=self.bucket,
                    Key=key,
                    Body=body,
                    ContentType=content_type,
                )
        except (
            botocore_exceptions.ClientError,
            botocore_exceptions.BotoCoreError,
        ) as exc:
            raise exceptions.StoreError("put", str(exc), key=key) from exc

    def iter_objects(
        self,
        suffix: str,
    ) -> Iterator[models.PublishedArtifact]:
        """Yield the bucket's objects whose key ends with suffix.

        Pages are fetched while iterating, so results reflect the bucket
        at iteration time.

        Raises:
            StoreError: If listing fails.
        """
        paginator = self.client.get_paginator("list_objects_v2")
        try:
            for page in paginator.paginate(Bucket=self.bucket):
                for item in page.get("Contents", []):
                    key = item["Key"]
                    if not key.endswith(suffix):
                        continue
                    yield models.PublishedArtifact(
                        key=key,
                        url=self.public_url(key),
                        size=item.get("Size", 0),
                        last_modified=item.get("LastModified"),
                    )
        except (
            botocore_exceptions.ClientError,
            botocore_exceptions.BotoCoreError,
        ) as exc:
            raise exceptions.StoreError("list", str(exc)) from exc

    def delete(self, key: str) -> None:
        """Delete key. A key that does not exist counts as deleted.

        Raises:
            StoreError: If the store rejects the delete for another reason.
        """
        try:
            self.client.delete_object(Bucket=self.bucket, Key=key)
        except botocore_exceptions.ClientError as exc:
            code = exc.response.get("Error", {}).get("Code", "")
            if code in _MISSING_KEY_CODES:
                logger.info("Object %s already absent", key)
                return
            raise exceptions.StoreError("delete", str(exc), key=key) from exc
        except botocore_exceptions.BotoCoreError as exc:
            raise exceptions.StoreError("delete", str(exc), key=key) from exc

    def public_url(self, key: str) -> str:
        return build_public_url(
            self.bucket,
            self.region,
            key,
            self.public_base_url,
        )


def get_object_store(settings: config.Settings) -> ObjectStoreProtocol:
    """Build the object store selected by settings.storage_backend.

    Returns:
        InMemoryObjectStore for "memory", S3ObjectStore otherwise.
    """
    if settings.storage_backend == "memory":
        return InMemoryObjectStore(
            base_url=settings.public_base_url or "memory://pmtiles",
        )

    return S3ObjectStore.from_settings(settings)
