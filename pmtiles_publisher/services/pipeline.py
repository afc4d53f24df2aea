"""Ingest, convert and publish pipeline for uploaded map data.

This module drives one upload from the request body to the object store:

    received -> staged -> (converting -> converted) -> publishing
             -> published -> cleaned

Uploads already in PMTiles format skip conversion. Everything else is run
through tippecanoe first and published under a name derived from the
original file name (``cities.geojson`` becomes ``cities.pmtiles``).

Names are validated before anything touches the disk. Staged files are held
in a StagingScope, so the upload and the conversion output are removed
exactly once whether the request publishes, fails to convert, fails to
publish or hits an unexpected error.

Example:
    Publish a GeoJSON upload:
        >>> from pmtiles_publisher.services import pipeline, staging
        >>> from pmtiles_publisher.services.tippecanoe import (
        ...     TippecanoeConverter,
        ... )
        >>> from pmtiles_publisher.storage.object_store import (
        ...     InMemoryObjectStore,
        ... )
        >>> runner = pipeline.PublishPipeline(
        ...     staging=staging.StagingArea(Path("/tmp/staging"), 1024**3),
        ...     store=InMemoryObjectStore(),
        ...     converter=TippecanoeConverter(),
        ... )
        >>> with open("cities.geojson", "rb") as stream:
        ...     result = runner.handle_converting_upload(
        ...         "cities.geojson", stream,
        ...     )
        >>> result.key
        'cities.pmtiles'
"""

from __future__ import annotations

import contextlib
import logging
from typing import IO, TYPE_CHECKING, Protocol

from pmtiles_publisher import models
from pmtiles_publisher.core import exceptions
from pmtiles_publisher.services import formats

if TYPE_CHECKING:
    import pathlib
    from collections.abc import Iterator

    from pmtiles_publisher.services import staging as staging_area
    from pmtiles_publisher.storage import object_store

logger = logging.getLogger(__name__)

State = models.PipelineState


class ConverterProtocol(Protocol):
    """Anything that turns a staged source file into a PMTiles archive."""

    def convert(
        self,
        input_path: pathlib.Path,
        output_path: pathlib.Path,
    ) -> models.ConversionResult: ...


def _require_upload(
    filename: str | None,
    stream: IO[bytes] | None,
) -> str:
    if stream is None or not filename:
        raise exceptions.ClientInputError("No file uploaded")

    return filename


class PublishPipeline:
    """Stages, optionally converts and publishes uploads.

    One instance can serve any number of concurrent requests; the only
    state shared between them is the staging directory, whose names never
    collide, and the remote store.

    Attributes:
        staging: Staging area for uploads and conversion output.
        store: Object store artifacts are published to.
        converter: Conversion invoker used for non-PMTiles uploads.
    """

    def __init__(
        self,
        staging: staging_area.StagingArea,
        store: object_store.ObjectStoreProtocol,
        converter: ConverterProtocol,
    ) -> None:
        self.staging = staging
        self.store = store
        self.converter = converter

    def _enter(self, state: models.PipelineState, name: str) -> None:
        logger.info("%s: %s", name, state.value)

    @contextlib.contextmanager
    def _request(
        self,
        filename: str,
    ) -> Iterator[staging_area.StagingScope]:
        """Open the staging scope of one request.

        The scope is released on every way out of the block; the state log
        ends with ``cleaned`` even when an exception propagates.
        """
        self._enter(State.RECEIVED, filename)
        try:
            with self.staging.scope() as scope:
                yield scope
        finally:
            self._enter(State.CLEANED, filename)

    def _publish(
        self,
        local_path: pathlib.Path,
        key: str,
        size: int,
        *,
        converted: bool,
    ) -> models.PublishResult:
        self._enter(State.PUBLISHING, key)
        try:
            self.store.put(key, local_path)
        except exceptions.StoreError:
            self._enter(State.PUBLISH_FAILED, key)
            logger.exception("Publishing %s failed", key)
            raise

        self._enter(State.PUBLISHED, key)
        return models.PublishResult(
            key=key,
            url=self.store.public_url(key),
            size=size,
            converted=converted,
        )

    def handle_direct_upload(
        self,
        filename: str | None,
        stream: IO[bytes] | None,
        content_type: str | None = None,
    ) -> models.PublishResult:
        """Publish an upload that is already a PMTiles archive.

        Args:
            filename: Original file name sent by the client.
            stream: Upload body.
            content_type: Declared content type.

        Returns:
            PublishResult keyed by the original file name.

        Raises:
            ClientInputError: If no file was sent or the name does not end
                with ``.pmtiles``. Nothing is staged in that case.
            StoreError: If the upload to the store fails.
        """
        filename = _require_upload(filename, stream)
        key = formats.require_tiled_name(filename)

        with self._request(filename) as scope:
            staged = scope.stage(stream, filename, content_type)
            self._enter(State.STAGED, filename)
            return self._publish(staged.path, key, staged.size,
                                 converted=False)

    def handle_converting_upload(
        self,
        filename: str | None,
        stream: IO[bytes] | None,
        content_type: str | None = None,
    ) -> models.PublishResult:
        """Convert an upload to PMTiles and publish the result.

        Publishing only starts after tippecanoe has exited successfully and
        its output file exists, so a failed or partial conversion is never
        published.

        Args:
            filename: Original file name sent by the client.
            stream: Upload body.
            content_type: Declared content type.

        Returns:
            PublishResult keyed by the derived ``.pmtiles`` name.

        Raises:
            ClientInputError: If no file was sent or the format is not
                recognised. Nothing is staged in that case.
            ConversionError: If tippecanoe fails; carries its diagnostics.
            StoreError: If the converted archive cannot be uploaded.
        """
        filename = _require_upload(filename, stream)
        key = formats.derive_tiled_name(filename)

        with self._request(filename) as scope:
            staged = scope.stage(stream, filename, content_type)
            self._enter(State.STAGED, filename)
            output_path = scope.reserve(key)

            self._enter(State.CONVERTING, filename)
            conversion = self.converter.convert(staged.path, output_path)
            if not conversion.ok:
                self._enter(State.CONVERSION_FAILED, filename)
                logger.error(
                    "Conversion of %s failed (exit %s): %s",
                    filename,
                    conversion.returncode,
                    conversion.diagnostics,
                )
                raise exceptions.ConversionError(
                    filename,
                    conversion.diagnostics or "",
                )

            self._enter(State.CONVERTED, filename)
            return self._publish(
                output_path,
                key,
                output_path.stat().st_size,
                converted=True,
            )
