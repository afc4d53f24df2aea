"""Temporary staging of uploaded and converted files.

Every request stages its upload (and, when converting, the tippecanoe
output) under a unique name in a shared directory. Names combine a
nanosecond timestamp, random hex and the client's file name, so concurrent
requests never collide while the original name stays visible on disk.

Files are acquired through a StagingScope, which releases everything it
handed out when the ``with`` block exits, whichever way it exits.

Example:
    Stage an upload for the duration of a block:
        >>> from pmtiles_publisher.services.staging import StagingArea
        >>> area = StagingArea(Path("/tmp/staging"), max_size=1024)
        >>> with area.scope() as scope:
        ...     staged = scope.stage(io.BytesIO(b"{}"), "cities.geojson")
        ...     output = scope.reserve("cities.pmtiles")
        >>> staged.path.exists()
        False
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import IO, TYPE_CHECKING

from pmtiles_publisher import models
from pmtiles_publisher.core import exceptions
from pmtiles_publisher.services import formats

if TYPE_CHECKING:
    import pathlib
    import types

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


class StagingArea:
    """Directory holding the files of in-flight requests.

    Attributes:
        directory: Where staged files are written.
        max_size: Maximum number of bytes accepted per upload.
    """

    def __init__(self, directory: pathlib.Path, max_size: int) -> None:
        self.directory = directory
        self.max_size = max_size

    def _unique_path(self, suggested_name: str) -> pathlib.Path:
        name = formats.basename(suggested_name) or "upload"
        return self.directory / (
            f"{time.time_ns()}-{secrets.token_hex(4)}-{name}"
        )

    def reserve(self, suggested_name: str) -> pathlib.Path:
        """Return a unique path for a file a later step will write.

        Nothing is created on disk.
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        return self._unique_path(suggested_name)

    def stage(
        self,
        stream: IO[bytes],
        suggested_name: str,
        content_type: str | None = None,
    ) -> models.UploadedFile:
        """Copy an upload stream into the staging directory.

        Args:
            stream: Binary stream positioned at the start of the upload.
            suggested_name: Client-supplied file name.
            content_type: Declared content type, stored as is.

        Returns:
            UploadedFile describing the staged copy.

        Raises:
            UploadTooLargeError: If the stream exceeds max_size bytes.
            OSError: If the file cannot be written (disk full, permissions).
        """
        target_path = self.reserve(suggested_name)
        size = 0
        try:
            with target_path.open("wb") as target:
                for chunk in iter(lambda: stream.read(CHUNK_SIZE), b""):
                    size += len(chunk)
                    if size > self.max_size:
                        raise exceptions.UploadTooLargeError(
                            f"Upload exceeds {self.max_size} bytes",
                        )

                    target.write(chunk)
        except BaseException:
            self.release(target_path)
            raise

        return models.UploadedFile(
            original_name=suggested_name,
            path=target_path,
            size=size,
            content_type=content_type,
        )

    def release(self, *paths: pathlib.Path | None) -> None:
        """Delete staged files, skipping ones that are already gone.

        Removal failures are logged and never raised, so they cannot
        replace the outcome of the request.
        """
        for path in paths:
            if path is None:
                continue
            try:
                path.unlink(missing_ok=True)
            except OSError:
                logger.warning("Failed to remove staged file %s", path,
                               exc_info=True)

    def scope(self) -> StagingScope:
        """Open a scope whose files are released when it exits."""
        return StagingScope(self)


class StagingScope:
    """Tracks the staged paths of one request and releases them on exit."""

    def __init__(self, area: StagingArea) -> None:
        self._area = area
        self._paths: list[pathlib.Path] = []
        self._released = False

    def stage(
        self,
        stream: IO[bytes],
        suggested_name: str,
        content_type: str | None = None,
    ) -> models.UploadedFile:
        staged = self._area.stage(stream, suggested_name, content_type)
        self._paths.append(staged.path)
        return staged

    def reserve(self, suggested_name: str) -> pathlib.Path:
        path = self._area.reserve(suggested_name)
        self._paths.append(path)
        return path

    def release(self) -> None:
        """Release every tracked path. Later calls do nothing."""
        if self._released:
            return
        self._released = True
        self._area.release(*self._paths)

    def __enter__(self) -> StagingScope:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: types.TracebackType | None,
    ) -> None:
        self.release()
