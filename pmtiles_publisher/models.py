"""Data models for staged uploads, conversions and published artifacts.

This module defines the value objects that flow through the publishing
pipeline. Staged files and conversion jobs only live for the duration of one
request; published artifacts describe objects in the remote store and are
always read fresh from it.

Example:
    Describe a successful conversion:
        >>> from pathlib import Path
        >>> from pmtiles_publisher import models
        >>> result = models.ConversionResult.success(
        ...     Path("/staging/1-ab-cities.pmtiles"),
        ... )
        >>> result.ok
        True

    And a failed one:
        >>> failed = models.ConversionResult.failure("bad JSON", returncode=1)
        >>> failed.output_path is None
        True
"""

from __future__ import annotations

import dataclasses
import datetime
import enum
import pathlib

TIPPECANOE_OPTIONS: tuple[str, ...] = (
    "-zg",
    "--drop-densest-as-needed",
    "--force",
)


class PipelineState(enum.Enum):
    """States a single upload passes through in the pipeline."""

    RECEIVED = "received"
    STAGED = "staged"
    CONVERTING = "converting"
    CONVERTED = "converted"
    CONVERSION_FAILED = "conversion_failed"
    PUBLISHING = "publishing"
    PUBLISHED = "published"
    PUBLISH_FAILED = "publish_failed"
    CLEANED = "cleaned"


@dataclasses.dataclass(frozen=True)
class UploadedFile:
    """An upload written to the staging area.

    Attributes:
        original_name: Name supplied by the client (untrusted).
        path: Unique staged location on local disk.
        size: Number of bytes written.
        content_type: Content type declared by the client, not verified.
    """

    original_name: str
    path: pathlib.Path
    size: int
    content_type: str | None = None


@dataclasses.dataclass(frozen=True)
class ConversionJob:
    """One tippecanoe invocation.

    The option set is fixed: automatic zoom selection, dropping the densest
    features when a tile gets too large, and overwriting any existing
    output file.
    """

    input_path: pathlib.Path
    output_path: pathlib.Path
    options: tuple[str, ...] = TIPPECANOE_OPTIONS


@dataclasses.dataclass(frozen=True)
class ConversionResult:
    """Outcome of a conversion: an output path or diagnostics, never both."""

    output_path: pathlib.Path | None = None
    diagnostics: str | None = None
    returncode: int | None = None

    def __post_init__(self) -> None:
        if (self.output_path is None) == (self.diagnostics is None):
            raise ValueError(
                "ConversionResult needs exactly one of output_path "
                "or diagnostics",
            )

    @classmethod
    def success(cls, output_path: pathlib.Path) -> ConversionResult:
        return cls(output_path=output_path, returncode=0)

    @classmethod
    def failure(
        cls,
        diagnostics: str,
        returncode: int | None = None,
    ) -> ConversionResult:
        return cls(diagnostics=diagnostics, returncode=returncode)

    @property
    def ok(self) -> bool:
        return self.output_path is not None


@dataclasses.dataclass(frozen=True)
class PublishedArtifact:
    """An object in the remote store.

    Attributes:
        key: Object key (the published file name).
        url: Public URL of the object.
        size: Object size in bytes.
        last_modified: Last modification time reported by the store.
    """

    key: str
    url: str
    size: int
    last_modified: datetime.datetime | None


@dataclasses.dataclass(frozen=True)
class PublishResult:
    """Summary of a successful pipeline run."""

    key: str
    url: str
    size: int
    converted: bool
