"""Recognised upload formats and published artifact naming.

Uploads are either already in the tiled PMTiles format (published as they
are) or in one of a closed set of vector formats tippecanoe reads, which are
converted to PMTiles. Names are validated once, at the entry of the pipeline.

Example:
    Derive the key a converted upload is published under:
        >>> from pmtiles_publisher.services import formats
        >>> formats.derive_tiled_name("cities.geojson")
        'cities.pmtiles'
        >>> formats.derive_tiled_name("data/Roads.JSON")
        'Roads.pmtiles'
"""

from __future__ import annotations

import pathlib

from pmtiles_publisher.core import exceptions

TILED_SUFFIX = ".pmtiles"

# ".ndjson" must be checked before ".json".
SOURCE_SUFFIXES: tuple[str, ...] = (
    ".geojsonl",
    ".geojson",
    ".ndjson",
    ".json",
    ".csv",
    ".fgb",
)


def basename(filename: str) -> str:
    """Strip any directory components a client put into a file name.

    Both separators are handled since browsers on Windows may send them.
    """
    return pathlib.PurePosixPath(filename.replace("\\", "/")).name


def is_tiled_name(filename: str) -> bool:
    """Return True if the name ends with ``.pmtiles`` (any case)."""
    return filename.lower().endswith(TILED_SUFFIX)


def detect_source_format(filename: str) -> str:
    """Return the recognised source suffix of a file name.

    Args:
        filename: Client-supplied file name.

    Returns:
        The matching suffix from SOURCE_SUFFIXES, lower case.

    Raises:
        ClientInputError: If the name does not end in a recognised suffix.
    """
    lowered = filename.lower()
    for suffix in SOURCE_SUFFIXES:
        if lowered.endswith(suffix):
            if len(lowered) > len(suffix):
                return suffix
            break

    raise exceptions.ClientInputError(
        f"Unsupported file type: {filename!r}. "
        f"Expected one of {', '.join(SOURCE_SUFFIXES)}",
    )


def derive_tiled_name(filename: str) -> str:
    """Map a source file name to the key its conversion is published under.

    The recognised source suffix is stripped and ``.pmtiles`` appended. The
    result only depends on the original name, never on the staged one.

    Raises:
        ClientInputError: If the name has no recognised source suffix.
    """
    name = basename(filename)
    suffix = detect_source_format(name)
    return name[: -len(suffix)] + TILED_SUFFIX


def require_tiled_name(filename: str) -> str:
    """Validate a direct upload name and return the key to publish under.

    Raises:
        ClientInputError: If the name does not end with ``.pmtiles``.
    """
    name = basename(filename)
    if not is_tiled_name(name) or len(name) == len(TILED_SUFFIX):
        raise exceptions.ClientInputError(
            f"Only {TILED_SUFFIX} files are allowed",
        )

    return name
