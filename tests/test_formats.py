"""Tests for recognised upload formats and published key derivation."""

from __future__ import annotations

import pytest

from pmtiles_publisher.core import exceptions
from pmtiles_publisher.services import formats


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("cities.geojson", "cities.pmtiles"),
        ("cities.json", "cities.pmtiles"),
        ("Roads.JSON", "Roads.pmtiles"),
        ("points.geojsonl", "points.pmtiles"),
        ("points.ndjson", "points.pmtiles"),
        ("stations.csv", "stations.pmtiles"),
        ("parcels.fgb", "parcels.pmtiles"),
        ("my.data.geojson", "my.data.pmtiles"),
        ("uploads/2024/cities.geojson", "cities.pmtiles"),
    ],
)
def test_derive_tiled_name(filename: str, expected: str) -> None:
    assert formats.derive_tiled_name(filename) == expected


@pytest.mark.parametrize(
    "filename",
    ["photo.png", "cities.geojson.zip", "geojson", ".geojson", "tiles.pmtiles"],
)
def test_derive_tiled_name_rejects_unknown(filename: str) -> None:
    with pytest.raises(exceptions.ClientInputError):
        formats.derive_tiled_name(filename)


def test_detect_source_format_prefers_ndjson() -> None:
    assert formats.detect_source_format("a.ndjson") == ".ndjson"
    assert formats.detect_source_format("a.GeoJSON") == ".geojson"


def test_require_tiled_name() -> None:
    assert formats.require_tiled_name("tiles.pmtiles") == "tiles.pmtiles"
    assert formats.require_tiled_name("TILES.PMTILES") == "TILES.PMTILES"
    assert formats.require_tiled_name("a/b/tiles.pmtiles") == "tiles.pmtiles"


@pytest.mark.parametrize(
    "filename",
    ["tiles.mbtiles", "tiles.pmtiles.bak", ".pmtiles", "cities.geojson"],
)
def test_require_tiled_name_rejects(filename: str) -> None:
    with pytest.raises(exceptions.ClientInputError, match="Only .pmtiles"):
        formats.require_tiled_name(filename)


def test_basename_handles_both_separators() -> None:
    assert formats.basename("a/b/c.geojson") == "c.geojson"
    assert formats.basename("a\\b\\c.geojson") == "c.geojson"
    assert formats.basename("c.geojson") == "c.geojson"
