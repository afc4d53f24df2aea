"""Upload endpoints publishing map data to the object store.

Three endpoints feed the publishing pipeline:

- ``POST /upload-pmtiles``: publish a PMTiles archive as it is,
- ``POST /upload``: same, answering with the public URL as well,
- ``POST /upload-geojson``: convert GeoJSON (or another vector format
  tippecanoe reads) to PMTiles, then publish it.

The pipeline blocks while tippecanoe runs and while the object store
uploads, so it is executed in the thread pool instead of the event loop.

Example:
    Convert and publish a GeoJSON file:
        >>> response = client.post(
        ...     "/upload-geojson",
        ...     files={"geoJsonFile": ("cities.geojson", open("cities.geojson", "rb"))}
        ... )
        >>> response.json()
        >>> # {"success": true,
        >>> #  "message": "GeoJSON converted and uploaded successfully!",
        >>> #  "s3_key": "cities.pmtiles", "url": "https://..."}

    Publish a PMTiles archive:
        >>> response = client.post(
        ...     "/upload-pmtiles",
        ...     files={"mapFile": ("tiles.pmtiles", open("tiles.pmtiles", "rb"))}
        ... )
"""

from __future__ import annotations

from typing import BinaryIO

import fastapi
from fastapi import concurrency
from typing_extensions import TypedDict

from pmtiles_publisher.api import deps
from pmtiles_publisher.services import pipeline

router = fastapi.APIRouter(tags=["uploads"])


class UploadResponse(TypedDict):
    success: bool
    message: str
    s3_key: str
    url: str


def _parts(
    file: fastapi.UploadFile | None,
) -> tuple[str | None, BinaryIO | None, str | None]:
    if file is None:
        return None, None, None

    return file.filename, file.file, file.content_type


@router.post("/upload-pmtiles")
async def upload_pmtiles(
    map_file: fastapi.UploadFile | None = fastapi.File(None, alias="mapFile"),  # noqa: B008
    runner: pipeline.PublishPipeline = fastapi.Depends(deps.get_pipeline),  # noqa: B008
) -> UploadResponse:
    """Publish an uploaded PMTiles archive without conversion.

    Args:
        map_file: Uploaded archive (multipart field mapFile).
        runner: Publishing pipeline (injected via FastAPI Depends).

    Returns:
        Success message with the key and public URL of the archive.

    Raises:
        ClientInputError: If no file was sent or it is not ``.pmtiles``.
        StoreError: If the archive cannot be stored.
    """
    result = await concurrency.run_in_threadpool(
        runner.handle_direct_upload,
        *_parts(map_file),
    )
    return UploadResponse(
        success=True,
        message="PMTiles uploaded successfully",
        s3_key=result.key,
        url=result.url,
    )


@router.post("/upload")
async def upload_map(
    map_file: fastapi.UploadFile | None = fastapi.File(None, alias="mapFile"),  # noqa: B008
    runner: pipeline.PublishPipeline = fastapi.Depends(deps.get_pipeline),  # noqa: B008
) -> UploadResponse:
    """Publish an uploaded PMTiles archive and return its public URL."""
    result = await concurrency.run_in_threadpool(
        runner.handle_direct_upload,
        *_parts(map_file),
    )
    return UploadResponse(
        success=True,
        message="File uploaded successfully",
        s3_key=result.key,
        url=result.url,
    )


@router.post("/upload-geojson")
async def upload_geojson(
    geojson_file: fastapi.UploadFile | None = fastapi.File(None, alias="geoJsonFile"),  # noqa: B008
    runner: pipeline.PublishPipeline = fastapi.Depends(deps.get_pipeline),  # noqa: B008
) -> UploadResponse:
    """Convert an uploaded vector file to PMTiles and publish it.

    The published key is derived from the original name
    (``cities.geojson`` is published as ``cities.pmtiles``).

    Args:
        geojson_file: Uploaded source file (multipart field geoJsonFile).
        runner: Publishing pipeline (injected via FastAPI Depends).

    Returns:
        Success message with the derived key and public URL.

    Raises:
        ClientInputError: If no file was sent or its format is unknown.
        ConversionError: If tippecanoe rejects the data.
        StoreError: If the converted archive cannot be stored.
    """
    result = await concurrency.run_in_threadpool(
        runner.handle_converting_upload,
        *_parts(geojson_file),
    )
    return UploadResponse(
        success=True,
        message="GeoJSON converted and uploaded successfully!",
        s3_key=result.key,
        url=result.url,
    )
