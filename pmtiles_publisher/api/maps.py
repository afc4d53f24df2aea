"""Published map listing and deletion endpoints.

Listings are read from the object store on every request and only include
PMTiles archives. Deleting does not check whether the archive exists.

Example:
    List published archives:
        >>> response = client.get("/maps")
        >>> response.json()
        >>> # {"success": true, "data": [
        >>> #     {"key": "cities.pmtiles",
        >>> #      "url": "https://maps.s3.eu-central-1.amazonaws.com/cities.pmtiles",
        >>> #      "size": 48213, "last_modified": "2025-01-01T10:00:00+00:00"}
        >>> # ]}

    Delete one:
        >>> client.delete("/maps/cities.pmtiles")
"""

from __future__ import annotations

import dataclasses
from typing import Any

import fastapi
from fastapi import concurrency

from pmtiles_publisher import models
from pmtiles_publisher.api import deps
from pmtiles_publisher.services import formats
from pmtiles_publisher.storage import object_store

router = fastapi.APIRouter(prefix="/maps", tags=["maps"])


def _convert_to_json(artifact: models.PublishedArtifact) -> dict[str, Any]:
    """Convert an artifact to a JSON-ready dictionary."""
    result = dataclasses.asdict(artifact)
    if result.get("last_modified") is not None:
        result["last_modified"] = result["last_modified"].isoformat()
    return result


def _list_artifacts(
    store: object_store.ObjectStoreProtocol,
) -> list[dict[str, Any]]:
    return [
        _convert_to_json(artifact)
        for artifact in store.iter_objects(formats.TILED_SUFFIX)
    ]


@router.get("")
async def list_maps(
    store: object_store.ObjectStoreProtocol = fastapi.Depends(deps.get_object_store),  # noqa: B008
) -> dict[str, Any]:
    """List every published PMTiles archive.

    Args:
        store: Object store (injected via FastAPI Depends).

    Returns:
        Dictionary with ``success`` and ``data``, a list of archives with
        key, public URL, size in bytes and last modification time.

    Raises:
        StoreError: If the store cannot be listed.
    """
    data = await concurrency.run_in_threadpool(_list_artifacts, store)
    return {"success": True, "data": data}


@router.delete("/{key:path}")
async def delete_map(
    key: str,
    store: object_store.ObjectStoreProtocol = fastapi.Depends(deps.get_object_store),  # noqa: B008
) -> dict[str, Any]:
    """Delete a published archive by key.

    Deleting a key that does not exist succeeds as well.

    Args:
        key: Object key of the archive.
        store: Object store (injected via FastAPI Depends).

    Raises:
        StoreError: If the store rejects the delete.
    """
    await concurrency.run_in_threadpool(store.delete, key)
    return {"success": True, "message": f"File {key} deleted successfully"}
