"""Tests for the published map listing and deletion endpoints."""

from __future__ import annotations

import datetime
from typing import TYPE_CHECKING

from pmtiles_publisher.api import deps, maps
from pmtiles_publisher.core import exceptions
from pmtiles_publisher.models import PublishedArtifact
from pmtiles_publisher.storage import object_store

if TYPE_CHECKING:
    import pathlib
    from collections.abc import Iterator

    from fastapi import testclient


def _publish(
    store: object_store.InMemoryObjectStore,
    tmp_path: pathlib.Path,
    key: str,
    data: bytes,
) -> None:
    source = tmp_path / "source.bin"
    source.write_bytes(data)
    store.put(key, source)


def test_list_maps_only_returns_pmtiles(
    client: testclient.TestClient,
    store: object_store.InMemoryObjectStore,
    tmp_path: pathlib.Path,
) -> None:
    _publish(store, tmp_path, "cities.pmtiles", b"12345")
    _publish(store, tmp_path, "readme.txt", b"hi")

    response = client.get("/maps")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert len(body["data"]) == 1
    item = body["data"][0]
    assert item["key"] == "cities.pmtiles"
    assert item["url"] == "https://cdn.test/maps/cities.pmtiles"
    assert item["size"] == 5
    assert datetime.datetime.fromisoformat(item["last_modified"])


def test_list_maps_empty(client: testclient.TestClient) -> None:
    response = client.get("/maps")

    assert response.json() == {"success": True, "data": []}


def test_list_maps_store_error(client: testclient.TestClient) -> None:
    class BrokenStore(object_store.InMemoryObjectStore):
        def iter_objects(self, suffix: str) -> Iterator[PublishedArtifact]:
            raise exceptions.StoreError("list", "AccessDenied")
            yield  # pragma: no cover

    client.app.dependency_overrides[deps.get_object_store] = (  # type: ignore[attr-defined]
        lambda: BrokenStore()
    )

    response = client.get("/maps")

    assert response.status_code == 502
    assert response.json() == {
        "success": False,
        "error": "AccessDenied",
        "category": "store",
    }


def test_delete_map(
    client: testclient.TestClient,
    store: object_store.InMemoryObjectStore,
    tmp_path: pathlib.Path,
) -> None:
    _publish(store, tmp_path, "cities.pmtiles", b"12345")

    response = client.delete("/maps/cities.pmtiles")

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "message": "File cities.pmtiles deleted successfully",
    }
    assert store.objects == {}
    assert client.get("/maps").json()["data"] == []


def test_delete_missing_map_succeeds(client: testclient.TestClient) -> None:
    response = client.delete("/maps/never-published.pmtiles")

    assert response.status_code == 200
    assert response.json()["success"] is True


def test_delete_nested_key(
    client: testclient.TestClient,
    store: object_store.InMemoryObjectStore,
    tmp_path: pathlib.Path,
) -> None:
    _publish(store, tmp_path, "region/cities.pmtiles", b"1")

    response = client.delete("/maps/region/cities.pmtiles")

    assert response.status_code == 200
    assert "region/cities.pmtiles" not in store.objects


def test_convert_to_json_without_timestamp() -> None:
    artifact = PublishedArtifact(
        key="a.pmtiles",
        url="https://cdn.test/a.pmtiles",
        size=1,
        last_modified=None,
    )

    assert maps._convert_to_json(artifact) == {
        "key": "a.pmtiles",
        "url": "https://cdn.test/a.pmtiles",
        "size": 1,
        "last_modified": None,
    }
