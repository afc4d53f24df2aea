"""Shared fixtures for publisher tests.

Patterns:
    - Settings point the staging directory at ``tmp_path`` so each test can
      assert the directory is empty after a request,
    - tippecanoe is replaced by a fake ``subprocess.run`` that writes a
      small archive, or fails when the input contains ``broken``,
    - The in-memory object store stands in for S3 behind the FastAPI
      dependency overrides.
"""

from __future__ import annotations

import pathlib
import subprocess
from typing import TYPE_CHECKING, Any

import pytest
from fastapi import testclient

from pmtiles_publisher import main
from pmtiles_publisher.api import deps
from pmtiles_publisher.core import config
from pmtiles_publisher.services import tippecanoe
from pmtiles_publisher.storage import object_store

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

FAKE_ARCHIVE = b"PMTiles\x03fake-archive"
TOOL_DIAGNOSTICS = "cities.geojson:1: Found ] at top level\n"


@pytest.fixture
def settings(tmp_path: pathlib.Path) -> config.Settings:
    test_settings = config.Settings(
        staging_dir=tmp_path / "staging",
        storage_backend="memory",
        aws_bucket_name="maps",
        aws_region="eu-central-1",
        allow_origins=["*"],
    )
    test_settings.ensure_directories()
    return test_settings


@pytest.fixture
def leftovers(
    settings: config.Settings,
) -> Callable[[], list[pathlib.Path]]:
    """Return a callable listing every file left in the staging directory."""

    def _list() -> list[pathlib.Path]:
        if not settings.staging_dir.exists():
            return []
        return sorted(settings.staging_dir.iterdir())

    return _list


@pytest.fixture
def store() -> object_store.InMemoryObjectStore:
    return object_store.InMemoryObjectStore(base_url="https://cdn.test/maps")


@pytest.fixture
def tool_calls(monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
    """Replace tippecanoe with a fake and record every command it gets."""
    calls: list[list[str]] = []

    def fake_run(
        command: list[str],
        *args: Any,
        **kwargs: Any,
    ) -> subprocess.CompletedProcess[str]:
        calls.append(list(command))
        output = pathlib.Path(command[command.index("-o") + 1])
        source = pathlib.Path(command[-1])
        if b"broken" in source.read_bytes():
            output.write_bytes(b"partial")
            return subprocess.CompletedProcess(
                args=command,
                returncode=1,
                stdout="",
                stderr=TOOL_DIAGNOSTICS,
            )

        output.write_bytes(FAKE_ARCHIVE)
        return subprocess.CompletedProcess(
            args=command,
            returncode=0,
            stdout="",
            stderr="",
        )

    monkeypatch.setattr(tippecanoe.subprocess, "run", fake_run)
    return calls


@pytest.fixture
def client(
    settings: config.Settings,
    store: object_store.InMemoryObjectStore,
) -> Iterator[testclient.TestClient]:
    app = main.create_app()
    app.dependency_overrides[config.get_settings] = lambda: settings
    app.dependency_overrides[deps.get_object_store] = lambda: store
    try:
        yield testclient.TestClient(app)
    finally:
        app.dependency_overrides.clear()
