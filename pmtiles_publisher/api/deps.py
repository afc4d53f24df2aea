"""Shared FastAPI dependencies for the publisher routers."""

import fastapi

from pmtiles_publisher.core import config
from pmtiles_publisher.services import pipeline, staging, tippecanoe
from pmtiles_publisher.storage import object_store


def get_object_store(
    request: fastapi.Request,
) -> object_store.ObjectStoreProtocol:
    """Return the process-wide object store created by create_app.

    Args:
        request: Incoming request, used to reach the application state.

    Returns:
        ObjectStoreProtocol implementation (S3ObjectStore in production).
    """
    store: object_store.ObjectStoreProtocol = request.app.state.object_store
    return store


def get_pipeline(
    settings: config.Settings = fastapi.Depends(config.get_settings),  # noqa: B008
    store: object_store.ObjectStoreProtocol = fastapi.Depends(get_object_store),  # noqa: B008
) -> pipeline.PublishPipeline:
    """Assemble the publishing pipeline for a request.

    Args:
        settings: Application settings (injected via FastAPI Depends).
        store: Object store (injected via FastAPI Depends).

    Returns:
        PublishPipeline using the configured staging directory and
        tippecanoe executable.
    """
    return pipeline.PublishPipeline(
        staging=staging.StagingArea(
            settings.staging_dir,
            settings.max_upload_size_bytes,
        ),
        store=store,
        converter=tippecanoe.TippecanoeConverter(settings.tippecanoe_path),
    )
