"""Object store gateways.

Re-exports the store protocol and its factory so routes and the pipeline
depend on the interface rather than on boto3.

Example:
    >>> from pmtiles_publisher.storage import get_object_store
    >>> store = get_object_store(settings)
"""

from pmtiles_publisher.storage.object_store import (
    InMemoryObjectStore,
    ObjectStoreProtocol,
    S3ObjectStore,
    get_object_store,
)

__all__ = [
    "InMemoryObjectStore",
    "ObjectStoreProtocol",
    "S3ObjectStore",
    "get_object_store",
]
