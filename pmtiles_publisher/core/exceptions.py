"""Error taxonomy of the publishing pipeline.

Each error carries a ``category`` so callers (and the HTTP layer) can tell
invalid input, invalid data and infrastructure failures apart:

- ClientInputError: no file, unsupported name or an oversized upload.
  Raised before anything is written to staging.
- ConversionError: tippecanoe rejected the data. Carries the tool's
  diagnostics verbatim. Nothing is published.
- StoreError: an object store call failed (put, list or delete).

Failures while removing staged files are only logged and therefore have
no exception type here.
"""

from __future__ import annotations


class PublisherError(Exception):
    """Base class for errors surfaced to callers of the pipeline."""

    category = "internal"


class ClientInputError(PublisherError):
    """The request itself is unusable (missing file, wrong extension)."""

    category = "client_input"


class UploadTooLargeError(ClientInputError):
    """The uploaded stream exceeded the configured size limit."""

    category = "upload_too_large"


class ConversionError(PublisherError):
    """Exception raised when tippecanoe fails to convert an upload.

    Attributes:
        filename: Original name of the upload that failed to convert.
        diagnostics: The tool's error output, unmodified.
    """

    category = "conversion"

    def __init__(self, filename: str, diagnostics: str) -> None:
        super().__init__(f"Conversion of {filename} failed")
        self.filename = filename
        self.diagnostics = diagnostics


class StoreError(PublisherError):
    """Exception raised when the object store rejects an operation.

    Attributes:
        operation: Store operation that failed ("put", "list", "delete").
        key: Object key involved, if any.
    """

    category = "store"

    def __init__(
        self,
        operation: str,
        message: str,
        key: str | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.key = key
