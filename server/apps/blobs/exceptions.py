"""Exceptions for blobs app."""

from collections.abc import Sequence


class BlobStorageError(Exception):
    """Base class for every blob routing failure."""


class BlobNotFoundError(BlobStorageError):
    """Raised when no searched bucket holds the requested blob.

    This is an expected outcome (e.g. probing a name), callers should
    treat it differently from :class:`BackendFailureError`.
    """

    def __init__(
        self,
        name: str,
        buckets: Sequence[str],
        version_id: str | None = None,
    ) -> None:
        """Initialize BlobNotFoundError.

        Args:
            name: Blob name that was requested.
            buckets: Bucket names searched, in search order.
            version_id: Requested version, if any.
        """
        self.name = name
        self.buckets = tuple(buckets)
        self.version_id = version_id

        target = name if version_id is None else f'{name} version {version_id}'
        super().__init__(
            f'File {target} not found in {", ".join(self.buckets)}',
        )


class BackendFailureError(BlobStorageError):
    """Raised when the object store rejects a write or is unreachable."""

    def __init__(self, operation: str, name: str, bucket: str) -> None:
        """Initialize BackendFailureError.

        Args:
            operation: Router operation that failed (e.g. 'upload').
            name: Blob name the operation targeted.
            bucket: Bucket the failing call was issued against.
        """
        self.operation = operation
        self.name = name
        self.bucket = bucket
        super().__init__(
            f'Object store failed to {operation} {name} in bucket {bucket}',
        )
