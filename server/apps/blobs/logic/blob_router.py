"""Dual-bucket blob routing.

Every operation resolves the caller's buckets through
:class:`BucketResolver` and talks to the object store through
:class:`ObjectStoreClient`:

- writes (upload, tag set/delete) go to the role's primary bucket,
- reads try the role's search order and stop at the first bucket that
  answers,
- delete always targets both managed buckets.

The caller identity is trusted as given, authorization happens before
the router is called.
"""

import base64
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import BinaryIO, Final, TypeVar, final

from boto3.exceptions import Boto3Error
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

from server.apps.blobs.exceptions import BackendFailureError, BlobNotFoundError
from server.apps.blobs.infrastructure.metadata import (
    blob_metadata_from_stat,
    build_object_metadata,
    detect_mime_type,
)
from server.apps.blobs.infrastructure.storage import (
    ObjectStoreClient,
    get_object_store,
)
from server.apps.blobs.logic.bucket_resolver import BucketResolver
from server.apps.blobs.logic.tag_codec import decode_tags, encode_tags
from server.apps.blobs.models import (
    NULL_VERSION_ID,
    BlobMetadata,
    BlobVersion,
    CallerIdentity,
    DownloadedBlob,
    ObjectEntry,
)

_ResultT = TypeVar('_ResultT')

#: Errors that mean "this bucket could not answer", never programming errors
BACKEND_ERRORS: Final = (ClientError, BotoCoreError, Boto3Error)

logger = logging.getLogger(__name__)


@final
class BlobRouter:
    """Routes blob operations to the working and stable buckets."""

    def __init__(
        self,
        object_store: ObjectStoreClient,
        resolver: BucketResolver,
    ) -> None:
        """Build a router.

        Args:
            object_store: Client for the S3-compatible backend.
            resolver: Role to bucket resolution.
        """
        self._store = object_store
        self._resolver = resolver

    def upload(  # noqa: WPS211
        self,
        name: str,
        stream: BinaryIO,
        caller: CallerIdentity,
        content_type: str | None = None,
        tags: Sequence[str] | None = None,
        metadata: Mapping[str, str] | None = None,
    ) -> str:
        """Store a blob in the caller's primary bucket.

        Re-uploading a name creates a new version when the bucket has
        versioning on, otherwise it overwrites.

        Args:
            name: Blob name, used verbatim as the object key.
            stream: Readable binary stream with the content.
            caller: Authenticated caller.
            content_type: MIME type, guessed from the name if omitted.
            tags: Ordered tags to attach right after the upload.
            metadata: Extra metadata (category, reviewed, ...).

        Returns:
            The stored name.

        Raises:
            BackendFailureError: If the upload or tag write fails.
        """
        bucket = self._resolver.primary_bucket(caller.role)
        object_metadata = build_object_metadata(caller.username, metadata)

        try:
            self._store.put(
                bucket,
                name,
                stream,
                content_type or detect_mime_type(name),
                object_metadata,
            )
        except BACKEND_ERRORS as error:
            raise BackendFailureError('upload', name, bucket) from error

        if tags:
            self._write_tags('upload', bucket, name, encode_tags(tags))

        logger.info(
            'Uploaded %s to %s for %s',
            name,
            bucket,
            caller.username,
        )
        return name

    def download(self, name: str, caller: CallerIdentity) -> DownloadedBlob:
        """Open a blob from the first bucket in search order holding it.

        Args:
            name: Blob name.
            caller: Authenticated caller.

        Returns:
            DownloadedBlob with an unread streaming body.

        Raises:
            BlobNotFoundError: If no searched bucket has the blob.
        """
        return self._first_success(
            caller,
            name,
            lambda bucket: self._store.get(bucket, name),
        )

    def download_version(
        self,
        name: str,
        version_id: str,
        caller: CallerIdentity,
    ) -> DownloadedBlob:
        """Open a specific revision of a blob.

        A bucket lacking the object or that version is skipped.

        Args:
            name: Blob name.
            version_id: Version identifier from :meth:`list_versions`.
            caller: Authenticated caller.

        Returns:
            DownloadedBlob for that revision.

        Raises:
            BlobNotFoundError: If no searched bucket has the revision.
        """
        return self._first_success(
            caller,
            name,
            lambda bucket: self._store.get(bucket, name, version_id),
            version_id=version_id,
        )

    def download_base64(self, name: str, caller: CallerIdentity) -> str:
        """Read a whole blob and return it base64 encoded.

        Args:
            name: Blob name.
            caller: Authenticated caller.

        Returns:
            Base64 text of the blob content.

        Raises:
            BlobNotFoundError: If no searched bucket has the blob.
        """
        blob = self.download(name, caller)
        try:
            content = blob.body.read()
        finally:
            blob.body.close()
        return base64.b64encode(content).decode('ascii')

    def exists(self, name: str, caller: CallerIdentity) -> bool:
        """Check whether any searched bucket holds the blob.

        Args:
            name: Blob name.
            caller: Authenticated caller.

        Returns:
            True on the first bucket where the metadata probe succeeds.
        """
        try:
            self._first_success(
                caller,
                name,
                lambda bucket: self._store.stat(bucket, name),
            )
        except BlobNotFoundError:
            return False
        return True

    def get_metadata(self, name: str, caller: CallerIdentity) -> BlobMetadata:
        """Read a blob's metadata from the first bucket holding it.

        Args:
            name: Blob name.
            caller: Authenticated caller.

        Returns:
            BlobMetadata of the visible blob.

        Raises:
            BlobNotFoundError: If no searched bucket has the blob.
        """
        return self._first_success(
            caller,
            name,
            lambda bucket: blob_metadata_from_stat(
                name,
                bucket,
                self._store.stat(bucket, name),
            ),
        )

    def delete(self, name: str, caller: CallerIdentity) -> bool:
        """Remove a blob from both managed buckets.

        Both buckets are always tried regardless of the caller's role,
        so no copy is left behind in a bucket the caller cannot see.

        Args:
            name: Blob name.
            caller: Authenticated caller.

        Returns:
            True if removal succeeded in at least one bucket.
        """
        deleted = False
        for bucket in self._resolver.all_buckets():
            try:
                self._store.remove(bucket, name)
            except BACKEND_ERRORS:
                continue
            deleted = True

        if deleted:
            logger.info('Deleted %s for %s', name, caller.username)
        else:
            logger.warning(
                'Delete of %s failed in every bucket for %s',
                name,
                caller.username,
            )
        return deleted

    def list_names(self, caller: CallerIdentity) -> list[str]:
        """Names of every blob the caller can see.

        Args:
            caller: Authenticated caller.

        Returns:
            Unique names, in first-seen order across the search order.
        """
        names: dict[str, None] = {}
        for _, entry in self._visible_entries(caller):
            names.setdefault(entry.name)
        return list(names)

    def list_with_metadata(self, caller: CallerIdentity) -> list[BlobMetadata]:
        """Metadata of every blob the caller can see.

        Objects whose metadata probe fails are left out.

        Args:
            caller: Authenticated caller.

        Returns:
            One record per unique name; the first bucket in search order
            wins when both hold the same name.
        """
        records: dict[str, BlobMetadata] = {}
        for bucket, entry in self._visible_entries(caller):
            if entry.name in records:
                continue
            try:
                stat = self._store.stat(bucket, entry.name)
            except BACKEND_ERRORS:
                logger.debug(
                    'Skipping %s/%s, metadata probe failed',
                    bucket,
                    entry.name,
                )
                continue
            records[entry.name] = blob_metadata_from_stat(
                entry.name,
                bucket,
                stat,
            )
        return list(records.values())

    def get_tags(self, name: str, caller: CallerIdentity) -> list[str]:
        """Tags of a blob, from the first bucket with a readable tag set.

        An empty tag set still counts as readable and ends the search.

        Args:
            name: Blob name.
            caller: Authenticated caller.

        Returns:
            Tags, or an empty list if no searched bucket has the blob.
        """
        try:
            tag_map = self._first_success(
                caller,
                name,
                lambda bucket: self._store.get_tags(bucket, name),
            )
        except BlobNotFoundError:
            return []
        return decode_tags(tag_map)

    def set_tags(
        self,
        name: str,
        tags: Sequence[str],
        caller: CallerIdentity,
    ) -> None:
        """Replace a blob's tags in the caller's primary bucket.

        Args:
            name: Blob name.
            tags: New ordered tags, replaces the previous set entirely.
            caller: Authenticated caller.

        Raises:
            BackendFailureError: If the tag write fails.
        """
        bucket = self._resolver.primary_bucket(caller.role)
        self._write_tags('set tags on', bucket, name, encode_tags(tags))

    def delete_tags(self, name: str, caller: CallerIdentity) -> None:
        """Clear a blob's tags in the caller's primary bucket.

        Args:
            name: Blob name.
            caller: Authenticated caller.

        Raises:
            BackendFailureError: If the tag write fails.
        """
        bucket = self._resolver.primary_bucket(caller.role)
        self._write_tags('delete tags on', bucket, name, {})

    def list_versions(
        self,
        name: str,
        caller: CallerIdentity,
    ) -> list[BlobVersion]:
        """Revision history of a blob, newest first.

        The first bucket in search order with any revision of the exact
        name is used; histories are never merged across buckets.

        Args:
            name: Blob name.
            caller: Authenticated caller.

        Returns:
            Versions sorted by last-modified time, descending. Empty if
            no searched bucket has the blob.
        """
        for bucket in self._resolver.search_order(caller.role):
            try:
                versions = [
                    _to_version(entry)
                    for entry in self._store.list_objects(
                        bucket,
                        name,
                        include_versions=True,
                    )
                    if entry.name == name
                ]
            except BACKEND_ERRORS:
                logger.debug('Cannot list versions of %s in %s', name, bucket)
                continue
            if versions:
                versions.sort(
                    key=lambda version: version.last_modified,
                    reverse=True,
                )
                return versions
        return []

    def _first_success(
        self,
        caller: CallerIdentity,
        name: str,
        operation: Callable[[str], _ResultT],
        version_id: str | None = None,
    ) -> _ResultT:
        """Run ``operation`` per bucket in search order until one works.

        Backend errors only move on to the next bucket.

        Raises:
            BlobNotFoundError: Once every bucket has failed.
        """
        buckets = self._resolver.search_order(caller.role)
        for bucket in buckets:
            try:
                return operation(bucket)
            except BACKEND_ERRORS as error:
                logger.debug('%s not available in %s: %s', name, bucket, error)
        raise BlobNotFoundError(name, buckets, version_id)

    def _visible_entries(
        self,
        caller: CallerIdentity,
    ) -> Iterable[tuple[str, ObjectEntry]]:
        for bucket in self._resolver.search_order(caller.role):
            try:
                entries = list(self._store.list_objects(bucket))
            except BACKEND_ERRORS:
                logger.debug('Cannot list bucket %s', bucket)
                continue
            for entry in entries:
                yield bucket, entry

    def _write_tags(
        self,
        operation: str,
        bucket: str,
        name: str,
        tag_map: dict[str, str],
    ) -> None:
        try:
            self._store.set_tags(bucket, name, tag_map)
        except BACKEND_ERRORS as error:
            raise BackendFailureError(operation, name, bucket) from error


def _to_version(entry: ObjectEntry) -> BlobVersion:
    return BlobVersion(
        version_id=entry.version_id or NULL_VERSION_ID,
        last_modified=entry.last_modified,
        size=entry.size,
        etag=entry.etag,
        is_latest=entry.is_latest,
    )


def get_blob_router() -> BlobRouter:
    """Router wired to the configured object store and bucket base name.

    Returns:
        BlobRouter instance.
    """
    return BlobRouter(
        get_object_store(),
        BucketResolver(settings.BLOB_BUCKET_BASE_NAME),
    )
