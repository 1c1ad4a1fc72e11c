"""Object store client for the S3-compatible backend."""

import logging
from collections.abc import Iterator, Mapping
from typing import Any, BinaryIO, Final, final

from botocore.client import BaseClient
from botocore.exceptions import ClientError
from django.core.files.storage import default_storage
from storages.backends.s3 import S3Storage

from server.apps.blobs.models import (
    NULL_VERSION_ID,
    DownloadedBlob,
    ObjectEntry,
    ObjectStat,
)

_MISSING_BUCKET_CODES: Final = frozenset(('404', 'NoSuchBucket', 'NotFound'))
_DEFAULT_REGION: Final = 'us-east-1'

logger = logging.getLogger(__name__)


@final
class BlobStorage(S3Storage):
    """S3 storage backend holding the object store connection settings.

    django-storages owns credentials, endpoint, region and the
    per-thread boto3 connection. Blob operations address buckets
    explicitly, so they go through :class:`ObjectStoreClient` built
    on top of :attr:`client`.
    """

    @property
    def client(self) -> BaseClient:
        """Low-level boto3 S3 client for this storage's connection."""
        return self.connection.meta.client


def _strip_etag(etag: str | None) -> str:
    return (etag or '').strip('"')


@final
class ObjectStoreClient:
    """Bucket-addressed operations over a boto3 S3 client.

    Backend errors surface as botocore or boto3 exceptions, deciding what
    they mean is up to the caller.
    """

    def __init__(self, client: BaseClient) -> None:
        """Wrap a boto3 S3 client.

        Args:
            client: boto3 S3 client (``boto3.client('s3')`` or
                :attr:`BlobStorage.client`).
        """
        self._client = client

    def put(  # noqa: WPS211
        self,
        bucket: str,
        key: str,
        stream: BinaryIO,
        content_type: str,
        metadata: Mapping[str, str],
    ) -> None:
        """Stream an object into a bucket.

        The managed transfer uploads in parts, an interrupted stream
        never commits a partial object.

        Args:
            bucket: Target bucket name.
            key: Object key.
            stream: Readable binary stream with the content.
            content_type: MIME type stored with the object.
            metadata: User metadata stored with the object.
        """
        try:
            logger.info('Uploading object to storage: %s/%s', bucket, key)
            self._client.upload_fileobj(
                stream,
                bucket,
                key,
                ExtraArgs={
                    'ContentType': content_type,
                    'Metadata': dict(metadata),
                },
            )
        except Exception:
            logger.exception(
                'Failed to upload object to storage: %s/%s',
                bucket,
                key,
            )
            raise
        logger.info('Successfully uploaded object: %s/%s', bucket, key)

    def get(
        self,
        bucket: str,
        key: str,
        version_id: str | None = None,
    ) -> DownloadedBlob:
        """Open an object (or one of its versions) for streaming.

        Args:
            bucket: Bucket name.
            key: Object key.
            version_id: Specific version to fetch, latest if None.

        Returns:
            DownloadedBlob with an unread streaming body.
        """
        params: dict[str, str] = {'Bucket': bucket, 'Key': key}
        if version_id is not None:
            params['VersionId'] = version_id
        response = self._client.get_object(**params)
        return DownloadedBlob(
            name=key,
            bucket=bucket,
            body=response['Body'],
            content_type=response.get('ContentType'),
            size=response.get('ContentLength'),
            version_id=response.get('VersionId'),
        )

    def stat(self, bucket: str, key: str) -> ObjectStat:
        """Probe object metadata without fetching content.

        Args:
            bucket: Bucket name.
            key: Object key.

        Returns:
            ObjectStat for the latest revision.
        """
        response = self._client.head_object(Bucket=bucket, Key=key)
        return ObjectStat(
            size=response.get('ContentLength', 0),
            last_modified=response['LastModified'],
            etag=_strip_etag(response.get('ETag')),
            content_type=response.get('ContentType'),
            version_id=response.get('VersionId'),
            metadata=dict(response.get('Metadata', {})),
        )

    def remove(self, bucket: str, key: str) -> None:
        """Delete an object.

        With versioning enabled this leaves a delete marker, the older
        revisions stay in the bucket's history.

        Args:
            bucket: Bucket name.
            key: Object key.
        """
        try:
            logger.info('Deleting object from storage: %s/%s', bucket, key)
            self._client.delete_object(Bucket=bucket, Key=key)
        except Exception:
            logger.exception(
                'Failed to delete object from storage: %s/%s',
                bucket,
                key,
            )
            raise
        logger.info('Successfully deleted object: %s/%s', bucket, key)

    def list_objects(
        self,
        bucket: str,
        prefix: str = '',
        *,
        recursive: bool = True,
        include_versions: bool = False,
    ) -> Iterator[ObjectEntry]:
        """Lazily list objects under a prefix.

        Args:
            bucket: Bucket name.
            prefix: Key prefix to list.
            recursive: Descend below '/' separators when True.
            include_versions: Yield every stored revision instead of
                only current objects. Delete markers are skipped.

        Yields:
            ObjectEntry per object (or per revision).
        """
        if include_versions:
            yield from self._list_versions(bucket, prefix, recursive=recursive)
            return

        paginator = self._client.get_paginator('list_objects_v2')
        for page in paginator.paginate(**self._list_params(
            bucket,
            prefix,
            recursive=recursive,
        )):
            for item in page.get('Contents', []):
                yield ObjectEntry(
                    name=item['Key'],
                    size=item.get('Size', 0),
                    last_modified=item['LastModified'],
                    etag=_strip_etag(item.get('ETag')),
                )

    def get_tags(self, bucket: str, key: str) -> dict[str, str]:
        """Read an object's tag set.

        Args:
            bucket: Bucket name.
            key: Object key.

        Returns:
            Tag mapping in the order the backend returned it.
        """
        response = self._client.get_object_tagging(Bucket=bucket, Key=key)
        return {
            tag['Key']: tag['Value']
            for tag in response.get('TagSet', [])
        }

    def set_tags(
        self,
        bucket: str,
        key: str,
        tags: Mapping[str, str],
    ) -> None:
        """Replace an object's tag set entirely.

        Args:
            bucket: Bucket name.
            key: Object key.
            tags: New tag mapping, empty clears every tag.
        """
        try:
            logger.info('Setting %d tags on %s/%s', len(tags), bucket, key)
            if tags:
                self._client.put_object_tagging(
                    Bucket=bucket,
                    Key=key,
                    Tagging={'TagSet': [
                        {'Key': tag_key, 'Value': tag_value}
                        for tag_key, tag_value in tags.items()
                    ]},
                )
            else:
                self._client.delete_object_tagging(Bucket=bucket, Key=key)
        except Exception:
            logger.exception('Failed to set tags on %s/%s', bucket, key)
            raise

    def bucket_exists(self, bucket: str) -> bool:
        """Check whether a bucket exists.

        Args:
            bucket: Bucket name.

        Returns:
            True if the bucket exists and is reachable.

        Raises:
            ClientError: For errors other than a missing bucket.
        """
        try:
            self._client.head_bucket(Bucket=bucket)
        except ClientError as error:
            if error.response['Error']['Code'] in _MISSING_BUCKET_CODES:
                return False
            raise
        return True

    def make_bucket(self, bucket: str) -> None:
        """Create a bucket in the client's region.

        Args:
            bucket: Bucket name.
        """
        params: dict[str, Any] = {'Bucket': bucket}
        region = self._client.meta.region_name
        if region and region != _DEFAULT_REGION:
            params['CreateBucketConfiguration'] = {
                'LocationConstraint': region,
            }
        try:
            logger.info('Creating bucket: %s', bucket)
            self._client.create_bucket(**params)
        except Exception:
            logger.exception('Failed to create bucket: %s', bucket)
            raise

    def enable_versioning(self, bucket: str) -> None:
        """Turn native object versioning on for a bucket.

        Args:
            bucket: Bucket name.
        """
        try:
            logger.info('Enabling versioning on bucket: %s', bucket)
            self._client.put_bucket_versioning(
                Bucket=bucket,
                VersioningConfiguration={'Status': 'Enabled'},
            )
        except Exception:
            logger.exception('Failed to enable versioning: %s', bucket)
            raise

    def _list_versions(
        self,
        bucket: str,
        prefix: str,
        *,
        recursive: bool,
    ) -> Iterator[ObjectEntry]:
        paginator = self._client.get_paginator('list_object_versions')
        for page in paginator.paginate(**self._list_params(
            bucket,
            prefix,
            recursive=recursive,
        )):
            for item in page.get('Versions', []):
                yield ObjectEntry(
                    name=item['Key'],
                    size=item.get('Size', 0),
                    last_modified=item['LastModified'],
                    etag=_strip_etag(item.get('ETag')),
                    version_id=item.get('VersionId') or NULL_VERSION_ID,
                    is_latest=item.get('IsLatest', False),
                )

    def _list_params(
        self,
        bucket: str,
        prefix: str,
        *,
        recursive: bool,
    ) -> dict[str, str]:
        params = {'Bucket': bucket, 'Prefix': prefix}
        if not recursive:
            params['Delimiter'] = '/'
        return params


def get_object_store() -> ObjectStoreClient:
    """Object store client using the configured default storage.

    Returns:
        ObjectStoreClient sharing the default storage's connection.
    """
    return ObjectStoreClient(default_storage.client)  # type: ignore[attr-defined]
