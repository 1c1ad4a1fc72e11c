"""Object metadata utilities for blobs."""

import mimetypes
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Final

from django.utils import timezone

from server.apps.blobs.models import BlobMetadata, ObjectStat

DEFAULT_CONTENT_TYPE: Final = 'application/octet-stream'

CREATED_BY_KEY: Final = 'created-by'
CREATED_AT_KEY: Final = 'created-at'

#: Optional workflow attributes callers may attach at upload time
WORKFLOW_FIELDS: Final = (
    'category',
    'created',
    'updated',
    'reviewed',
    'tested',
)


def detect_mime_type(filename: str) -> str:
    """Detect MIME type from a blob name.

    Uses Python's built-in mimetypes module to guess MIME type
    from filename extension.

    Args:
        filename: Blob name with extension.

    Returns:
        MIME type string (e.g., 'image/jpeg', 'application/pdf').
        Returns 'application/octet-stream' if type cannot be determined.
    """
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return DEFAULT_CONTENT_TYPE
    return mime_type


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp the way stored metadata expects it.

    Args:
        moment: Aware datetime.

    Returns:
        UTC ISO-8601 string with milliseconds, e.g.
        '2024-05-01T10:00:00.000Z'.
    """
    utc_moment = moment.astimezone(UTC)
    return utc_moment.isoformat(timespec='milliseconds').replace(
        '+00:00',
        'Z',
    )


def build_object_metadata(
    creator: str,
    extra: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> dict[str, str]:
    """Build the metadata bag persisted with an uploaded object.

    Caller-supplied fields are applied last and win on key clashes.

    Args:
        creator: Username of the uploader.
        extra: Additional metadata (workflow fields etc.).
        now: Upload time, defaults to the current time.

    Returns:
        Flat string mapping stored as object metadata.
    """
    metadata = {
        CREATED_BY_KEY: creator,
        CREATED_AT_KEY: format_timestamp(now or timezone.now()),
    }
    if extra:
        metadata.update(extra)
    return metadata


def blob_metadata_from_stat(
    name: str,
    bucket: str,
    stat: ObjectStat,
) -> BlobMetadata:
    """Combine a metadata probe result into a listing record.

    Args:
        name: Blob name.
        bucket: Bucket the probe ran against.
        stat: Probe result.

    Returns:
        BlobMetadata for the blob's latest revision.
    """
    meta = stat.metadata
    return BlobMetadata(
        name=name,
        bucket=bucket,
        size=stat.size,
        last_modified=stat.last_modified,
        etag=stat.etag,
        content_type=stat.content_type,
        created_by=meta.get(CREATED_BY_KEY),
        created_at=meta.get(CREATED_AT_KEY),
        version_id=stat.version_id,
        **{
            workflow_field: meta.get(workflow_field)
            for workflow_field in WORKFLOW_FIELDS
        },
    )
