"""Domain models for blobs app.

Nothing here is persisted in a relational database: blobs, their
metadata, tags and versions all live in the object store. These are
the value types passed between the router, the bucket resolver and
the object store client.
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Final, final

from botocore.response import StreamingBody
from django.db import models

#: Version id S3 reports for objects written before versioning was on
NULL_VERSION_ID: Final = 'null'


class Role(models.IntegerChoices):
    """Ordinal privilege level of a caller, higher is more privileged."""

    VIEWER = 1, 'Viewer'
    CONTRIBUTOR = 2, 'Contributor'
    ADMIN = 3, 'Admin'


@final
class Bucket(enum.Enum):
    """One of the two managed partitions of the object store.

    The value is the suffix appended to the configured base name.
    """

    WORKING = '-working'
    STABLE = '-stable'

    def full_name(self, base_name: str) -> str:
        """Build the concrete bucket name.

        Args:
            base_name: Configured bucket base name.

        Returns:
            Bucket name, e.g. 'calcpad-storage-stable'.
        """
        return f'{base_name}{self.value}'


@final
@dataclass(frozen=True, slots=True)
class CallerIdentity:
    """Authenticated caller, resolved before any router operation."""

    user_id: str
    username: str
    role: Role


@final
@dataclass(frozen=True, slots=True)
class ObjectEntry:
    """One row of a bucket listing (an object or one of its versions)."""

    name: str
    size: int
    last_modified: datetime
    etag: str
    version_id: str | None = None
    is_latest: bool = True


@final
@dataclass(frozen=True, slots=True)
class ObjectStat:
    """Result of a metadata probe (HEAD) on a single object."""

    size: int
    last_modified: datetime
    etag: str
    content_type: str | None = None
    version_id: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)


@final
@dataclass(frozen=True, slots=True)
class BlobMetadata:
    """Listing record for a blob, with its workflow attributes."""

    name: str
    bucket: str
    size: int
    last_modified: datetime
    etag: str
    content_type: str | None = None
    created_by: str | None = None
    created_at: str | None = None
    category: str | None = None
    created: str | None = None
    updated: str | None = None
    reviewed: str | None = None
    tested: str | None = None
    version_id: str | None = None
    is_latest: bool = True


@final
@dataclass(frozen=True, slots=True)
class BlobVersion:
    """One immutable revision of a blob."""

    version_id: str
    last_modified: datetime
    size: int
    etag: str
    is_latest: bool


@final
@dataclass(frozen=True, slots=True)
class DownloadedBlob:
    """Streaming download handle.

    ``body`` is the backend's streaming body: read it in chunks and
    close it when the consumer goes away, an abandoned download never
    touches the stored object.
    """

    name: str
    bucket: str
    body: StreamingBody
    content_type: str | None = None
    size: int | None = None
    version_id: str | None = None
