"""Business logic for bootstrapping the managed buckets."""

import logging

from server.apps.blobs.infrastructure.storage import ObjectStoreClient
from server.apps.blobs.logic.bucket_resolver import BucketResolver

logger = logging.getLogger(__name__)


def ensure_buckets(
    object_store: ObjectStoreClient,
    resolver: BucketResolver,
    *,
    versioning: bool = True,
) -> dict[str, bool]:
    """Create the working and stable buckets when they are missing.

    Versioning is only switched on for buckets created here, existing
    buckets keep whatever configuration they have.

    Args:
        object_store: Client for the S3-compatible backend.
        resolver: Source of the managed bucket names.
        versioning: Enable native object versioning on new buckets.

    Returns:
        Mapping of bucket name to whether it was created.
    """
    created: dict[str, bool] = {}
    for bucket in resolver.all_buckets():
        if object_store.bucket_exists(bucket):
            logger.info('Bucket %s already exists', bucket)
            created[bucket] = False
            continue

        object_store.make_bucket(bucket)
        if versioning:
            object_store.enable_versioning(bucket)
        logger.info(
            'Bucket %s created (versioning %s)',
            bucket,
            'enabled' if versioning else 'disabled',
        )
        created[bucket] = True
    return created
