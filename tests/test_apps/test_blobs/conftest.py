"""Shared fixtures for blobs app tests."""

from io import BytesIO

import boto3
import pytest
from moto import mock_aws

from server.apps.blobs.infrastructure.storage import ObjectStoreClient
from server.apps.blobs.logic.blob_router import BlobRouter
from server.apps.blobs.logic.bucket_resolver import BucketResolver
from server.apps.blobs.models import CallerIdentity, Role

_BASE_NAME = 'test-blobs'


@pytest.fixture
def bucket_base_name():
    """Bucket base name used by every blob test.

    Returns:
        Base name the managed bucket names derive from.
    """
    return _BASE_NAME


@pytest.fixture
def working_bucket(bucket_base_name):
    """Name of the working bucket."""
    return f'{bucket_base_name}-working'


@pytest.fixture
def stable_bucket(bucket_base_name):
    """Name of the stable bucket."""
    return f'{bucket_base_name}-stable'


@pytest.fixture
def mock_s3(working_bucket, stable_bucket):
    """Mock S3 service with both managed buckets, versioning enabled.

    Yields:
        boto3 S3 resource with the working and stable buckets created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')

        for bucket_name in (working_bucket, stable_bucket):
            conn.create_bucket(Bucket=bucket_name)
            conn.BucketVersioning(bucket_name).enable()

        yield conn


@pytest.fixture
def s3_client(mock_s3):
    """Low-level boto3 client for the mocked S3 service."""
    return mock_s3.meta.client


@pytest.fixture
def object_store(s3_client):
    """Object store client over the mocked S3 service."""
    return ObjectStoreClient(s3_client)


@pytest.fixture
def resolver(bucket_base_name):
    """Bucket resolver for the test base name."""
    return BucketResolver(bucket_base_name)


@pytest.fixture
def router(object_store, resolver):
    """Blob router over the mocked S3 service."""
    return BlobRouter(object_store, resolver)


@pytest.fixture
def viewer():
    """Caller with the Viewer role."""
    return CallerIdentity(user_id='1', username='vera', role=Role.VIEWER)


@pytest.fixture
def contributor():
    """Caller with the Contributor role."""
    return CallerIdentity(
        user_id='2',
        username='carl',
        role=Role.CONTRIBUTOR,
    )


@pytest.fixture
def admin():
    """Caller with the Admin role."""
    return CallerIdentity(user_id='3', username='ada', role=Role.ADMIN)


@pytest.fixture
def put_object(s3_client):
    """Write an object straight into a bucket, bypassing the router.

    Returns:
        Callable taking bucket, key and content bytes.
    """
    def factory(bucket, key, content=b'content'):
        s3_client.upload_fileobj(BytesIO(content), bucket, key)

    return factory
