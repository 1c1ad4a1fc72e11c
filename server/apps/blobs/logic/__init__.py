"""Business logic layer for blobs app.

This package contains the blob routing policy:
- Bucket resolution per caller role
- Tag list encoding to the flat tag store
- Blob operations with cross-bucket fallback

Infrastructure (the boto3 object store client) lives in
``server.apps.blobs.infrastructure``.
"""
