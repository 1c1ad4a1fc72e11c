"""Infrastructure layer for blobs app.

This package contains integrations with external systems:
- The S3-compatible object store client (MinIO/S3 via boto3)
- Object metadata building and parsing (content type, creator)

Keep infrastructure concerns separate from routing logic.
"""
