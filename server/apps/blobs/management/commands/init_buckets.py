"""Management command to create the working and stable buckets."""

from typing import Any

from django.conf import settings
from django.core.management.base import BaseCommand

from server.apps.blobs.infrastructure.storage import get_object_store
from server.apps.blobs.logic.bucket_operations import ensure_buckets
from server.apps.blobs.logic.bucket_resolver import BucketResolver


class Command(BaseCommand):
    """Create missing blob buckets, with object versioning on."""

    help = 'Create the working and stable blob buckets if missing'

    def add_arguments(self, parser: Any) -> None:
        """Add command line arguments.

        Args:
            parser: Argument parser.
        """
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Show which buckets are missing without creating them',
        )
        parser.add_argument(
            '--no-versioning',
            action='store_true',
            help='Do not enable object versioning on created buckets',
        )

    def handle(self, *args: Any, **options: Any) -> None:
        """Execute the bucket bootstrap.

        Args:
            args: Positional arguments (unused).
            options: Command options.
        """
        object_store = get_object_store()
        resolver = BucketResolver(settings.BLOB_BUCKET_BASE_NAME)

        if options['dry_run']:
            for bucket in resolver.all_buckets():
                if object_store.bucket_exists(bucket):
                    self.stdout.write(f'Bucket {bucket} already exists')
                else:
                    self.stdout.write(f'Would create bucket {bucket}')
            return

        versioning = (
            settings.BLOB_VERSIONING_ENABLED and not options['no_versioning']
        )
        created = ensure_buckets(
            object_store,
            resolver,
            versioning=versioning,
        )

        for bucket, was_created in created.items():
            if was_created:
                self.stdout.write(f'Created bucket {bucket}')
            else:
                self.stdout.write(f'Bucket {bucket} already exists')

        self.stdout.write(
            self.style.SUCCESS(
                f'Created {sum(created.values())} of {len(created)} buckets',
            ),
        )
