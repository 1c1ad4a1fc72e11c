"""Role to bucket visibility policy."""

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final, final

from django.core.exceptions import ImproperlyConfigured

from server.apps.blobs.models import Bucket, Role


@final
@dataclass(frozen=True, slots=True)
class VisibilityPolicy:
    """Which bucket a role writes to and which buckets it reads from.

    ``search_order`` always starts with ``primary``.
    """

    primary: Bucket
    search_order: tuple[Bucket, ...]


_STAGING_ONLY: Final = VisibilityPolicy(
    primary=Bucket.WORKING,
    search_order=(Bucket.WORKING,),
)

#: Admins read stable first, so stable shadows working on name clashes
_FULL_VISIBILITY: Final = VisibilityPolicy(
    primary=Bucket.STABLE,
    search_order=(Bucket.STABLE, Bucket.WORKING),
)

DEFAULT_POLICIES: Final[Mapping[Role, VisibilityPolicy]] = MappingProxyType({
    Role.VIEWER: _STAGING_ONLY,
    Role.CONTRIBUTOR: _STAGING_ONLY,
    Role.ADMIN: _FULL_VISIBILITY,
})


@final
class BucketResolver:
    """Resolves concrete bucket names for a caller role."""

    def __init__(
        self,
        base_name: str,
        policies: Mapping[Role, VisibilityPolicy] = DEFAULT_POLICIES,
    ) -> None:
        """Build a resolver for the buckets derived from ``base_name``.

        Args:
            base_name: Configured bucket base name.
            policies: Visibility policy per role, must cover every role.

        Raises:
            ImproperlyConfigured: If base name is empty or a role has
                no policy.
        """
        if not base_name:
            raise ImproperlyConfigured('Bucket base name cannot be empty')

        missing = [role.label for role in Role if role not in policies]
        if missing:
            raise ImproperlyConfigured(
                'No bucket visibility policy for roles: {0}'.format(
                    ', '.join(missing),
                ),
            )

        self.base_name = base_name
        self._policies = policies

    def bucket_name(self, bucket: Bucket) -> str:
        """Concrete name of a managed bucket."""
        return bucket.full_name(self.base_name)

    def all_buckets(self) -> list[str]:
        """Every managed bucket, working first.

        Returns:
            Names of the working and stable buckets.
        """
        return [self.bucket_name(bucket) for bucket in Bucket]

    def primary_bucket(self, role: Role) -> str:
        """Bucket used for writes (upload, tag set, tag delete).

        Args:
            role: Caller role.

        Returns:
            Bucket name.
        """
        return self.bucket_name(self._policies[role].primary)

    def search_order(self, role: Role) -> list[str]:
        """Buckets read operations try, in order.

        Args:
            role: Caller role.

        Returns:
            Bucket names; the first one holding a name wins.
        """
        return [
            self.bucket_name(bucket)
            for bucket in self._policies[role].search_order
        ]
