"""Fallback resolver registered after the remote ones."""

from typing import Optional

from ...models.coord import FuzzyCoord, LockedCoord
from ...utils.console import _rich_debug
from .base import Resolver


class LocalDevResolver(Resolver):
    """Resolver for dependencies under local development.

    It never claims a coordinate, so a dependency that no remote resolver
    knows ends in an UnresolvableCoordinateError rather than a silent skip.
    """

    def resolve_coord(self, coord: FuzzyCoord) -> Optional[LockedCoord]:
        _rich_debug(f"LocalDevResolver.resolve_coord({coord})")
        return None

    def download_resolved_coord(self, coord: LockedCoord, dest_dir: str) -> Optional[str]:
        return None
