"""Base interface for dependency resolvers."""

from abc import ABC, abstractmethod
from typing import Optional

from ...models.coord import FuzzyCoord, LockedCoord


class Resolver(ABC):
    """Turns fuzzy coordinates into locked ones and downloads their artifacts.

    Resolvers are consulted in registration order. Returning ``None`` means
    "not mine" and lets the next resolver try; raising aborts resolution.
    """

    @abstractmethod
    def resolve_coord(self, coord: FuzzyCoord) -> Optional[LockedCoord]:
        """Resolve a fuzzy coordinate to an exact version.

        Args:
            coord (FuzzyCoord): Coordinate as declared in a project config.

        Returns:
            LockedCoord: The locked coordinate, or None if this resolver does
                not know the coordinate.
        """
        pass

    @abstractmethod
    def download_resolved_coord(self, coord: LockedCoord, dest_dir: str) -> Optional[str]:
        """Download the artifact of a locked coordinate into ``dest_dir``.

        Args:
            coord (LockedCoord): Coordinate to download.
            dest_dir (str): Directory that receives the archive.

        Returns:
            str: Path of the downloaded archive, or None if this resolver
                cannot provide it.
        """
        pass

    def __str__(self) -> str:
        return f"{type(self).__name__}()"
