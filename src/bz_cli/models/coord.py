"""Dependency coordinates: ``server/owner/repo[@version]``."""

from dataclasses import dataclass
from typing import Any, Dict

from ..errors import CoordinateFormatError
from .version import Version


@dataclass(frozen=True)
class FuzzyCoord:
    """An unresolved dependency reference as written in a project config.

    ``version`` may be empty (latest), exact (``1.2.3``) or a pattern
    (``1.2.*``); a leading ``v`` is removed while parsing.
    """
    original_string: str
    server: str
    owner: str
    repo: str
    version: str = ""

    @classmethod
    def parse(cls, dependency_str: str) -> "FuzzyCoord":
        """Parse a dependency string into a FuzzyCoord.

        Supports formats:
        - github.com/owner/repo
        - github.com/owner/repo@1.2.3
        - github.com/owner/repo@v1.2.*

        Args:
            dependency_str: The dependency string to parse

        Returns:
            FuzzyCoord: Parsed coordinate

        Raises:
            CoordinateFormatError: If server, owner or repo is missing
        """
        parts = dependency_str.split("/")
        if len(parts) < 3:
            raise CoordinateFormatError(
                f"Unable to parse dependency '{dependency_str}': expected 'server/owner/repo[@version]'"
            )

        server, owner, repo_version = parts[0], parts[1], parts[2]
        if not server:
            raise CoordinateFormatError(f"Unable to parse dependency '{dependency_str}': server name is required")
        if not owner:
            raise CoordinateFormatError(f"Unable to parse dependency '{dependency_str}': owner name is required")

        repo_parts = repo_version.split("@")
        repo = repo_parts[0]
        version = repo_parts[1] if len(repo_parts) > 1 else ""
        if version.startswith("v"):
            version = version[1:]

        if not repo:
            raise CoordinateFormatError(f"Unable to parse dependency '{dependency_str}': repo name is required")

        return cls(
            original_string=dependency_str,
            server=server,
            owner=owner,
            repo=repo,
            version=version,
        )

    def canonical_name_no_version(self) -> str:
        return f"{self.server}/{self.owner}/{self.repo}"

    def __str__(self) -> str:
        if self.version:
            return f"{self.canonical_name_no_version()}@{self.version}"
        return self.canonical_name_no_version()


@dataclass(frozen=True)
class LockedCoord:
    """A fully resolved dependency identity with an exact version."""
    server: str
    owner: str
    repo: str
    version: Version

    def canonical_name_no_version(self) -> str:
        """``server/owner/repo``; cycle detection ignores versions."""
        return f"{self.server}/{self.owner}/{self.repo}"

    def to_dict(self) -> Dict[str, str]:
        return {
            "server": self.server,
            "owner": self.owner,
            "repo": self.repo,
            "version": str(self.version),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LockedCoord":
        if not isinstance(data, dict):
            raise ValueError(f"Locked dependency must be an object, got {type(data).__name__}")
        missing = [key for key in ("server", "owner", "repo") if not data.get(key)]
        if missing:
            raise ValueError(f"Locked dependency is missing {', '.join(missing)}: {data}")
        return cls(
            server=str(data["server"]),
            owner=str(data["owner"]),
            repo=str(data["repo"]),
            version=Version.parse(str(data.get("version") or "")),
        )

    def __str__(self) -> str:
        return f"{self.server}/{self.owner}/{self.repo}@{self.version.canonical()}"


def parse_coord(dependency_str: str) -> FuzzyCoord:
    return FuzzyCoord.parse(dependency_str)
