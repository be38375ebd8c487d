"""Error types raised while resolving and composing bz dependencies."""

from typing import Sequence


class BzError(Exception):
    """Base class for every error bz reports to the user."""


class CoordinateFormatError(BzError, ValueError):
    """A dependency string is not in ``server/owner/repo[@version]`` form."""


class UnresolvableCoordinateError(BzError):
    """No registered resolver could lock a fuzzy coordinate."""

    def __init__(self, coord, reason: str = "no resolver matched"):
        self.coord = coord
        super().__init__(f"Unable to resolve dependency '{coord}': {reason}")


class CircularDependencyError(BzError):
    """A dependency appears twice in the same ancestor chain."""

    def __init__(self, chain: Sequence[str], item: str):
        self.chain = tuple(chain) + (item,)
        super().__init__(f"Detected circular dependency: {'->'.join(self.chain)}")


class DownloadError(BzError):
    """No resolver could download the artifact of a locked coordinate."""


class ExtractionError(BzError):
    """An archive could not be extracted into the cache."""


class TriggerError(BzError):
    """An install or pre-run trigger failed."""


class ConfigError(BzError):
    """A project config file could not be read."""


class LockFileReadError(BzError):
    """A lock file is missing or could not be parsed."""


class LockFileWriteError(BzError):
    """A lock file could not be written."""
